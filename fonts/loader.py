from __future__ import annotations

import logging
from pathlib import Path

from PySide6.QtGui import QFontDatabase

logger = logging.getLogger(__name__)

FONT_SUFFIXES = {".ttf", ".otf"}


def iter_font_files(fonts_dir: Path) -> list[Path]:
    """Return font files below a directory in a stable order; missing directories are empty."""
    if not fonts_dir.is_dir():
        return []
    return sorted(path for path in fonts_dir.rglob("*") if path.suffix.lower() in FONT_SUFFIXES)


def register_bundled_fonts(fonts_dir: Path) -> dict[str, Path]:
    """
    Add every font file in fonts_dir to the Qt font database.
    Returns {family: font file}; the first file seen for a family wins.
    """
    registry: dict[str, Path] = {}
    for font_path in iter_font_files(fonts_dir):
        font_id = QFontDatabase.addApplicationFont(str(font_path))
        if font_id < 0:
            logger.warning("Failed to register font file %s", font_path)
            continue
        for family in QFontDatabase.applicationFontFamilies(font_id):
            registry.setdefault(family, font_path)
    logger.debug("Registered %d bundled font families", len(registry))
    return registry
