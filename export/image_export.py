"""Image export for the composited result."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Sequence

from config import EXPORT_FILENAME
from core.raster import Raster, raster_to_qimage
from core.text_layers import TextElement
from core.viewport import ViewportTransform
from export.compositor import composite

logger = logging.getLogger(__name__)


def default_export_path(directory: Optional[Path] = None, filename: str = EXPORT_FILENAME) -> Path:
    """Suggested destination for an export: edited-image.png in the given folder."""
    return Path(directory or Path.home()) / (filename or EXPORT_FILENAME)


def export_image(
    output_path: Path,
    background: Raster,
    foreground: Raster,
    elements: Sequence[TextElement],
    transform: Optional[ViewportTransform],
) -> Path:
    """
    Composite the layers and save the result.

    The file is written as PNG unless the path names another format Qt can encode.
    Export is rendered in image space and matches the on-screen preview.
    """
    output_path = Path(output_path)
    if not output_path.suffix:
        output_path = output_path.with_suffix(".png")
    result = composite(background, foreground, tuple(elements), transform)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    image = raster_to_qimage(result)
    fmt = output_path.suffix.lstrip(".").upper() or "PNG"
    if not image.save(str(output_path), fmt):
        raise OSError(f"Failed to write exported image: {output_path}")
    logger.info("Exported %dx%d image to %s", result.width, result.height, output_path)
    return output_path
