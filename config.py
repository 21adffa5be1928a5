"""Default configuration for the Behind Text Editor desktop application."""
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

# Application identity
APP_NAME = "Behind Text Editor"
APP_VERSION = "0.1.0"

# Paths
BASE_PATH = Path(__file__).resolve().parent
RESOURCES_DIR = BASE_PATH / "resources"

# Export
EXPORT_FILENAME = "edited-image.png"

# Font families offered for text layers.
FONT_OPTIONS = (
    "Arial",
    "Helvetica",
    "Times New Roman",
    "Georgia",
    "Verdana",
    "Impact",
    "Montserrat",
    "Playfair Display",
    "Lobster",
    "Roboto",
    "Poppins",
    "Oswald",
    "Lato",
    "Raleway",
)
DEFAULT_FONT_FAMILY = "Impact"

# Font size range offered by the properties panel (edit-space px).
MIN_UI_FONT_SIZE = 12
MAX_UI_FONT_SIZE = 250


@dataclass
class AppConfig:
    theme: str = "system"
    default_font_family: str = DEFAULT_FONT_FAMILY
    default_font_size: float = 48.0
    export_filename: str = EXPORT_FILENAME
    last_export_dir: Optional[Path] = None


# Bundled font families registered at startup: {family: font file}.
FONTS_REGISTRY: Dict[str, Path] = {}
app_config = AppConfig()


def init_fonts() -> None:
    """Register bundled fonts with Qt and record their families."""
    from fonts.loader import register_bundled_fonts

    FONTS_REGISTRY.clear()
    FONTS_REGISTRY.update(register_bundled_fonts(RESOURCES_DIR / "fonts"))


def has_font_family(family: str) -> bool:
    """Check whether a font family was registered from the bundled fonts."""
    return bool(family) and family in FONTS_REGISTRY
