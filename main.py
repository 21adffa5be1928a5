"""Entry point for the Behind Text Editor desktop application."""
import logging
from pathlib import Path

from PySide6 import QtWidgets

from config import DEFAULT_FONT_FAMILY, FONT_OPTIONS, app_config, has_font_family, init_fonts
from settings_manager import load_settings
from ui.main_window import MainWindow


def apply_theme(app: QtWidgets.QApplication, theme: str) -> None:
    """Apply light/dark stylesheet to the whole application."""
    theme = (theme or "system").lower()
    base = Path(__file__).resolve().parent / "resources" / "styles"
    qss_path = None
    if theme == "dark":
        qss_path = base / "dark.qss"
    elif theme == "light":
        qss_path = base / "light.qss"

    # Always clear the previous stylesheet before applying a new one to avoid stacking rules.
    app.setStyleSheet("")
    if qss_path is not None and qss_path.is_file():
        app.setStyleSheet(qss_path.read_text(encoding="utf-8"))


def main() -> int:
    """Start the Qt application and show the main window."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(name)s] %(levelname)s %(message)s")
    app = QtWidgets.QApplication([])

    init_fonts()

    settings = load_settings()
    text_settings = settings.get("text", {})
    family = text_settings.get("default_font_family") or DEFAULT_FONT_FAMILY
    known = family in FONT_OPTIONS or has_font_family(family)
    app_config.default_font_family = family if known else DEFAULT_FONT_FAMILY
    try:
        app_config.default_font_size = max(1.0, float(text_settings.get("default_font_size", 48)))
    except (TypeError, ValueError):
        logging.getLogger(__name__).warning("Invalid default font size in settings, using 48")
    app_config.export_filename = settings.get("export", {}).get("filename") or app_config.export_filename
    last_dir = settings.get("export", {}).get("last_directory") or ""
    app_config.last_export_dir = Path(last_dir) if last_dir else None
    app_config.theme = settings.get("appearance", {}).get("theme", "system")

    apply_theme(app, app_config.theme)

    window = MainWindow()
    window.show()
    return int(app.exec())


if __name__ == "__main__":
    raise SystemExit(main())
