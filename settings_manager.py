"""Utility helpers for loading and storing user settings in YAML."""
from __future__ import annotations

import logging
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict

import yaml

from config import DEFAULT_FONT_FAMILY, EXPORT_FILENAME

logger = logging.getLogger(__name__)

# Global config file placed next to the main sources.
CONFIG_PATH = Path(__file__).resolve().parent / "config.yaml"

# Default shape of the settings tree.
DEFAULT_SETTINGS: Dict[str, Any] = {
    "appearance": {
        "theme": "system",  # "system", "light" or "dark"
    },
    "export": {
        "filename": EXPORT_FILENAME,
        "last_directory": "",
    },
    "text": {
        "default_font_family": DEFAULT_FONT_FAMILY,
        "default_font_size": 48,
    },
}


def _merge_dicts(base: Dict[str, Any], extra: Dict[str, Any]) -> Dict[str, Any]:
    """Deep-merge two dictionaries without mutating the inputs."""
    merged = deepcopy(base)
    for key, value in extra.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(path: Path | None = None) -> Dict[str, Any]:
    """Load settings from config.yaml merged over the defaults."""
    config_path = Path(path) if path is not None else CONFIG_PATH
    settings = deepcopy(DEFAULT_SETTINGS)
    if not config_path.is_file():
        return settings
    try:
        raw_data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", config_path, exc)
        return settings
    if not isinstance(raw_data, dict):
        logger.warning("Ignoring settings file %s: top level is not a mapping", config_path)
        return settings
    return _merge_dicts(settings, raw_data)


def save_settings(settings: Dict[str, Any], path: Path | None = None) -> None:
    """Persist settings into config.yaml."""
    config_path = Path(path) if path is not None else CONFIG_PATH
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(
        yaml.safe_dump(settings, allow_unicode=True, sort_keys=False),
        encoding="utf-8",
    )


def update_settings(partial: Dict[str, Any], path: Path | None = None) -> Dict[str, Any]:
    """Merge a partial settings tree into the stored settings and save the result."""
    merged = _merge_dicts(load_settings(path), partial)
    save_settings(merged, path)
    return merged
