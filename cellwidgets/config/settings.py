"""Settings storage for toolkit configuration."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


SETTINGS_PATH = Path(
    os.environ.get(
        "CELLWIDGETS_SETTINGS_PATH",
        Path.home() / ".config" / "cellwidgets" / "settings.json",
    )
)

# Default values - use these constants instead of hardcoding values elsewhere
DEFAULT_POLL_TIMEOUT = 0.05
DEFAULT_WEB_HOST = "127.0.0.1"
DEFAULT_WEB_PORT = 8023
DEFAULT_IMAGE_COLUMNS = 40
DEFAULT_IMAGE_ROWS = 12
DEFAULT_IMAGE_FONT_SIZE = 12

DEFAULT_SETTINGS: dict[str, Any] = {
    "poll_timeout": DEFAULT_POLL_TIMEOUT,
    "mouse_enabled": True,
    "theme": {},
    "web_host": DEFAULT_WEB_HOST,
    "web_port": DEFAULT_WEB_PORT,
    "image_columns": DEFAULT_IMAGE_COLUMNS,
    "image_rows": DEFAULT_IMAGE_ROWS,
    "image_font_path": None,
    "image_font_size": DEFAULT_IMAGE_FONT_SIZE,
}


@dataclass
class SettingsStore:
    values: dict[str, Any] = field(default_factory=dict)


settings_store = SettingsStore()


def load_settings() -> None:
    settings_store.values = dict(DEFAULT_SETTINGS)
    if not SETTINGS_PATH.exists():
        return
    try:
        data = json.loads(SETTINGS_PATH.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return
    if isinstance(data, dict):
        settings_store.values.update(data)


def save_settings() -> None:
    SETTINGS_PATH.parent.mkdir(parents=True, exist_ok=True)
    SETTINGS_PATH.write_text(
        json.dumps(settings_store.values, indent=2, sort_keys=True),
        encoding="utf-8",
    )


def get_setting(key: str, default: Any | None = None) -> Any:
    return settings_store.values.get(key, default)


def set_setting(key: str, value: Any) -> None:
    settings_store.values[key] = value
    save_settings()


def get_bool(key: str, default: bool = False) -> bool:
    return bool(get_setting(key, default))


def get_float(key: str, default: float = 0.0) -> float:
    try:
        return float(get_setting(key, default))
    except (TypeError, ValueError):
        return default


def get_int(key: str, default: int = 0) -> int:
    try:
        return int(get_setting(key, default))
    except (TypeError, ValueError):
        return default


load_settings()
