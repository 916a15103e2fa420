"""Reading of the global and per-project TOML configuration files."""

from pathlib import Path
from typing import Any

from tomlkit import parse

CONFIG_DIR = Path.home() / ".config" / "imagebuild"

CONFIG_FILE = CONFIG_DIR / "config.toml"

LOCAL_CONFIG_DIR_NAME = ".imagebuild"
LOCAL_CONFIG_FILE_NAME = "config.toml"

# Project configuration file. None searches upward from the working directory.
LOCAL_CONFIG_FILE: Path | None = None


def _read_toml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return parse(f.read())


def load_config() -> dict[str, Any]:
    """Load the global configuration, empty if there is none."""
    return _read_toml(CONFIG_FILE)


def find_local_config(start: Path | None = None) -> Path | None:
    """Return the nearest ``.imagebuild/config.toml`` in ``start`` or one of its parents."""
    start = start if start is not None else Path.cwd()
    for directory in (start, *start.parents):
        candidate = directory / LOCAL_CONFIG_DIR_NAME / LOCAL_CONFIG_FILE_NAME
        if candidate.exists():
            return candidate
    return None


def load_local_config() -> dict[str, Any]:
    """Load the project configuration, empty if there is none."""
    path = LOCAL_CONFIG_FILE if LOCAL_CONFIG_FILE is not None else find_local_config()
    if path is None:
        return {}
    return _read_toml(path)


def get_nested_value(config: dict[str, Any], key: str) -> Any:
    """Get a nested configuration value using dot notation."""
    value: Any = config
    for part in key.split("."):
        if not isinstance(value, dict) or part not in value:
            return None
        value = value[part]
    return value
