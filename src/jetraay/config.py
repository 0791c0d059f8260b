"""Configuration loading from an optional YAML file and JETRAAY_* environment variables."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from jetraay.errors import ConfigError
from jetraay.schema import JetraayConfig

APP_DIR_NAME = "jetraay"
CONFIG_FILENAME = "config.yaml"


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"JETRAAY_{key}", default)


def default_data_dir() -> Path:
    """Per-user application data directory for the current platform."""
    if sys.platform == "win32":
        base = os.environ.get("APPDATA")
        root = Path(base) if base else Path.home() / "AppData" / "Roaming"
    elif sys.platform == "darwin":
        root = Path.home() / "Library" / "Application Support"
    else:
        base = os.environ.get("XDG_DATA_HOME")
        root = Path(base) if base else Path.home() / ".local" / "share"
    return root / APP_DIR_NAME


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with path.open() as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(source=str(path), message=f"Cannot read {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(source=str(path), message=f"{path} must contain a mapping")
    return data


def load_config(
    path: Path | str | None = None,
    **overrides: Any,
) -> JetraayConfig:
    """
    Build the store configuration.

    Precedence, lowest first: built-in defaults, the YAML file, JETRAAY_*
    environment variables, then keyword overrides (CLI flags). When no path
    is given, ``config.yaml`` inside the default data directory is read if it
    exists.
    """
    data: dict[str, Any] = {"data_dir": default_data_dir()}

    if path is not None:
        data.update(_read_yaml(Path(path)))
    else:
        implicit = default_data_dir() / CONFIG_FILENAME
        if implicit.is_file():
            data.update(_read_yaml(implicit))

    env_map = {
        "data_dir": _env("DATA_DIR"),
        "db_filename": _env("DB_FILENAME"),
        "log_level": _env("LOG_LEVEL"),
        "log_file": _env("LOG_FILE"),
    }
    data.update({k: v for k, v in env_map.items() if v})
    data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return JetraayConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(source=str(path or "environment"), message=str(e)) from e
