"""
Persisted user configuration and per-user directories.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from models.errors import ConfigError, StorageError
from models.schema import Config

logger = logging.getLogger(__name__)

APP_NAME = "so"
CONFIG_FILENAME = "config.json"


def config_dir() -> Path:
    """Per-user configuration directory."""
    override = os.getenv("SO_CONFIG_DIR")
    if override:
        return Path(override)
    base = os.getenv("XDG_CONFIG_HOME") or os.path.join(Path.home(), ".config")
    return Path(base) / APP_NAME


def cache_dir() -> Path:
    """Per-user cache directory."""
    override = os.getenv("SO_CACHE_DIR")
    if override:
        return Path(override)
    base = os.getenv("XDG_CACHE_HOME") or os.path.join(Path.home(), ".cache")
    return Path(base) / APP_NAME


def ensure_dir(path: Path) -> Path:
    """Create a directory (and parents) if missing."""
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageError(str(path), e.strerror or str(e))
    return path


def config_path() -> Path:
    return config_dir() / CONFIG_FILENAME


def load_user_config(path: Optional[Path] = None) -> Config:
    """
    Load persisted settings, writing the defaults on first run.

    Raises:
        ConfigError: If the file exists but is not a valid config
        StorageError: If the defaults cannot be written
    """
    path = Path(path) if path else config_path()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.info("No config at %s, writing defaults", path)
        config = Config()
        store_user_config(config, path)
        return config
    except json.JSONDecodeError as e:
        raise ConfigError(f"Config file {path} is not valid JSON: {e}", value=str(path))
    except UnicodeDecodeError as e:
        raise ConfigError(f"Config file {path} is not valid UTF-8: {e}", value=str(path))
    except OSError as e:
        raise ConfigError(f"Could not read config file {path}: {e}", value=str(path))

    try:
        return Config.from_dict(data)
    except ValidationError as e:
        raise ConfigError(f"Config file {path} is invalid: {e}", value=str(path))


def store_user_config(config: Config, path: Optional[Path] = None) -> None:
    """Overwrite the persisted settings with config."""
    path = Path(path) if path else config_path()
    ensure_dir(path.parent)
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(config.to_dict(), f, indent=2)
    except OSError as e:
        raise StorageError(str(path), e.strerror or str(e))
    logger.info("Wrote config to %s", path)


def set_api_key(key: str, path: Optional[Path] = None) -> Config:
    """Persist a new API key, keeping all other stored settings."""
    config = load_user_config(path)
    updated = config.model_copy(update={"api_key": key})
    store_user_config(updated, path)
    return updated
