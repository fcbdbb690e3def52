"""Configuration loading for Trade Journal.

Settings live in ``config.toml`` under ``~/.config/tradejournal`` (or the
directory named by ``TRADEJOURNAL_HOME``).
"""

import logging
import os
from pathlib import Path
from typing import Optional

import toml

logger = logging.getLogger(__name__)

DEFAULT_OWNER_ID = "local"
DEFAULT_LOG_LEVEL = "WARNING"


def get_config_dir() -> Path:
    """Get the configuration directory."""
    override = os.environ.get("TRADEJOURNAL_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "tradejournal"


def get_config_path() -> Path:
    """Get the path of ``config.toml``."""
    return get_config_dir() / "config.toml"


def load_config(config_path: Optional[Path] = None) -> dict:
    """Load configuration from disk.

    Args:
        config_path: Optional explicit path. Uses the default location if not set.

    Returns:
        Parsed configuration, or an empty dict when the file is missing or
        cannot be parsed.
    """
    path = config_path or get_config_path()
    if not path.exists():
        return {}

    try:
        return toml.load(path)
    except (OSError, toml.TomlDecodeError) as e:
        logger.warning("Could not read config %s: %s", path, e)
        return {}


def save_config(config: dict, config_path: Optional[Path] = None) -> Path:
    """Write configuration to disk, creating the directory if needed."""
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        toml.dump(config, f)
    return path


def get_owner_id(config: dict) -> str:
    """Owner identifier used to scope every read and write."""
    return config.get("user", {}).get("owner_id") or DEFAULT_OWNER_ID


def get_db_path(config: dict) -> Path:
    """Path of the SQLite database."""
    configured = config.get("database", {}).get("path")
    if configured:
        return Path(configured).expanduser()
    return get_config_dir() / "tradejournal.db"


def get_log_level(config: dict) -> str:
    return str(config.get("logging", {}).get("level", DEFAULT_LOG_LEVEL)).upper()
