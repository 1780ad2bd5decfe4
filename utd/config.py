"""Configuration for utd.

Resolves the data directory holding the state file, the log file and the
optional JSON config file, and loads that config file.
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from utd.errors import ConfigError

STATE_FILE_NAME = ".utd.json"
CONFIG_FILE_NAME = "utd.json"
LOG_FILE_NAME = "utd.log"

LOG_LEVELS = ("trace", "debug", "info", "warning", "error")


def data_dir() -> Path:
    """Return the directory where utd keeps its files.

    Resolution order: UTD_DATA_DIR, then $XDG_DATA_HOME/utd, then
    ~/.local/share/utd.
    """
    explicit = os.environ.get("UTD_DATA_DIR")
    if explicit:
        return Path(explicit)
    xdg = os.environ.get("XDG_DATA_HOME")
    base = Path(xdg) if xdg else Path.home() / ".local" / "share"
    return base / "utd"


def state_file_path(directory: Optional[Path] = None) -> Path:
    """Return the canonical state file path.

    Args:
        directory: Data directory. If None, uses data_dir()

    Returns:
        Path of the JSON state file
    """
    return (directory or data_dir()) / STATE_FILE_NAME


@dataclass
class Config:
    """User settings read from the config file.

    Attributes:
        disable_title: Suppress the greeting line above the listing
        log_level: Console log level name used when --log is not given
    """

    disable_title: bool = False
    log_level: str = "warning"


def load_config(directory: Optional[Path] = None) -> Config:
    """Load the config file from the data directory.

    A missing file yields the defaults. Unknown keys are ignored.

    Raises:
        ConfigError: If the file is not a JSON object or a value is invalid
    """
    path = (directory or data_dir()) / CONFIG_FILE_NAME
    if not path.exists():
        return Config()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, RecursionError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")

    config = Config()
    if "disable_title" in data:
        if not isinstance(data["disable_title"], bool):
            raise ConfigError("'disable_title' must be true or false")
        config.disable_title = data["disable_title"]
    if "log_level" in data:
        if data["log_level"] not in LOG_LEVELS:
            raise ConfigError(
                f"'log_level' must be one of {', '.join(LOG_LEVELS)}"
            )
        config.log_level = data["log_level"]
    return config
