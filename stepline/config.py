"""
Runtime configuration for stepline.

Values come from environment variables, with an optional JSON file
(~/.stepline/config.json, or the path in STEPLINE_CONFIG) underneath.
Environment variables win over the file.

    {
        "log_level": "DEBUG",
        "dev_mode": true,
        "pretty": false
    }
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.stepline/config.json")

_TRUE_VALUES = ("1", "true", "yes")


def _load_file(path: Path) -> dict[str, Any]:
    path = path.expanduser()
    if not path.exists():
        return {}
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Ignoring unreadable config file {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring config file {path}: expected a JSON object")
        return {}
    return data


def _flag(env_name: str, file_value: Any, default: bool) -> bool:
    raw = os.environ.get(env_name)
    if raw is not None:
        return raw.lower() in _TRUE_VALUES
    if file_value is not None:
        return bool(file_value)
    return default


@dataclass
class Config:
    LOG_LEVEL: str = "WARNING"
    DEV_MODE: bool = False
    PRETTY_OUTPUT: bool = False

    @classmethod
    def load(cls, path: Path | str | None = None) -> Config:
        """Build a Config from the environment and the optional config file."""
        if path is None:
            path = os.environ.get("STEPLINE_CONFIG") or DEFAULT_CONFIG_PATH
        data = _load_file(Path(path))

        log_level = os.environ.get("STEPLINE_LOG_LEVEL") or data.get("log_level") or cls.LOG_LEVEL
        return cls(
            LOG_LEVEL=str(log_level).upper(),
            DEV_MODE=_flag("STEPLINE_DEV_MODE", data.get("dev_mode"), cls.DEV_MODE),
            PRETTY_OUTPUT=_flag("STEPLINE_PRETTY", data.get("pretty"), cls.PRETTY_OUTPUT),
        )


config = Config.load()
