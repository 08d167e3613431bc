from __future__ import annotations

import logging
import os
from pathlib import Path

DEFAULT_API_BASE = "https://api.guildwars2.com"


def get_prefs_path() -> Path:
    env_path = os.environ.get("GW2_GUILDLOG_PREFS")
    if env_path:
        return Path(env_path).expanduser().resolve()
    return Path("./preferences.json").resolve()


def get_api_base() -> str:
    return (os.environ.get("GW2_API_BASE") or DEFAULT_API_BASE).rstrip("/")


def get_env_api_key() -> str | None:
    key = (os.environ.get("GW2_API_KEY") or "").strip()
    return key or None


def get_log_level() -> int:
    name = (os.environ.get("GW2_GUILDLOG_LOG_LEVEL") or "WARNING").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING
