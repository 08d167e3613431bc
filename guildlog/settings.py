from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    api_key: str
    guild_id: str | None = None


def read_settings(path: Path) -> Settings | None:
    """Stored preferences, or None when absent, unreadable or without an API key."""
    p = Path(path)
    if not p.exists():
        return None
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        LOGGER.warning("Ignoring unreadable preferences file %s: %s", p, exc)
        return None
    if not isinstance(data, dict):
        return None

    api_key = data.get("api_key")
    if not isinstance(api_key, str) or not api_key.strip():
        return None
    guild_id = data.get("guild_id")
    return Settings(api_key=api_key, guild_id=str(guild_id) if guild_id else None)


def write_settings(settings: Settings, path: Path) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(asdict(settings), ensure_ascii=False, indent=2), encoding="utf-8")
    LOGGER.debug("Preferences saved to %s", p)
