from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from guildlog.client import Gw2Client
from guildlog.pipeline import render_entries
from .serialize import to_dict


async def guilds(client: Gw2Client) -> dict[str, Any]:
    found = await client.get_account_guilds()
    return {"guilds": to_dict(found)}


async def render_raw(client: Gw2Client, raw: list) -> dict[str, Any]:
    entries, lines = await render_entries(raw, client.lookup_items, client.lookup_upgrades)
    return {
        "count": len(lines),
        "entries": to_dict(entries),
        "lines": lines,
    }


async def logs(client: Gw2Client, guild_id: str) -> dict[str, Any]:
    raw = await client.get_guild_logs(guild_id)
    data = await render_raw(client, raw)
    return {"guild_id": guild_id, **data}


def load_raw_file(path: str) -> list:
    """Raw log records saved from the API (a JSON list)."""
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, list):
        raise ValueError(f"{path} does not hold a JSON list of log entries")
    return payload
