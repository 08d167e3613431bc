from __future__ import annotations

import logging
from typing import Any, Iterable

from .decode import decode_entries
from .models import LogEntry
from .references import Lookup, extract_references, resolve_names
from .render.message import render_line

LOGGER = logging.getLogger(__name__)


async def render_entries(
    raw_entries: Iterable[Any],
    lookup_items: Lookup,
    lookup_upgrades: Lookup,
) -> tuple[list[LogEntry], list[str]]:
    """
    Decode, resolve and render a raw guild log feed.

    Stages: decode -> extract ids -> resolve names -> render. Any failure
    raises before a single line is produced; line i matches entry i.
    """
    entries = decode_entries(raw_entries)
    refs = extract_references(entries)
    LOGGER.debug(
        "Batch of %d entries references %d items and %d upgrades",
        len(entries),
        len(refs.item_ids),
        len(refs.upgrade_ids),
    )
    names = await resolve_names(refs, lookup_items, lookup_upgrades)
    return entries, [render_line(entry, names) for entry in entries]


async def render(raw_entries: Iterable[Any], lookup_items: Lookup, lookup_upgrades: Lookup) -> list[str]:
    _entries, lines = await render_entries(raw_entries, lookup_items, lookup_upgrades)
    return lines
