from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Iterable, Mapping

from .errors import ResolutionError
from .models import LogEntry, NameTables, References, StashEntry, TreasuryEntry, UpgradeEntry

LOGGER = logging.getLogger(__name__)

Lookup = Callable[[set[int]], Awaitable[Mapping[int, str]]]


def extract_references(entries: Iterable[LogEntry]) -> References:
    """Collect the distinct item and upgrade ids a batch needs names for."""
    item_ids: set[int] = set()
    upgrade_ids: set[int] = set()

    for entry in entries:
        if isinstance(entry, StashEntry):
            # count == 0 means only coins moved
            if entry.operation == "move" or entry.count > 0:
                item_ids.add(entry.item_id)
        elif isinstance(entry, TreasuryEntry):
            item_ids.add(entry.item_id)
        elif isinstance(entry, UpgradeEntry):
            if entry.item_id is not None:
                item_ids.add(entry.item_id)
            upgrade_ids.add(entry.upgrade_id)

    return References(item_ids=frozenset(item_ids), upgrade_ids=frozenset(upgrade_ids))


async def _lookup(kind: str, ids: frozenset[int], lookup: Lookup) -> dict[int, str]:
    if not ids:
        return {}
    found = await lookup(set(ids))
    missing = [i for i in ids if i not in found]
    if missing:
        raise ResolutionError(kind, missing)
    return {i: found[i] for i in ids}


async def resolve_names(refs: References, lookup_items: Lookup, lookup_upgrades: Lookup) -> NameTables:
    """
    Turn the referenced ids into name tables.

    Both lookups run concurrently. A requested id missing from a lookup
    result raises ResolutionError; lookup failures propagate unchanged.
    When one lookup fails the other is cancelled and awaited before the
    error leaves this function.
    """
    tasks = [
        asyncio.create_task(_lookup("item", refs.item_ids, lookup_items)),
        asyncio.create_task(_lookup("upgrade", refs.upgrade_ids, lookup_upgrades)),
    ]
    try:
        items, upgrades = await asyncio.gather(*tasks)
    finally:
        pending = [task for task in tasks if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
    LOGGER.debug("Resolved %d item names and %d upgrade names", len(items), len(upgrades))
    return NameTables(items=items, upgrades=upgrades)
