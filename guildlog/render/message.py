from __future__ import annotations

from dataclasses import fields

from ..errors import ResolutionError
from ..models import (
    InfluenceEntry,
    InviteDeclinedEntry,
    InvitedEntry,
    JoinedEntry,
    KickEntry,
    LogEntry,
    MotdEntry,
    NameTables,
    RankChangeEntry,
    StashEntry,
    TreasuryEntry,
    UpgradeEntry,
)
from ..util import format_coins, format_names, format_ts_iso


def _item_name(names: NameTables, item_id: int) -> str:
    try:
        return names.items[item_id]
    except KeyError:
        raise ResolutionError("item", [item_id]) from None


def _upgrade_name(names: NameTables, upgrade_id: int) -> str:
    try:
        return names.upgrades[upgrade_id]
    except KeyError:
        raise ResolutionError("upgrade", [upgrade_id]) from None


def dump_entry(entry: LogEntry) -> str:
    """Structural fallback for entries without a phrasing rule."""
    parts = [f"{f.name}={getattr(entry, f.name)!r}" for f in fields(entry)]
    return f"{type(entry).__name__} {{{', '.join(parts)}}}"


def render_message(entry: LogEntry, names: NameTables) -> str:
    """Produce the sentence for one entry, without timestamp or final period."""
    user = entry.user

    if isinstance(entry, JoinedEntry):
        return f"{user} joined the guild"

    if isinstance(entry, InvitedEntry):
        return f"{entry.invited_by} invited {user} in the guild"

    if isinstance(entry, InviteDeclinedEntry):
        return f"{user} declined the invitation"

    if isinstance(entry, KickEntry):
        if entry.kicked_by == user:
            return f"{user} left the guild"
        return f"{entry.kicked_by} kicked {user} from the guild"

    if isinstance(entry, RankChangeEntry):
        return f"{entry.changed_by} changed the rank of {user} from {entry.old_rank} to {entry.new_rank}"

    if isinstance(entry, MotdEntry):
        return f"{user} changed the MOTD to the following:\n{entry.motd}"

    # Stash: count == 0 is a pure coin movement
    if isinstance(entry, StashEntry):
        if entry.operation == "move":
            return f"{user} moved {entry.count} × {_item_name(names, entry.item_id)} in the guild stash"
        if entry.operation == "deposit":
            if entry.count == 0:
                return f"{user} deposited {format_coins(entry.coins)} coins in the guild stash"
            return f"{user} deposited {entry.count} × {_item_name(names, entry.item_id)} in the guild stash"
        if entry.operation == "withdraw":
            if entry.count == 0:
                return f"{user} withdrew {format_coins(entry.coins)} from the guild stash"
            return f"{user} withdrew {entry.count} × {_item_name(names, entry.item_id)} from the guild stash"

    if isinstance(entry, TreasuryEntry):
        return f"{user} added {entry.count} × {_item_name(names, entry.item_id)} in the guild treasury"

    if isinstance(entry, UpgradeEntry):
        if entry.action == "queued":
            upgrade = _upgrade_name(names, entry.upgrade_id)
            if user is None:
                return f"{upgrade} got queued"
            return f"{user} queued {upgrade}"
        verb = {"completed": "completed", "cancelled": "cancelled", "sped_up": "sped up"}.get(entry.action)
        if verb and entry.item_id is not None:
            return f"{user} {verb} {entry.count} × {_item_name(names, entry.item_id)}"

    if isinstance(entry, InfluenceEntry):
        return f"{format_names(entry.participants)} added influence to the guild"

    return dump_entry(entry)


def render_line(entry: LogEntry, names: NameTables) -> str:
    return f"[{format_ts_iso(entry.time)}]: {render_message(entry, names)}."
