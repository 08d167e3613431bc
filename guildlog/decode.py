from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

from .errors import DecodeError
from .models import (
    STASH_OPERATIONS,
    UPGRADE_ACTIONS,
    InfluenceEntry,
    InviteDeclinedEntry,
    InvitedEntry,
    JoinedEntry,
    KickEntry,
    LogEntry,
    MotdEntry,
    RankChangeEntry,
    StashEntry,
    TreasuryEntry,
    UpgradeEntry,
)
from .util import parse_iso_maybe

LOGGER = logging.getLogger(__name__)

_MISSING = object()


# -------------------------
# Field readers
# -------------------------

def _entry_id(raw: dict) -> int | None:
    value = raw.get("id")
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _field(raw: dict, name: str, kind: str, required: bool = True):
    value = raw.get(name, _MISSING)
    if value is _MISSING or value is None:
        if not required:
            return None
        entry_id = _entry_id(raw)
        where = f" (entry {entry_id})" if entry_id is not None else ""
        raise DecodeError(
            f"Missing field '{name}' in '{kind}' log entry{where}",
            tag=kind,
            field=name,
            entry_id=entry_id,
        )
    return value


def _bad_field(raw: dict, name: str, kind: str, expected: str, value: Any) -> DecodeError:
    entry_id = _entry_id(raw)
    where = f" (entry {entry_id})" if entry_id is not None else ""
    return DecodeError(
        f"Field '{name}' in '{kind}' log entry{where} must be {expected}, got {value!r}",
        tag=kind,
        field=name,
        entry_id=entry_id,
    )


def _str(raw: dict, name: str, kind: str, required: bool = True) -> str | None:
    value = _field(raw, name, kind, required)
    if value is None:
        return None
    if not isinstance(value, str):
        raise _bad_field(raw, name, kind, "a string", value)
    return value


def _int(raw: dict, name: str, kind: str, required: bool = True) -> int | None:
    value = _field(raw, name, kind, required)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise _bad_field(raw, name, kind, "an integer", value)
    return value


def _choice(raw: dict, name: str, kind: str, choices: Iterable[str]) -> str:
    value = _str(raw, name, kind)
    if value not in choices:
        raise _bad_field(raw, name, kind, "one of " + "|".join(choices), value)
    return value


def _common(raw: dict, kind: str, user_required: bool = True) -> dict:
    """Read the fields every log entry carries."""
    entry_id = _int(raw, "id", kind)
    ts = _str(raw, "time", kind)
    dt = parse_iso_maybe(ts)
    if dt is None:
        raise _bad_field(raw, "time", kind, "an ISO-8601 timestamp", ts)
    return {
        "id": entry_id,
        "time": dt,
        "user": _str(raw, "user", kind, required=user_required),
    }


# -------------------------
# Per-kind parsers
# -------------------------

def _parse_joined(raw: dict) -> LogEntry:
    return JoinedEntry(**_common(raw, "joined"))


def _parse_invited(raw: dict) -> LogEntry:
    return InvitedEntry(
        **_common(raw, "invited"),
        invited_by=_str(raw, "invited_by", "invited"),
    )


def _parse_invite_declined(raw: dict) -> LogEntry:
    return InviteDeclinedEntry(**_common(raw, "invite_declined"))


def _parse_kick(raw: dict) -> LogEntry:
    return KickEntry(
        **_common(raw, "kick"),
        kicked_by=_str(raw, "kicked_by", "kick"),
    )


def _parse_rank_change(raw: dict) -> LogEntry:
    return RankChangeEntry(
        **_common(raw, "rank_change"),
        changed_by=_str(raw, "changed_by", "rank_change"),
        old_rank=_str(raw, "old_rank", "rank_change"),
        new_rank=_str(raw, "new_rank", "rank_change"),
    )


def _parse_treasury(raw: dict) -> LogEntry:
    return TreasuryEntry(
        **_common(raw, "treasury"),
        item_id=_int(raw, "item_id", "treasury"),
        count=_int(raw, "count", "treasury"),
    )


def _parse_stash(raw: dict) -> LogEntry:
    return StashEntry(
        **_common(raw, "stash"),
        operation=_choice(raw, "operation", "stash", STASH_OPERATIONS),
        item_id=_int(raw, "item_id", "stash"),
        count=_int(raw, "count", "stash"),
        coins=_int(raw, "coins", "stash"),
    )


def _parse_motd(raw: dict) -> LogEntry:
    return MotdEntry(
        **_common(raw, "motd"),
        motd=_str(raw, "motd", "motd"),
    )


def _parse_upgrade(raw: dict) -> LogEntry:
    action = _choice(raw, "action", "upgrade", UPGRADE_ACTIONS)
    queued = action == "queued"
    common = _common(raw, "upgrade", user_required=not queued)
    upgrade_id = _int(raw, "upgrade_id", "upgrade")
    if queued:
        # queued upgrades never carry an item movement
        return UpgradeEntry(**common, action=action, upgrade_id=upgrade_id, item_id=None, count=None)
    return UpgradeEntry(
        **common,
        action=action,
        upgrade_id=upgrade_id,
        item_id=_int(raw, "item_id", "upgrade"),
        count=_int(raw, "count", "upgrade"),
    )


def _parse_influence(raw: dict) -> LogEntry:
    participants = _field(raw, "participants", "influence")
    if not isinstance(participants, list) or not all(isinstance(p, str) for p in participants):
        raise _bad_field(raw, "participants", "influence", "a list of names", participants)
    return InfluenceEntry(
        **_common(raw, "influence", user_required=False),
        participants=tuple(participants),
    )


PARSERS: dict[str, Callable[[dict], LogEntry]] = {
    "joined": _parse_joined,
    "invited": _parse_invited,
    "invite_declined": _parse_invite_declined,
    "kick": _parse_kick,
    "rank_change": _parse_rank_change,
    "treasury": _parse_treasury,
    "stash": _parse_stash,
    "motd": _parse_motd,
    "upgrade": _parse_upgrade,
    "influence": _parse_influence,
}


def is_known_kind(tag: Any) -> bool:
    return isinstance(tag, str) and tag in PARSERS


# -------------------------
# Decoder
# -------------------------

def decode_entry(raw: Any) -> LogEntry:
    if not isinstance(raw, dict):
        raise DecodeError(f"Log entry must be a JSON object, got {type(raw).__name__}")

    tag = raw.get("type")
    if not is_known_kind(tag):
        entry_id = _entry_id(raw)
        raise DecodeError(
            f"Unknown log entry type: {tag!r}",
            tag=tag if isinstance(tag, str) else None,
            field="type",
            entry_id=entry_id,
        )
    return PARSERS[tag](raw)


def decode_entries(raw_entries: Iterable[Any]) -> list[LogEntry]:
    """
    Decode raw guild log records into typed entries, keeping feed order.

    All or nothing: the first bad record raises DecodeError and nothing
    decoded so far is returned.
    """
    entries = [decode_entry(raw) for raw in raw_entries]
    LOGGER.debug("Decoded %d guild log entries", len(entries))
    return entries
