from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar, Mapping

LOG_KINDS = (
    "joined",
    "invited",
    "invite_declined",
    "kick",
    "rank_change",
    "treasury",
    "stash",
    "motd",
    "upgrade",
    "influence",
)

STASH_OPERATIONS = ("deposit", "withdraw", "move")
UPGRADE_ACTIONS = ("queued", "completed", "cancelled", "sped_up")


@dataclass(frozen=True)
class LogEntry:
    kind: ClassVar[str] = ""

    id: int
    time: datetime
    user: str | None


@dataclass(frozen=True)
class JoinedEntry(LogEntry):
    kind: ClassVar[str] = "joined"


@dataclass(frozen=True)
class InvitedEntry(LogEntry):
    kind: ClassVar[str] = "invited"

    invited_by: str


@dataclass(frozen=True)
class InviteDeclinedEntry(LogEntry):
    kind: ClassVar[str] = "invite_declined"


@dataclass(frozen=True)
class KickEntry(LogEntry):
    kind: ClassVar[str] = "kick"

    kicked_by: str


@dataclass(frozen=True)
class RankChangeEntry(LogEntry):
    kind: ClassVar[str] = "rank_change"

    changed_by: str
    old_rank: str
    new_rank: str


@dataclass(frozen=True)
class TreasuryEntry(LogEntry):
    kind: ClassVar[str] = "treasury"

    item_id: int
    count: int


@dataclass(frozen=True)
class StashEntry(LogEntry):
    kind: ClassVar[str] = "stash"

    operation: str
    item_id: int
    count: int
    coins: int


@dataclass(frozen=True)
class MotdEntry(LogEntry):
    kind: ClassVar[str] = "motd"

    motd: str


@dataclass(frozen=True)
class UpgradeEntry(LogEntry):
    """user, item_id and count are None only for queued upgrades."""

    kind: ClassVar[str] = "upgrade"

    action: str
    upgrade_id: int
    item_id: int | None
    count: int | None


@dataclass(frozen=True)
class InfluenceEntry(LogEntry):
    kind: ClassVar[str] = "influence"

    participants: tuple[str, ...]


@dataclass(frozen=True)
class References:
    item_ids: frozenset[int]
    upgrade_ids: frozenset[int]


@dataclass(frozen=True)
class NameTables:
    items: Mapping[int, str]
    upgrades: Mapping[int, str]


@dataclass(frozen=True)
class Guild:
    id: str
    name: str
    tag: str
