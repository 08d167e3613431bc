from __future__ import annotations

from typing import Iterable


class GuildLogError(Exception):
    """Base class for every error raised by the log pipeline."""

    code = "INTERNAL"


class DecodeError(GuildLogError):
    code = "DECODE"

    def __init__(
        self,
        message: str,
        tag: str | None = None,
        field: str | None = None,
        entry_id: int | None = None,
    ):
        super().__init__(message)
        self.tag = tag
        self.field = field
        self.entry_id = entry_id


class ResolutionError(GuildLogError):
    code = "RESOLUTION"

    def __init__(self, kind: str, missing_ids: Iterable[int]):
        self.kind = kind
        self.missing_ids = tuple(sorted(missing_ids))
        ids = ", ".join(str(i) for i in self.missing_ids)
        super().__init__(f"No {kind} name for id(s): {ids}")


class TransportError(GuildLogError):
    code = "TRANSPORT"

    def __init__(self, message: str, status: int | None = None, url: str | None = None):
        super().__init__(message)
        self.status = status
        self.url = url
