from __future__ import annotations

from dataclasses import asdict, is_dataclass
from datetime import datetime
from typing import Any

from guildlog.models import LogEntry
from guildlog.util import format_ts_iso


def to_dict(value: Any) -> Any:
    if isinstance(value, LogEntry):
        return {"type": value.kind, **to_dict(asdict(value))}
    if is_dataclass(value) and not isinstance(value, type):
        return to_dict(asdict(value))
    if isinstance(value, datetime):
        return format_ts_iso(value)
    if isinstance(value, dict):
        return {k: to_dict(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_dict(v) for v in value]
    return value
