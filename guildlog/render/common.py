from __future__ import annotations

from collections import Counter

from rich.console import Console

from ..models import LogEntry

console = Console(force_terminal=True)


def kind_counts(entries: list[LogEntry], limit: int = 5) -> list[tuple[str, int]]:
    c: Counter[str] = Counter()
    for entry in entries:
        c[entry.kind] += 1
    return c.most_common(limit)


def top_users(entries: list[LogEntry], limit: int = 5) -> list[tuple[str, int]]:
    c: Counter[str] = Counter()
    for entry in entries:
        name = (entry.user or "").strip()
        if name:
            c[name] += 1
    return c.most_common(limit)
