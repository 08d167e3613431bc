from __future__ import annotations

from rich.markup import escape
from rich.panel import Panel

from ..models import Guild, LogEntry
from .common import console, kind_counts, top_users


def render_log(guild: Guild | None, entries: list[LogEntry], lines: list[str]):
    title = f"{guild.name} [{guild.tag}]" if guild else "Guild log"
    header = [
        f"[bold]GUILD LOG — {escape(title)}[/bold]",
        f"Entries: {len(entries)}",
    ]
    top_kinds = kind_counts(entries)
    if top_kinds:
        header.append("Top kinds: " + ", ".join([f"{k} ({v})" for k, v in top_kinds]))
    users = top_users(entries)
    if users:
        header.append("Most active: " + ", ".join([f"{escape(k)} ({v})" for k, v in users]))
    console.print(Panel("\n".join(header), expand=False))

    for line in lines:
        console.print(line, markup=False, highlight=False)
