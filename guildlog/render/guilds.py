from __future__ import annotations

from rich.markup import escape
from rich.table import Table

from ..models import Guild
from .common import console


def render_guilds(guilds: list[Guild], preselected_id: str | None = None):
    t = Table(title="Guilds you lead", show_lines=True)
    t.add_column("#", justify="right")
    t.add_column("Name")
    t.add_column("Tag")
    t.add_column("ID")
    for i, guild in enumerate(guilds, 1):
        name = guild.name + (" (default)" if guild.id == preselected_id else "")
        t.add_row(str(i), escape(name), escape(guild.tag), guild.id)
    console.print(t)
