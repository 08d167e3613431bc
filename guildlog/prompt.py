from __future__ import annotations

from rich.console import Console
from rich.prompt import Prompt

from .models import Guild

console = Console()


def prompt_api_key() -> str:
    while True:
        value = Prompt.ask("Provide an API key", console=console, password=True, default="", show_default=False)
        if value and value.strip():
            return value.strip()
        console.print("[red]Invalid input[/red]")


def prompt_guild(guilds: list[Guild], preselected_id: str | None = None) -> Guild:
    """
    Ask which guild to use. Blank input picks the preselected guild when
    there is one.
    """
    preselected = next((g for g in guilds if g.id == preselected_id), None)

    console.print("Choose a guild:")
    for i, guild in enumerate(guilds, 1):
        suffix = " (default)" if guild is preselected else ""
        console.print(f"{i}: {guild.name} [{guild.tag}]{suffix}", markup=False, highlight=False)

    while True:
        choice = Prompt.ask("Your choice?", console=console, default="", show_default=False).strip()
        if not choice and preselected is not None:
            return preselected
        if choice.isdigit() and 1 <= int(choice) <= len(guilds):
            return guilds[int(choice) - 1]
        console.print("[red]Invalid choice[/red]")
