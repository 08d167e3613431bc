import asyncio
import json
import logging
import sys
from dataclasses import replace

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel

from .client import Gw2Client
from .errors import GuildLogError
from .models import Guild
from .pipeline import render_entries
from .prompt import prompt_api_key, prompt_guild
from .render import render_guilds, render_log
from .settings import Settings, read_settings, write_settings
from guildlog_tool.core.commands import load_raw_file
from guildlog_tool.core.config import get_env_api_key, get_log_level, get_prefs_path
from guildlog_tool.core.response import envelope, problem
from guildlog_tool.core.runner import run_command

console = Console()

HELP_TEXT = """GW2 Guild Log

Commands:

help
  Show this help

logs [guild=<id>]
  Fetch the guild log and print one line per entry.
  Asks for an API key on first use and for the guild when none is given;
  both are remembered in preferences.json.

guilds
  List the guilds your account leads

render <file.json>
  Render a guild log saved as JSON (names are looked up through the API)

web
  Start local web API server (http://127.0.0.1:8000)

Options:
  --format pretty|json (default: pretty)

Environment:
  GW2_API_KEY             API key (overrides the stored one)
  GW2_GUILDLOG_PREFS      preferences file (default ./preferences.json)
  GW2_API_BASE            API base URL
  GW2_GUILDLOG_LOG_LEVEL  DEBUG|INFO|WARNING (default WARNING)

Examples:
  logs
  logs guild=116E0C0E-0035-44A9-BB22-4AE3E23127E5 --format json
  render saved_log.json
"""


def _parse_kv_args(args: list[str]) -> dict:
    out = {}
    for a in args:
        if "=" in a:
            k, v = a.split("=", 1)
            out[k.strip()] = v.strip().strip('"')
    return out


def _setup_logging() -> None:
    logging.basicConfig(
        level=get_log_level(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _print_error(exc: GuildLogError) -> int:
    console.print(f"[red]{exc.code}:[/red] {escape(str(exc))}")
    return 1


def _load_settings() -> tuple[Settings | None, Settings | None]:
    """
    (stored, effective) preferences.

    GW2_API_KEY replaces the stored key for this run only; it is never
    written back to the preferences file.
    """
    stored = read_settings(get_prefs_path())
    env_key = get_env_api_key()
    if not env_key:
        return stored, stored
    effective = replace(stored, api_key=env_key) if stored else Settings(api_key=env_key)
    return stored, effective


def _remember(settings: Settings, stored: Settings | None) -> None:
    if get_env_api_key():
        if stored is None:
            return
        settings = replace(settings, api_key=stored.api_key)
    write_settings(settings, get_prefs_path())


async def _interactive_logs(guild_arg: str | None) -> int:
    stored, settings = _load_settings()
    if settings is None:
        settings = Settings(api_key=prompt_api_key())

    async with Gw2Client(settings.api_key) as client:
        guilds = await client.get_account_guilds()
        # the key works, keep it
        _remember(settings, stored)

        if guild_arg:
            selected = next((g for g in guilds if g.id.lower() == guild_arg.lower()), None)
            if selected is None:
                selected = Guild(id=guild_arg, name=guild_arg, tag="?")
        elif not guilds:
            console.print("[yellow]This account leads no guild.[/yellow] Use logs guild=<id>.")
            return 1
        else:
            selected = prompt_guild(guilds, settings.guild_id)

        settings = replace(settings, guild_id=selected.id)
        raw = await client.get_guild_logs(selected.id)
        _remember(settings, stored)

        entries, lines = await render_entries(raw, client.lookup_items, client.lookup_upgrades)

    render_log(selected, entries, lines)
    return 0


async def _list_guilds() -> int:
    stored, settings = _load_settings()
    if settings is None:
        settings = Settings(api_key=prompt_api_key())
    async with Gw2Client(settings.api_key) as client:
        guilds = await client.get_account_guilds()
    _remember(settings, stored)
    render_guilds(guilds, settings.guild_id)
    return 0


async def _render_saved(path: str) -> int:
    raw = load_raw_file(path)
    _stored, settings = _load_settings()
    async with Gw2Client(settings.api_key if settings else "") as client:
        entries, lines = await render_entries(raw, client.lookup_items, client.lookup_upgrades)
    render_log(None, entries, lines)
    return 0


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]
    argv = list(argv)

    output_format = "pretty"
    if "--format" in argv:
        idx = argv.index("--format")
        if idx + 1 < len(argv):
            output_format = argv[idx + 1]
            argv = argv[:idx] + argv[idx + 2 :]
    else:
        for i, arg in enumerate(list(argv)):
            if arg.startswith("--format="):
                output_format = arg.split("=", 1)[1]
                argv.pop(i)
                break

    if not argv or argv[0] in ("help", "-h", "--help"):
        console.print(Panel(HELP_TEXT.strip(), title="HELP"))
        return 0

    _setup_logging()
    cmd, *args = argv
    kv = _parse_kv_args(args)

    def emit_response(payload: dict) -> int:
        print(json.dumps(payload, ensure_ascii=False))
        return 0 if payload.get("ok") else 1

    def emit_error(command: str, params: dict, message: str, hint: str | None = None):
        response = envelope(command, params, error=problem("VALIDATION", message, hint=hint))
        print(json.dumps(response, ensure_ascii=False))
        return 1

    try:
        if cmd == "logs":
            guild = kv.get("guild") or kv.get("id")
            if output_format == "json":
                return emit_response(asyncio.run(run_command("logs", {"guild_id": guild})))
            return asyncio.run(_interactive_logs(guild))

        if cmd == "guilds":
            if output_format == "json":
                return emit_response(asyncio.run(run_command("guilds", {})))
            return asyncio.run(_list_guilds())

        if cmd == "render":
            paths = [a for a in args if "=" not in a]
            if not paths:
                if output_format == "json":
                    return emit_error("render", {}, "Usage: render <file.json>")
                console.print("[red]Usage:[/red] render <file.json>")
                return 1
            if output_format == "json":
                return emit_response(asyncio.run(run_command("render", {"path": paths[0]})))
            try:
                return asyncio.run(_render_saved(paths[0]))
            except (OSError, ValueError) as exc:
                console.print(f"[red]Cannot read log file:[/red] {escape(str(exc))}")
                return 1
    except GuildLogError as exc:
        return _print_error(exc)

    if cmd == "web":
        if output_format == "json":
            return emit_error("web", {}, "Use `uvicorn guildlog_tool.api.server:app` to start the web server.", hint="Run the web server command directly.")
        import uvicorn

        console.print("[green]Starting web server...[/green]")
        uvicorn.run("guildlog_tool.api.server:app", host="127.0.0.1", port=8000, reload=False)
        return 0

    if output_format == "json":
        return emit_error("unknown", {"command": cmd}, f"Unknown command: {cmd}", hint="Run `help` to see commands.")
    console.print(Panel(f"Unknown command: {cmd}\n\n" + HELP_TEXT.strip(), title="ERROR"))
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
