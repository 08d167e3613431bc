from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from guildlog.client import Gw2Client
from guildlog.errors import GuildLogError
from guildlog.settings import read_settings
from guildlog_tool.core import commands as core_commands
from guildlog_tool.core.config import get_env_api_key, get_prefs_path
from guildlog_tool.core.response import envelope, problem, problem_from

LOGGER = logging.getLogger(__name__)

ClientFactory = Callable[[str], Gw2Client]


def _error(
    command: str,
    params: dict[str, Any],
    code: str,
    message: str,
    hint: str | None = None,
    details: str | None = None,
):
    return envelope(command, params, error=problem(code, message, hint=hint, details=details))


def _public_params(params: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in params.items() if k != "api_key" and v is not None}


def _empty_warning(data: dict[str, Any]) -> list[tuple[str, str]]:
    if data.get("count"):
        return []
    return [("EMPTY_LOG", "No log entries to render.")]


def resolve_api_key(params: dict[str, Any]) -> str | None:
    """API key from params, then GW2_API_KEY, then the preferences file."""
    key = (params.get("api_key") or "").strip()
    if key:
        return key
    key = get_env_api_key()
    if key:
        return key
    settings = read_settings(get_prefs_path())
    return settings.api_key if settings else None


def resolve_guild_id(params: dict[str, Any]) -> str | None:
    gid = params.get("guild_id") or params.get("guild")
    if gid and str(gid).strip():
        return str(gid).strip()
    settings = read_settings(get_prefs_path())
    return settings.guild_id if settings else None


async def _run_safely(command: str, params: dict[str, Any], func: Callable[[], Awaitable[dict[str, Any]]]):
    try:
        return await func()
    except GuildLogError as exc:
        return envelope(command, params, error=problem_from(exc))
    except Exception as exc:  # pragma: no cover - safety net
        LOGGER.exception("Command %s failed", command)
        return _error(command, params, "INTERNAL", "Command failed.", details=str(exc))


async def run_command(
    command: str,
    params: dict[str, Any] | None = None,
    client_factory: ClientFactory | None = None,
) -> dict[str, Any]:
    params = params or {}
    client_factory = client_factory or Gw2Client
    cmd = (command or "").strip().lower()
    public = _public_params(params)

    def _no_key():
        return _error(cmd, public, "NO_API_KEY", "No API key available.")

    async def _execute() -> dict[str, Any]:
        if cmd == "guilds":
            api_key = resolve_api_key(params)
            if not api_key:
                return _no_key()
            async with client_factory(api_key) as client:
                data = await core_commands.guilds(client)
            return envelope("guilds", public, data)

        if cmd == "logs":
            api_key = resolve_api_key(params)
            if not api_key:
                return _no_key()
            guild_id = resolve_guild_id(params)
            if not guild_id:
                return _error("logs", public, "VALIDATION", "Missing guild id.", "Provide guild=<id> or pick one with `gw2-guildlog logs`.")
            async with client_factory(api_key) as client:
                data = await core_commands.logs(client, guild_id)
            return envelope("logs", {**public, "guild_id": guild_id}, data, warnings=_empty_warning(data))

        if cmd == "render":
            path = params.get("path")
            if not path:
                return _error("render", public, "VALIDATION", "Missing path.", "Provide a JSON file saved from the guild log endpoint.")
            try:
                raw = core_commands.load_raw_file(str(path))
            except (OSError, ValueError) as exc:
                return _error("render", public, "VALIDATION", "Cannot read log file.", "Provide a JSON list of log entries.", details=str(exc))
            api_key = resolve_api_key(params) or ""
            async with client_factory(api_key) as client:
                data = await core_commands.render_raw(client, raw)
            return envelope("render", public, {"path": str(path), **data}, warnings=_empty_warning(data))

        return _error("unknown", public, "VALIDATION", f"Unknown command: {command}", "Check --help for commands.")

    return await _run_safely(cmd, public, _execute)
