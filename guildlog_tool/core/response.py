"""JSON envelope shared by `--format json` and the web API."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from guildlog.errors import DecodeError, GuildLogError, ResolutionError, TransportError
from guildlog.util import utc_now_iso

from .config import get_api_base, get_prefs_path

HINTS = {
    "DECODE": "The guild log holds an entry this tool cannot read.",
    "RESOLUTION": "The API did not return a name for every id.",
    "TRANSPORT": "Check the API key permissions and retry.",
    "NO_API_KEY": "Set GW2_API_KEY or run `gw2-guildlog logs` once to store one.",
    "VALIDATION": "Check usage.",
    "INTERNAL": "Check logs or retry.",
}


@dataclass(frozen=True)
class Problem:
    code: str
    message: str
    hint: str
    details: str | None = None


def describe(exc: GuildLogError) -> str | None:
    if isinstance(exc, DecodeError):
        return f"tag={exc.tag} field={exc.field} id={exc.entry_id}"
    if isinstance(exc, ResolutionError):
        return f"kind={exc.kind} ids={','.join(str(i) for i in exc.missing_ids)}"
    if isinstance(exc, TransportError):
        return f"status={exc.status} url={exc.url}"
    return None


def problem(code: str, message: str, hint: str | None = None, details: str | None = None) -> Problem:
    return Problem(code=code, message=message, hint=hint or HINTS.get(code, HINTS["INTERNAL"]), details=details)


def problem_from(exc: GuildLogError) -> Problem:
    return problem(exc.code, str(exc), details=describe(exc))


def envelope(
    command: str,
    params: dict[str, Any],
    data: Any = None,
    error: Problem | None = None,
    warnings: list[tuple[str, str]] | None = None,
) -> dict[str, Any]:
    """
    Build the response dict.

    `warnings` holds (code, message) pairs; a failed command always reports
    its own error code there as well.
    """
    notes = list(warnings or [])
    if error is not None:
        notes.append((error.code, error.message))
    return {
        "ok": error is None,
        "command": command,
        "params": params,
        "warnings": [{"code": code, "message": message} for code, message in notes],
        "data": data,
        "error": asdict(error) if error else None,
        "meta": {
            "prefs_path": str(get_prefs_path()),
            "api_base": get_api_base(),
            "generated_at": utc_now_iso(),
        },
    }
