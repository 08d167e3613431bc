from __future__ import annotations

import asyncio
import logging
from typing import Any, Iterable

import aiohttp

from guildlog_tool.core.config import get_api_base

from .errors import TransportError
from .models import Guild

LOGGER = logging.getLogger(__name__)

GW2_FETCH_TIMEOUT = aiohttp.ClientTimeout(total=30)
IDS_PER_REQUEST = 200
MAX_ATTEMPTS = 3


def _log_sort_key(raw: Any) -> int:
    value = raw.get("id") if isinstance(raw, dict) else None
    return value if isinstance(value, int) else 0


def chunk_ids(ids: Iterable[int], size: int = IDS_PER_REQUEST) -> list[list[int]]:
    ordered = sorted(set(ids))
    return [ordered[i : i + size] for i in range(0, len(ordered), size)]


class Gw2Client:
    """
    Minimal Guild Wars 2 web API client.

    Use as an async context manager; a session passed in by the caller is
    left open on exit.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        session: aiohttp.ClientSession | None = None,
    ):
        self.api_key = api_key
        self.base_url = (base_url or get_api_base()).rstrip("/")
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "Gw2Client":
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=GW2_FETCH_TIMEOUT)
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    # -------------------------
    # Transport
    # -------------------------

    async def _get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        if self._session is None:
            raise TransportError("Client is not open; use 'async with Gw2Client(...)'")

        url = f"{self.base_url}{path}"
        # items and upgrades are public endpoints
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}

        for attempt in range(MAX_ATTEMPTS):
            last = attempt == MAX_ATTEMPTS - 1
            try:
                async with self._session.get(url, params=params, headers=headers) as response:
                    if response.status >= 500 and not last:
                        LOGGER.warning("GW2 API %s returned %s, retrying", url, response.status)
                        await asyncio.sleep(0.2 * (2**attempt))
                        continue
                    if response.status >= 400:
                        body = await response.text()
                        raise TransportError(
                            f"GW2 API request failed: {response.status} {body.strip()[:200]}",
                            status=response.status,
                            url=url,
                        )
                    try:
                        return await response.json(content_type=None)
                    except ValueError as exc:
                        raise TransportError(f"GW2 API returned invalid JSON: {exc}", status=response.status, url=url) from exc
            except (aiohttp.ClientConnectionError, asyncio.TimeoutError) as exc:
                if not last:
                    LOGGER.warning("GW2 API %s unreachable (%s), retrying", url, exc)
                    await asyncio.sleep(0.2 * (2**attempt))
                    continue
                raise TransportError(f"GW2 API unreachable: {exc}", url=url) from exc
            except aiohttp.ClientError as exc:
                raise TransportError(f"GW2 API request failed: {exc}", url=url) from exc

        raise TransportError("GW2 API request failed after retries", url=url)  # pragma: no cover

    # -------------------------
    # Endpoints
    # -------------------------

    async def get_account_guilds(self) -> list[Guild]:
        account = await self._get_json("/v2/account")
        if not isinstance(account, dict):
            raise TransportError("Unexpected /v2/account payload", url=f"{self.base_url}/v2/account")

        guild_ids = account.get("guild_leader") or []
        payloads = await asyncio.gather(*(self._get_json(f"/v2/guild/{gid}") for gid in guild_ids))

        guilds = []
        for gid, payload in zip(guild_ids, payloads):
            if not isinstance(payload, dict):
                raise TransportError(f"Guild {gid} not found", url=f"{self.base_url}/v2/guild/{gid}")
            guilds.append(
                Guild(
                    id=str(payload.get("id") or gid),
                    name=str(payload.get("name") or ""),
                    tag=str(payload.get("tag") or ""),
                )
            )
        return guilds

    async def get_guild_logs(self, guild_id: str) -> list[dict]:
        """Raw log records for a guild, oldest first."""
        path = f"/v2/guild/{guild_id}/log"
        payload = await self._get_json(path)
        if not isinstance(payload, list):
            raise TransportError(f"Unexpected guild log payload for {guild_id}", url=f"{self.base_url}{path}")
        # the API serves newest first; log ids grow with time
        return sorted(payload, key=_log_sort_key)

    async def _lookup_names(self, path: str, ids: Iterable[int]) -> dict[int, str]:
        async def fetch(chunk: list[int]) -> list:
            try:
                payload = await self._get_json(path, params={"ids": ",".join(str(i) for i in chunk)})
            except TransportError as exc:
                # 404 here means none of the ids exist
                if exc.status == 404:
                    return []
                raise
            return payload if isinstance(payload, list) else []

        results = await asyncio.gather(*(fetch(chunk) for chunk in chunk_ids(ids)))

        names: dict[int, str] = {}
        for payload in results:
            for obj in payload:
                if isinstance(obj, dict) and isinstance(obj.get("id"), int) and obj.get("name") is not None:
                    names[obj["id"]] = str(obj["name"])
        return names

    async def lookup_items(self, ids: set[int]) -> dict[int, str]:
        return await self._lookup_names("/v2/items", ids)

    async def lookup_upgrades(self, ids: set[int]) -> dict[int, str]:
        return await self._lookup_names("/v2/guild/upgrades", ids)
