from __future__ import annotations

import asyncio
import json

import aiohttp
import pytest

from guildlog.client import Gw2Client, chunk_ids
from guildlog.errors import TransportError
from guildlog.models import Guild

BASE = "https://api.test"


class FakeResponse:
    def __init__(self, status=200, payload=None, body=None):
        self.status = status
        self._payload = payload
        self._body = body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False

    async def json(self, content_type=None):
        if self._body is not None:
            return json.loads(self._body)
        return self._payload

    async def text(self):
        return self._body if self._body is not None else json.dumps(self._payload)


class FakeSession:
    """Answers GET requests from a path -> responses table, in order."""

    def __init__(self, routes):
        self.routes = {path: list(responses) for path, responses in routes.items()}
        self.calls = []

    def get(self, url, params=None, headers=None):
        path = url[len(BASE) :]
        self.calls.append((path, params, headers))
        response = self.routes[path].pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _run(session, coro_fn, api_key="KEY"):
    async def scenario():
        async with Gw2Client(api_key, base_url=BASE, session=session) as client:
            return await coro_fn(client)

    return asyncio.run(scenario())


def test_chunk_ids():
    chunks = chunk_ids(range(450))
    assert [len(c) for c in chunks] == [200, 200, 50]
    assert chunk_ids({3, 1, 2}, size=2) == [[1, 2], [3]]
    assert chunk_ids([]) == []


def test_account_guilds():
    session = FakeSession(
        {
            "/v2/account": [FakeResponse(payload={"name": "Ann.1234", "guild_leader": ["G1", "G2"]})],
            "/v2/guild/G1": [FakeResponse(payload={"id": "G1", "name": "Seraph Wardens", "tag": "SW"})],
            "/v2/guild/G2": [FakeResponse(payload={"id": "G2", "name": "Night Owls", "tag": "OWL"})],
        }
    )
    guilds = _run(session, lambda c: c.get_account_guilds())
    assert guilds == [Guild(id="G1", name="Seraph Wardens", tag="SW"), Guild(id="G2", name="Night Owls", tag="OWL")]
    assert session.calls[0][2] == {"Authorization": "Bearer KEY"}


def test_account_without_guild_scope():
    session = FakeSession({"/v2/account": [FakeResponse(payload={"name": "Ann.1234"})]})
    assert _run(session, lambda c: c.get_account_guilds()) == []


def test_guild_logs_are_returned_oldest_first():
    newest_first = [{"id": 3, "type": "joined"}, {"id": 2, "type": "joined"}, {"id": 1, "type": "joined"}]
    session = FakeSession({"/v2/guild/G1/log": [FakeResponse(payload=newest_first)]})
    logs = _run(session, lambda c: c.get_guild_logs("G1"))
    assert [raw["id"] for raw in logs] == [1, 2, 3]


def test_guild_logs_must_be_a_list():
    session = FakeSession({"/v2/guild/G1/log": [FakeResponse(payload={"text": "nope"})]})
    with pytest.raises(TransportError):
        _run(session, lambda c: c.get_guild_logs("G1"))


def test_lookup_items_chunks_and_merges():
    ids = set(range(1, 251))
    first = [{"id": i, "name": f"Item {i}"} for i in range(1, 201)]
    second = [{"id": i, "name": f"Item {i}"} for i in range(201, 251)]
    session = FakeSession({"/v2/items": [FakeResponse(status=200, payload=first), FakeResponse(status=206, payload=second)]})
    names = _run(session, lambda c: c.lookup_items(ids))
    assert names == {i: f"Item {i}" for i in ids}
    sent = [params["ids"] for _path, params, _headers in session.calls]
    assert sent[0] == ",".join(str(i) for i in range(1, 201))
    assert sent[1] == ",".join(str(i) for i in range(201, 251))


def test_lookup_upgrades_all_unknown_is_empty():
    session = FakeSession({"/v2/guild/upgrades": [FakeResponse(status=404, payload={"text": "all ids provided are invalid"})]})
    assert _run(session, lambda c: c.lookup_upgrades({1})) == {}


def test_lookup_without_key_sends_no_auth_header():
    session = FakeSession({"/v2/items": [FakeResponse(payload=[{"id": 1, "name": "Thing"}])]})
    assert _run(session, lambda c: c.lookup_items({1}), api_key="") == {1: "Thing"}
    assert session.calls[0][2] == {}


def test_client_error_status_raises_transport_error():
    session = FakeSession({"/v2/account": [FakeResponse(status=401, payload={"text": "Invalid access token"})]})
    with pytest.raises(TransportError) as info:
        _run(session, lambda c: c.get_account_guilds())
    assert info.value.status == 401
    assert info.value.url == f"{BASE}/v2/account"
    assert len(session.calls) == 1


def test_server_errors_are_retried():
    session = FakeSession(
        {
            "/v2/guild/G1/log": [
                FakeResponse(status=503, payload={"text": "busy"}),
                FakeResponse(payload=[{"id": 1}]),
            ]
        }
    )
    assert _run(session, lambda c: c.get_guild_logs("G1")) == [{"id": 1}]
    assert len(session.calls) == 2


def test_timeouts_give_up_after_three_attempts():
    session = FakeSession({"/v2/account": [asyncio.TimeoutError(), asyncio.TimeoutError(), asyncio.TimeoutError()]})
    with pytest.raises(TransportError):
        _run(session, lambda c: c.get_account_guilds())
    assert len(session.calls) == 3


def test_connection_error_recovers():
    session = FakeSession(
        {
            "/v2/account": [
                aiohttp.ClientConnectionError("reset"),
                FakeResponse(payload={"guild_leader": []}),
            ]
        }
    )
    assert _run(session, lambda c: c.get_account_guilds()) == []


def test_invalid_json_raises_transport_error():
    session = FakeSession({"/v2/account": [FakeResponse(body="<html>oops</html>")]})
    with pytest.raises(TransportError):
        _run(session, lambda c: c.get_account_guilds())


def test_closed_client_refuses_requests():
    client = Gw2Client("KEY", base_url=BASE)
    with pytest.raises(TransportError):
        asyncio.run(client.get_account_guilds())
