from __future__ import annotations

import json
from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from guildlog.models import Guild

FIXTURE_DIR = Path(__file__).resolve().parent / "fixtures"

ITEM_NAMES = {
    19700: "Mithril Ore",
    19721: "Glob of Ectoplasm",
    24277: "Pile of Crystalline Dust",
}

UPGRADE_NAMES = {
    38: "Guild Armorer 1",
    55: "Guild Treasure Trove",
}


class FakeClient:
    """Stands in for Gw2Client: same coroutine surface, canned data."""

    def __init__(self, api_key="test-key", guilds=None, logs=None, items=None, upgrades=None):
        self.api_key = api_key
        self.guilds = guilds if guilds is not None else [Guild(id="G1", name="Seraph Wardens", tag="SW")]
        self.logs = logs if logs is not None else []
        self.items = ITEM_NAMES if items is None else items
        self.upgrades = UPGRADE_NAMES if upgrades is None else upgrades
        self.item_calls: list[set[int]] = []
        self.upgrade_calls: list[set[int]] = []
        self.log_requests: list[str] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return None

    async def get_account_guilds(self):
        return list(self.guilds)

    async def get_guild_logs(self, guild_id):
        self.log_requests.append(guild_id)
        return list(self.logs)

    async def lookup_items(self, ids):
        self.item_calls.append(set(ids))
        return {i: self.items[i] for i in ids if i in self.items}

    async def lookup_upgrades(self, ids):
        self.upgrade_calls.append(set(ids))
        return {i: self.upgrades[i] for i in ids if i in self.upgrades}


@pytest.fixture(autouse=True)
def isolated_env(tmp_path, monkeypatch):
    monkeypatch.setenv("GW2_GUILDLOG_PREFS", str(tmp_path / "preferences.json"))
    monkeypatch.delenv("GW2_API_KEY", raising=False)
    monkeypatch.delenv("GW2_API_BASE", raising=False)
    return tmp_path


@pytest.fixture
def raw_log():
    return json.loads((FIXTURE_DIR / "guild_log.json").read_text(encoding="utf-8"))


@pytest.fixture
def fake_client(raw_log):
    return FakeClient(logs=raw_log)


@pytest.fixture
def client_factory(fake_client):
    def factory(api_key):
        fake_client.api_key = api_key
        return fake_client

    return factory
