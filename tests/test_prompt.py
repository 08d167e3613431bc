from __future__ import annotations

from rich.console import Console

from guildlog import prompt as prompt_module
from guildlog.models import Guild
from guildlog.prompt import prompt_api_key, prompt_guild

GUILDS = [
    Guild(id="G1", name="Seraph Wardens", tag="SW"),
    Guild(id="G2", name="Night Owls", tag="OWL"),
]


def _answers(monkeypatch, values):
    answers = iter(values)
    monkeypatch.setattr(prompt_module.Prompt, "ask", lambda *args, **kwargs: next(answers))
    console = Console(record=True, width=120, force_terminal=False)
    monkeypatch.setattr(prompt_module, "console", console)
    return console


def test_api_key_repeats_until_non_blank(monkeypatch):
    console = _answers(monkeypatch, ["", "   ", " KEY-1 "])
    assert prompt_api_key() == "KEY-1"
    assert console.export_text().count("Invalid input") == 2


def test_guild_blank_picks_default(monkeypatch):
    console = _answers(monkeypatch, [""])
    assert prompt_guild(GUILDS, "G2") == GUILDS[1]
    text = console.export_text()
    assert "1: Seraph Wardens [SW]\n" in text
    assert "2: Night Owls [OWL] (default)" in text


def test_guild_invalid_choices(monkeypatch):
    console = _answers(monkeypatch, ["", "abc", "3", "0", "1"])
    assert prompt_guild(GUILDS, None) == GUILDS[0]
    assert console.export_text().count("Invalid choice") == 4
