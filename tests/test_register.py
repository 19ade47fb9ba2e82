import json

import discord_ai_bot.register as reg
from discord_ai_bot.discord_api import DiscordResponse
from discord_ai_bot.errors import DiscordHTTPError


class FakeDiscord:
    instances = []

    def __init__(self, token, api_base=None, timeout=8):
        self.token = token
        self.registered = []
        FakeDiscord.instances.append(self)

    def register_commands(self, application_id, commands):
        self.registered.append((application_id, commands))
        body = json.dumps([{"id": "1", "name": c["name"]} for c in commands]).encode()
        return DiscordResponse(200, "OK", body)


class FailingDiscord(FakeDiscord):
    def register_commands(self, application_id, commands):
        raise DiscordHTTPError(401, "Unauthorized", '{"message": "401: Unauthorized"}')


def _clear_env(monkeypatch):
    # set then delete so monkeypatch restores the original state afterwards
    for name in ("DISCORD_TOKEN", "DISCORD_APPLICATION_ID"):
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)


def test_register_from_env_file(monkeypatch, tmp_path, capsys):
    _clear_env(monkeypatch)
    env_file = tmp_path / ".dev.vars"
    env_file.write_text("DISCORD_TOKEN=tok\nDISCORD_APPLICATION_ID=app-9\n")
    FakeDiscord.instances.clear()
    monkeypatch.setitem(reg.__dict__, "DiscordClient", FakeDiscord)

    assert reg.main(["--env-file", str(env_file)]) == 0

    (client,) = FakeDiscord.instances
    assert client.token == "tok"
    ((app, cmds),) = client.registered
    assert app == "app-9"
    assert [c["name"] for c in cmds] == ["ai", "imagine"]
    printed = json.loads(capsys.readouterr().out)
    assert [c["name"] for c in printed] == ["ai", "imagine"]


def test_register_requires_env(monkeypatch, tmp_path):
    _clear_env(monkeypatch)
    monkeypatch.setitem(reg.__dict__, "DiscordClient", FakeDiscord)
    assert reg.main(["--env-file", str(tmp_path / "missing")]) == 2


def test_register_failure_exit_code(monkeypatch, tmp_path, caplog):
    monkeypatch.setenv("DISCORD_TOKEN", "tok")
    monkeypatch.setenv("DISCORD_APPLICATION_ID", "app")
    monkeypatch.setitem(reg.__dict__, "DiscordClient", FailingDiscord)
    assert reg.main(["--env-file", str(tmp_path / "missing")]) == 1
    assert "401: Unauthorized" in caplog.text
