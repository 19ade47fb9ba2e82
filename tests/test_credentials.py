import base64
import json

import pytest

import discord_ai_bot.credentials as cred
from discord_ai_bot.config import load_settings
from discord_ai_bot.errors import ConfigurationError


class FakeSecrets:
    def __init__(self, resp):
        self.resp = resp
        self.asked = []

    def get_secret_value(self, SecretId: str):
        self.asked.append(SecretId)
        return self.resp


def _boto(secrets):
    class BotoModule:
        def client(self, name: str):
            if name == "secretsmanager":
                return secrets
            raise ValueError(name)

    return BotoModule()


def test_no_secret_name_is_noop(monkeypatch):
    monkeypatch.delenv("SECRETS_NAME", raising=False)
    s = load_settings()
    assert cred.load_credentials(s) is s


def test_secret_fills_missing_values(monkeypatch):
    monkeypatch.setenv("SECRETS_NAME", "discord-bot")
    monkeypatch.setenv("DISCORD_TOKEN", "from-env")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    fs = FakeSecrets(
        {"SecretString": json.dumps({"DISCORD_TOKEN": "from-secret", "OPENAI_API_KEY": "sk"})}
    )
    monkeypatch.setitem(cred.__dict__, "boto3", _boto(fs))

    s = cred.load_credentials(load_settings())

    assert fs.asked == ["discord-bot"]
    assert s.discord_token == "from-env"
    assert s.openai_api_key == "sk"


def test_secret_binary(monkeypatch):
    monkeypatch.setenv("SECRETS_NAME", "bin")
    monkeypatch.delenv("DISCORD_PUBLIC_KEY", raising=False)
    blob = base64.b64encode(json.dumps({"DISCORD_PUBLIC_KEY": "abcd"}).encode())
    monkeypatch.setitem(cred.__dict__, "boto3", _boto(FakeSecrets({"SecretBinary": blob})))
    assert cred.load_credentials(load_settings()).discord_public_key == "abcd"


def test_secret_must_be_object(monkeypatch):
    monkeypatch.setenv("SECRETS_NAME", "bad")
    monkeypatch.setitem(cred.__dict__, "boto3", _boto(FakeSecrets({"SecretString": "[1]"})))
    with pytest.raises(ConfigurationError):
        cred.load_credentials(load_settings())


def test_require(monkeypatch):
    monkeypatch.delenv("DISCORD_TOKEN", raising=False)
    with pytest.raises(ConfigurationError, match="discord_token"):
        cred.require(load_settings(), "discord_token")
