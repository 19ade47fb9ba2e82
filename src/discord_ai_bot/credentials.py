"""
Resolve bot/API credentials from the environment, optionally backed by
AWS Secrets Manager.
"""

from __future__ import annotations

import base64
import dataclasses
import importlib
import json
import logging

from .config import Settings
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# Secret JSON keys -> Settings fields
_SECRET_FIELDS = {
    "DISCORD_TOKEN": "discord_token",
    "DISCORD_APPLICATION_ID": "discord_application_id",
    "DISCORD_PUBLIC_KEY": "discord_public_key",
    "OPENAI_API_KEY": "openai_api_key",
}


def _boto3():
    # Allow tests to monkeypatch module-level `boto3` symbol.
    return globals().get("boto3") or importlib.import_module("boto3")


def _read_secret(name: str) -> dict[str, str]:
    resp = _boto3().client("secretsmanager").get_secret_value(SecretId=name)
    if "SecretString" in resp:
        raw = resp["SecretString"]
    else:
        raw = base64.b64decode(resp["SecretBinary"]).decode("utf-8")
    data = json.loads(raw or "{}")
    if not isinstance(data, dict):
        raise ConfigurationError(f"secret {name} is not a JSON object")
    return {k: str(v) for k, v in data.items() if v is not None}


def load_credentials(settings: Settings) -> Settings:
    """Fill credentials missing from the environment using SECRETS_NAME.

    Values already present in the environment win over the secret.
    """
    if not settings.secrets_name:
        return settings
    secret = _read_secret(settings.secrets_name)
    updates = {
        field: secret[key]
        for key, field in _SECRET_FIELDS.items()
        if not getattr(settings, field) and secret.get(key)
    }
    logger.debug("credentials from secret %s: %s", settings.secrets_name, sorted(updates))
    return dataclasses.replace(settings, **updates) if updates else settings


def require(settings: Settings, *fields: str) -> None:
    missing = [f for f in fields if not getattr(settings, f)]
    if missing:
        raise ConfigurationError("missing configuration: " + ", ".join(missing))
