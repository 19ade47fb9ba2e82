"""
Configuration helpers and defaults.

Centralize tunables to avoid magic numbers in code/tests.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_DISCORD_API_BASE = "https://discord.com/api/v10"


def _env(name: str, default: str | None = None) -> str | None:
    v = os.getenv(name)
    return v if v is not None else default


def _optional_int(name: str) -> int | None:
    raw = (_env(name) or "").strip()
    return int(raw) if raw else None


@dataclass(frozen=True)
class Settings:
    discord_token: str | None
    discord_application_id: str | None
    discord_public_key: str | None
    openai_api_key: str | None
    chat_model: str
    image_model: str
    image_generation_timeout_ms: int
    image_download_timeout_ms: int
    chat_timeout_ms: int | None
    discord_api_base: str
    http_timeout_seconds: int
    deferred_function_name: str | None
    secrets_name: str | None


def load_settings() -> Settings:
    """Load settings from environment with safe defaults for local tests."""

    return Settings(
        discord_token=_env("DISCORD_TOKEN"),
        discord_application_id=_env("DISCORD_APPLICATION_ID"),
        discord_public_key=_env("DISCORD_PUBLIC_KEY"),
        openai_api_key=_env("OPENAI_API_KEY"),
        chat_model=_env("OPENAI_CHAT_MODEL", "gpt-3.5-turbo") or "gpt-3.5-turbo",
        image_model=_env("OPENAI_IMAGE_MODEL", "dall-e-3") or "dall-e-3",
        image_generation_timeout_ms=int(_env("IMAGE_GENERATION_TIMEOUT_MS", "60000") or 60000),
        image_download_timeout_ms=int(_env("IMAGE_DOWNLOAD_TIMEOUT_MS", "25000") or 25000),
        chat_timeout_ms=_optional_int("CHAT_TIMEOUT_MS"),
        discord_api_base=(_env("DISCORD_API_BASE") or DEFAULT_DISCORD_API_BASE).rstrip("/"),
        http_timeout_seconds=int(_env("HTTP_TIMEOUT_SECONDS", "8") or 8),
        # Inside Lambda the function re-invokes itself for deferred work
        deferred_function_name=_env("DEFERRED_FUNCTION_NAME") or _env("AWS_LAMBDA_FUNCTION_NAME"),
        secrets_name=_env("SECRETS_NAME"),
    )
