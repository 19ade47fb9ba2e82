"""
Register the slash commands with Discord.

Run once from the command line, not by the Lambda:

    python -m discord_ai_bot.register --env-file .dev.vars
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys

from dotenv import load_dotenv

from .commands import registration_payload
from .config import DEFAULT_DISCORD_API_BASE
from .discord_api import DiscordClient
from .errors import ConfigurationError, DiscordHTTPError

logger = logging.getLogger(__name__)


def _required_env(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise ConfigurationError(f"The {name} environment variable is required.")
    return value


def register_commands(client: DiscordClient, application_id: str) -> list[dict]:
    resp = client.register_commands(application_id, registration_payload())
    data = resp.json()
    return list(data) if isinstance(data, list) else []


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Register Discord slash commands.")
    parser.add_argument("--env-file", default=".dev.vars", help="dotenv file to load")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    load_dotenv(args.env_file)

    try:
        token = _required_env("DISCORD_TOKEN")
        application_id = _required_env("DISCORD_APPLICATION_ID")
    except ConfigurationError as e:
        logger.error("%s", e)
        return 2

    client = DiscordClient(token, os.getenv("DISCORD_API_BASE") or DEFAULT_DISCORD_API_BASE)
    try:
        registered = register_commands(client, application_id)
    except DiscordHTTPError as e:
        logger.error("Error registering commands: %s %s\n%s", e.status, e.reason, e.body or "")
        return 1
    logger.info("Registered all commands")
    print(json.dumps(registered, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
