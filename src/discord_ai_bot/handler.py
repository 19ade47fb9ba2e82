"""
AWS Lambda handler for Discord interactions (Function URL target).
"""

from __future__ import annotations

import base64
import json
import logging
import time
from typing import Any, Callable

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey

from . import commands
from .background import is_task_event, spawn_deferred
from .chat import APOLOGY, run_chat
from .config import Settings, load_settings
from .credentials import load_credentials, require
from .errors import (
    ConfigurationError,
    InvalidOptions,
    SignatureInvalid,
    UnknownCommand,
)
from .imagine import run_imagine
from .interactions import Interaction, InteractionResponseType, InteractionType
from .logutil import configure_logging, log_event, request_id

logger = logging.getLogger(__name__)


def _response(status: int, body: dict[str, Any]) -> dict[str, Any]:
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body, ensure_ascii=False),
    }


def _text_response(status: int, text: str) -> dict[str, Any]:
    return {
        "statusCode": status,
        "headers": {"Content-Type": "text/plain; charset=utf-8"},
        "body": text,
    }


def _raw_body(event: dict[str, Any]) -> bytes:
    body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        return base64.b64decode(body, validate=True)
    if isinstance(body, (bytes, bytearray)):
        return bytes(body)
    return str(body).encode("utf-8")


def _get_header(event: dict[str, Any], name: str) -> str | None:
    headers = event.get("headers") or {}
    for k, v in headers.items():
        if k.lower() == name.lower():
            return v
    return None


def _method_and_path(event: dict[str, Any]) -> tuple[str, str]:
    http = (event.get("requestContext") or {}).get("http") or {}
    method = http.get("method") or event.get("httpMethod") or ""
    path = event.get("rawPath") or http.get("path") or event.get("path") or "/"
    return method.upper(), path


def verify_signature(
    body: bytes, signature: str | None, timestamp: str | None, public_key: str
) -> None:
    """Check Discord's Ed25519 signature over ``timestamp + body`` (raw bytes)."""
    if not signature or not timestamp:
        raise SignatureInvalid("missing signature headers")
    try:
        key = Ed25519PublicKey.from_public_bytes(bytes.fromhex(public_key))
        key.verify(bytes.fromhex(signature), timestamp.encode("utf-8") + body)
    except (InvalidSignature, ValueError) as e:
        raise SignatureInvalid("signature mismatch") from e


def run_deferred_task(task: str, interaction: Interaction, settings: Settings) -> None:
    if task == commands.IMAGINE_COMMAND.name:
        run_imagine(interaction, commands.ImagineParams.parse(interaction.options), settings)
        return
    raise UnknownCommand(task)


def _handle_chat(interaction: Interaction, settings: Settings, _rid: str | None) -> dict[str, Any]:
    params = commands.ChatParams.parse(interaction.options)
    content = run_chat(interaction, params, settings)
    return _response(
        200,
        {
            "type": InteractionResponseType.CHANNEL_MESSAGE_WITH_SOURCE,
            "data": {"content": content},
        },
    )


def _handle_imagine(
    interaction: Interaction, settings: Settings, rid: str | None
) -> dict[str, Any]:
    # Validate before acknowledging so bad options get a 400, not a silent deferral
    commands.ImagineParams.parse(interaction.options)
    try:
        spawn_deferred(
            commands.IMAGINE_COMMAND.name,
            interaction,
            settings,
            lambda task, i: run_deferred_task(task, i, settings),
        )
    except Exception as e:
        logger.exception("Failed to start deferred task")
        log_event(logger, "deferred_spawn_failed", level=logging.ERROR, rid=rid, error=str(e))
        return _response(
            200,
            {
                "type": InteractionResponseType.CHANNEL_MESSAGE_WITH_SOURCE,
                "data": {"content": APOLOGY},
            },
        )
    return _response(200, {"type": InteractionResponseType.DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE})


_HANDLERS: dict[str, Callable[[Interaction, Settings, str | None], dict[str, Any]]] = {
    commands.AI_COMMAND.name: _handle_chat,
    commands.IMAGINE_COMMAND.name: _handle_imagine,
}


def _dispatch_command(
    interaction: Interaction, settings: Settings, rid: str | None
) -> dict[str, Any]:
    try:
        descriptor = commands.lookup(interaction.command_name)
        log_event(
            logger,
            "command",
            rid=rid,
            interactionId=interaction.id,
            command=descriptor.name,
            user=interaction.user_display_name,
        )
        return _HANDLERS[descriptor.name](interaction, settings, rid)
    except (UnknownCommand, InvalidOptions) as e:
        log_event(logger, "bad_command", rid=rid, interactionId=interaction.id, error=str(e))
        return _response(400, {"error": "Unknown Type"})


def _handle_post(event: dict[str, Any], settings: Settings, rid: str | None) -> dict[str, Any]:
    require(settings, "discord_public_key")

    # 1) Verify signature before anything else; undecodable bodies fail here too
    try:
        body = _raw_body(event)
        verify_signature(
            body,
            _get_header(event, "x-signature-ed25519"),
            _get_header(event, "x-signature-timestamp"),
            settings.discord_public_key or "",
        )
        payload = json.loads(body.decode("utf-8"))
    except (SignatureInvalid, ValueError) as e:
        log_event(logger, "auth_failed", rid=rid, reason=str(e))
        return _text_response(401, "Bad request signature.")
    if not isinstance(payload, dict):
        return _text_response(401, "Bad request signature.")

    # 2) Classify
    interaction = Interaction.from_payload(payload)
    if interaction.type == InteractionType.PING:
        log_event(logger, "ping", rid=rid)
        return _response(200, {"type": InteractionResponseType.PONG})
    if interaction.type == InteractionType.APPLICATION_COMMAND:
        return _dispatch_command(interaction, settings, rid)

    log_event(logger, "unknown_interaction_type", rid=rid, type=interaction.type)
    return _response(400, {"error": "Unknown Type"})


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    configure_logging(logging.getLogger("discord_ai_bot"))
    rid = request_id(context)
    start_ts = time.time()

    try:
        settings = load_credentials(load_settings())
    except ConfigurationError as e:
        log_event(logger, "config_error", level=logging.ERROR, rid=rid, error=str(e))
        return _response(500, {"error": "configuration"})

    # Second half of a deferred command, sent by our own async invoke
    if is_task_event(event):
        interaction = Interaction.from_payload(event.get("interaction") or {})
        try:
            run_deferred_task(str(event["deferred_task"]), interaction, settings)
        except Exception as e:
            # Raising would make Lambda retry the async event and complete twice
            logger.exception("Deferred task failed")
            log_event(
                logger,
                "deferred_task_failed",
                level=logging.ERROR,
                rid=rid,
                interactionId=interaction.id,
                error=str(e),
            )
            return {"result": "error"}
        log_event(
            logger,
            "deferred_task_done",
            rid=rid,
            interactionId=interaction.id,
            ms_total=int((time.time() - start_ts) * 1000),
        )
        return {"result": "ok"}

    method, path = _method_and_path(event)
    if path != "/":
        return _text_response(404, "Not Found.")
    if method == "GET":
        return _text_response(200, f"👋 {settings.discord_application_id}")
    if method != "POST":
        return _text_response(404, "Not Found.")

    try:
        res = _handle_post(event, settings, rid)
    except ConfigurationError as e:
        log_event(logger, "config_error", level=logging.ERROR, rid=rid, error=str(e))
        return _response(500, {"error": "configuration"})
    log_event(
        logger,
        "done",
        rid=rid,
        status=res["statusCode"],
        ms_total=int((time.time() - start_ts) * 1000),
    )
    return res
