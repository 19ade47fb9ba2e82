"""
Minimal Discord REST client (v10) using stdlib urllib.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
import uuid
from dataclasses import dataclass
from typing import Any

from .config import DEFAULT_DISCORD_API_BASE
from .errors import DeliveryFailure, DiscordHTTPError

logger = logging.getLogger(__name__)

USER_AGENT = "DiscordBot (discord-ai-bot, 1.0)"


@dataclass(frozen=True)
class FilePart:
    field: str
    filename: str
    data: bytes
    media_type: str


@dataclass(frozen=True)
class DiscordResponse:
    status: int
    reason: str
    body: bytes

    def json(self) -> Any:
        try:
            return json.loads(self.body.decode("utf-8") or "null")
        except ValueError:
            return None


def encode_multipart(
    payload: dict[str, Any], files: list[FilePart], boundary: str | None = None
) -> tuple[bytes, str]:
    """Build a multipart/form-data body; return (body, content_type)."""
    boundary = boundary or uuid.uuid4().hex
    lines: list[bytes] = []
    for part in files:
        lines.append(f"--{boundary}".encode())
        lines.append(
            (
                f'Content-Disposition: form-data; name="{part.field}"; '
                f'filename="{part.filename}"'
            ).encode()
        )
        lines.append(f"Content-Type: {part.media_type}".encode())
        lines.append(b"")
        lines.append(part.data)
    lines.append(f"--{boundary}".encode())
    lines.append(b'Content-Disposition: form-data; name="payload_json"')
    lines.append(b"Content-Type: application/json")
    lines.append(b"")
    lines.append(json.dumps(payload, ensure_ascii=False).encode("utf-8"))
    lines.append(f"--{boundary}--".encode())
    lines.append(b"")
    return b"\r\n".join(lines), f"multipart/form-data; boundary={boundary}"


class DiscordClient:
    def __init__(
        self, bot_token: str, api_base: str = DEFAULT_DISCORD_API_BASE, timeout: int = 8
    ) -> None:
        self.api_base = api_base.rstrip("/")
        self.bot_token = bot_token
        self.timeout = timeout

    # ----- Helpers -----
    def _url(self, path: str) -> str:
        return self.api_base + path

    def _request(
        self,
        method: str,
        url: str,
        body: bytes | None = None,
        content_type: str | None = None,
    ) -> DiscordResponse:
        headers = {"Authorization": f"Bot {self.bot_token}", "User-Agent": USER_AGENT}
        if content_type:
            headers["Content-Type"] = content_type
        req = urllib.request.Request(url, data=body, headers=headers, method=method)
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:  # nosec B310
                return DiscordResponse(resp.status, resp.reason or "", resp.read())
        except urllib.error.HTTPError as e:
            detail = e.read()
            logger.debug("discord %s %s -> %s %s", method, url, e.code, detail[:500])
            raise DiscordHTTPError(
                e.code, e.reason or "", detail.decode("utf-8", "replace")
            ) from e

    def _send_json(self, method: str, url: str, payload: Any) -> DiscordResponse:
        body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        return self._request(method, url, body, "application/json")

    # ----- Public APIs -----
    def edit_original_response(
        self,
        application_id: str,
        interaction_token: str,
        payload: dict[str, Any],
        files: list[FilePart] | None = None,
    ) -> DiscordResponse:
        url = self._url(
            f"/webhooks/{application_id}/{urllib.parse.quote(interaction_token)}"
            "/messages/@original"
        )
        try:
            if not files:
                return self._send_json("PATCH", url, payload)
            body, content_type = encode_multipart(payload, files)
            return self._request("PATCH", url, body, content_type)
        except DiscordHTTPError as e:
            raise DeliveryFailure(e.status, e.reason, e.body) from e

    def register_commands(
        self, application_id: str, commands: list[dict[str, Any]]
    ) -> DiscordResponse:
        url = self._url(f"/applications/{application_id}/commands")
        return self._send_json("PUT", url, commands)
