"""
Completion of deferred interactions.

A command acknowledged with a "deferred" response is finished later by one
PATCH to the webhook's ``@original`` message, authorized by the pair
(application id, interaction token). Discord keeps that token valid for
about 15 minutes; expiry is not tracked here, the PATCH just fails.
Exactly one completion is sent per interaction and failures are not retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .discord_api import DiscordClient, DiscordResponse, FilePart
from .interactions import Interaction
from .logutil import log_event
from .sanitize import sanitize_content

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeferredHandle:
    application_id: str
    token: str

    @classmethod
    def for_interaction(cls, interaction: Interaction) -> DeferredHandle:
        return cls(interaction.application_id, interaction.token)


@dataclass(frozen=True)
class Attachment:
    data: bytes
    media_type: str
    filename: str | None = None

    def resolved_filename(self) -> str:
        if self.filename:
            return self.filename
        subtype = self.media_type.split("/", 1)[-1].split(";", 1)[0].strip() or "bin"
        return f"attachment.{subtype}"


def complete_deferred_interaction(
    text: str,
    handle: DeferredHandle,
    client: DiscordClient,
    attachment: Attachment | None = None,
) -> DiscordResponse:
    """Send the final message for a deferred interaction.

    ``text`` is sanitized here. Raises ``DeliveryFailure`` on a non-success
    status; network errors propagate as-is.
    """
    content = sanitize_content(text)
    if attachment is None:
        return client.edit_original_response(
            handle.application_id, handle.token, {"content": content}
        )

    filename = attachment.resolved_filename()
    payload = {
        "content": content,
        "attachments": [{"id": 0, "filename": filename}],
    }
    part = FilePart("files[0]", filename, attachment.data, attachment.media_type)
    return client.edit_original_response(handle.application_id, handle.token, payload, [part])


def deliver(
    text: str,
    handle: DeferredHandle,
    client: DiscordClient,
    attachment: Attachment | None = None,
    interaction_id: str | None = None,
) -> DiscordResponse | None:
    """Complete a deferred interaction, logging instead of raising on failure."""
    try:
        resp = complete_deferred_interaction(text, handle, client, attachment)
    except Exception as e:
        logger.exception("Error completing deferred interaction in Discord")
        log_event(
            logger,
            "deferred_delivery_failed",
            level=logging.ERROR,
            interactionId=interaction_id,
            status=getattr(e, "status", None),
            error=str(e),
        )
        return None
    log_event(
        logger,
        "deferred_delivered",
        interactionId=interaction_id,
        status=resp.status,
        attachment=attachment.resolved_filename() if attachment else None,
    )
    return resp
