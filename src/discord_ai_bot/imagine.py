"""
/imagine: DALL-E image generation delivered through a deferred response.

Runs after the dispatcher has acknowledged the interaction, so its only
output is the completion PATCH. It never raises.
"""

from __future__ import annotations

import logging
import time
import urllib.error
import urllib.request

import openai

from . import llm
from .commands import ImagineParams
from .config import Settings
from .deferred import Attachment, DeferredHandle, deliver
from .discord_api import DiscordClient
from .errors import UpstreamAPIError
from .interactions import Interaction
from .logutil import log_event
from .timeout import with_timeout

logger = logging.getLogger(__name__)

VERBATIM_PREFIX = (
    "I NEED to test how the tool works with extremely simple prompts. "
    "DO NOT add any detail, just use it AS-IS: "
)
NO_IMAGES_TEXT = "No images were generated by Dall-E 3."


def download_image(url: str, socket_timeout: float | None = None) -> bytes:
    req = urllib.request.Request(url, method="GET")
    try:
        with urllib.request.urlopen(req, timeout=socket_timeout) as resp:  # nosec B310
            return resp.read()
    except urllib.error.HTTPError as e:
        raise UpstreamAPIError(
            f"Failed to download image: {e.code} {e.reason}", status=e.code
        ) from e


def build_prompt(params: ImagineParams) -> str:
    return params.prompt if params.revise else VERBATIM_PREFIX + params.prompt


def error_text(error: Exception) -> str:
    if isinstance(error, openai.APIStatusError):
        body = error.body if error.body is not None else error.message
        return f"Error handling DALL-E request: {error.status_code} {body}"
    return str(error) or error.__class__.__name__


def run_imagine(
    interaction: Interaction,
    params: ImagineParams,
    settings: Settings,
    client: DiscordClient | None = None,
) -> None:
    client = client or DiscordClient(
        settings.discord_token or "",
        settings.discord_api_base,
        settings.http_timeout_seconds,
    )
    handle = DeferredHandle.for_interaction(interaction)
    iid = interaction.id

    try:
        prompt = build_prompt(params)
        log_event(
            logger,
            "imagine_start",
            interactionId=iid,
            user=interaction.user_display_name,
            ratio=params.ratio,
            hd=params.hd,
            revise=params.revise,
            prompt=prompt,
        )

        t0 = time.time()
        images = with_timeout(
            llm.generate_images,
            settings.image_generation_timeout_ms,
            settings.openai_api_key,
            settings.image_model,
            prompt,
            params.ratio,
            params.hd,
            settings.image_generation_timeout_ms / 1000,
        )
        if not images:
            log_event(logger, "imagine_no_images", interactionId=iid)
            deliver(NO_IMAGES_TEXT, handle, client, interaction_id=iid)
            return

        image = images[0]
        message = f"Revised Prompt: {image.revised_prompt}" if image.revised_prompt else ""
        log_event(
            logger,
            "imagine_generated",
            interactionId=iid,
            url=image.url,
            ms=int((time.time() - t0) * 1000),
        )

        t1 = time.time()
        data = with_timeout(
            download_image,
            settings.image_download_timeout_ms,
            image.url,
            settings.image_download_timeout_ms / 1000,
        )
        log_event(
            logger,
            "imagine_downloaded",
            interactionId=iid,
            bytes=len(data),
            ms=int((time.time() - t1) * 1000),
        )
    except Exception as e:
        logger.exception("Error handling DALL-E request")
        log_event(
            logger, "imagine_failed", level=logging.ERROR, interactionId=iid, error=str(e)
        )
        deliver(error_text(e), handle, client, interaction_id=iid)
        return

    deliver(message, handle, client, Attachment(data, "image/png"), interaction_id=iid)
