"""
/ai: one-shot chat completion, answered synchronously.
"""

from __future__ import annotations

import logging
import time

from . import llm
from .commands import ChatParams
from .config import Settings
from .interactions import Interaction
from .logutil import log_event
from .sanitize import truncate_content
from .timeout import with_timeout

logger = logging.getLogger(__name__)

APOLOGY = "There was an error processing your request. Please try again later."


def format_reply(user_name: str, prompt: str, reply: str) -> str:
    return truncate_content(f"{user_name}: {prompt}\nGPT: {reply}")


def run_chat(interaction: Interaction, params: ChatParams, settings: Settings) -> str:
    user_text = f"{interaction.user_display_name}: {params.prompt}"
    try:
        t0 = time.time()
        if settings.chat_timeout_ms:
            out = with_timeout(
                llm.chat,
                settings.chat_timeout_ms,
                settings.openai_api_key,
                settings.chat_model,
                user_text,
                settings.chat_timeout_ms / 1000,
            )
        else:
            out = llm.chat(settings.openai_api_key, settings.chat_model, user_text)
    except Exception as e:
        logger.exception("Error fetching OpenAI response")
        log_event(
            logger,
            "chat_failed",
            level=logging.ERROR,
            interactionId=interaction.id,
            error=str(e),
        )
        return APOLOGY
    log_event(
        logger,
        "chat_ok",
        interactionId=interaction.id,
        model=settings.chat_model,
        ms=int((time.time() - t0) * 1000),
        prompt_chars=len(params.prompt),
        out_chars=len(out),
    )
    return format_reply(interaction.user_display_name, params.prompt, out)
