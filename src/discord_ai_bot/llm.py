"""
OpenAI minimal wrapper.

Chat completions for /ai, image generation for /imagine. The SDK's own
retries are disabled; each call is a single attempt. A ``timeout`` in seconds
bounds the HTTP call itself, so a call the deadline wrapper gave up on ends
soon after.
"""

from __future__ import annotations

from dataclasses import dataclass

from openai import OpenAI

from .errors import EmptyCompletion

SYSTEM_PROMPT = "You are a helpful assistant."

IMAGE_SIZES = {
    "square": "1024x1024",
    "wide": "1792x1024",
    "tall": "1024x1792",
}


@dataclass(frozen=True)
class GeneratedImage:
    url: str
    revised_prompt: str | None = None


def _client(api_key: str | None, timeout: float | None = None) -> OpenAI:
    if timeout is None:
        return OpenAI(api_key=api_key, max_retries=0)
    return OpenAI(api_key=api_key, max_retries=0, timeout=timeout)


def chat(
    api_key: str | None, model: str, user_text: str, timeout: float | None = None
) -> str:
    completion = _client(api_key, timeout).chat.completions.create(
        model=model,
        messages=[
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": user_text},
        ],
    )
    if not completion.choices:
        raise EmptyCompletion()
    return completion.choices[0].message.content or ""


def generate_images(
    api_key: str | None,
    model: str,
    prompt: str,
    ratio: str,
    hd: bool,
    timeout: float | None = None,
) -> list[GeneratedImage]:
    response = _client(api_key, timeout).images.generate(
        model=model,
        prompt=prompt,
        n=1,
        size=IMAGE_SIZES[ratio],
        quality="hd" if hd else "standard",
    )
    return [
        GeneratedImage(url=img.url, revised_prompt=getattr(img, "revised_prompt", None))
        for img in (response.data or [])
        if img.url
    ]
