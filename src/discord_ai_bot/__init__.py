"""
Discord AI Bot (Lambda + OpenAI)

Where: AWS Lambda via Function URL (Discord interactions endpoint).
What:  Verify signed interactions, answer /ai with ChatGPT, answer /imagine
       with DALL-E through a deferred response.
"""

__all__ = [
    "background",
    "chat",
    "commands",
    "config",
    "credentials",
    "deferred",
    "discord_api",
    "errors",
    "handler",
    "imagine",
    "interactions",
    "llm",
    "logutil",
    "register",
    "sanitize",
    "timeout",
]
