"""
Error taxonomy shared by the dispatcher and the command handlers.
"""

from __future__ import annotations


class BotError(Exception):
    """Base class for errors raised by this package."""


class ConfigurationError(BotError):
    """A required setting or secret is missing."""


class SignatureInvalid(BotError):
    """Signature headers are missing or do not verify."""


class UnknownCommand(BotError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown command: {name}")
        self.name = name


class InvalidOptions(BotError):
    """An option value does not match the command descriptor."""


class UpstreamTimeout(BotError):
    """Raised by the timeout wrapper when the deadline fires first."""

    def __init__(self, message: str = "Request timed out") -> None:
        super().__init__(message)


class UpstreamAPIError(BotError):
    def __init__(self, message: str, status: int | None = None, body: str | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class EmptyCompletion(UpstreamAPIError):
    def __init__(self) -> None:
        super().__init__("No choices returned from OpenAI API")


class DiscordHTTPError(BotError):
    """Discord answered a REST call with a non-success status."""

    def __init__(self, status: int, reason: str, body: str | None = None) -> None:
        super().__init__(f"HTTP Error {status} {reason}")
        self.status = status
        self.reason = reason
        self.body = body


class DeliveryFailure(DiscordHTTPError):
    """The PATCH completing a deferred interaction did not succeed."""
