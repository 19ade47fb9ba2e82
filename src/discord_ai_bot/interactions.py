"""
Inbound interaction model and Discord interaction constants.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class InteractionType(IntEnum):
    PING = 1
    APPLICATION_COMMAND = 2


class InteractionResponseType(IntEnum):
    PONG = 1
    CHANNEL_MESSAGE_WITH_SOURCE = 4
    DEFERRED_CHANNEL_MESSAGE_WITH_SOURCE = 5


@dataclass(frozen=True)
class InteractionOption:
    name: str
    value: Any


@dataclass(frozen=True)
class Interaction:
    id: str
    type: int
    application_id: str
    token: str
    command_name: str
    options: tuple[InteractionOption, ...]
    user_display_name: str
    raw: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> Interaction:
        data = payload.get("data") or {}
        options = tuple(
            InteractionOption(str(o.get("name") or ""), o.get("value"))
            for o in data.get("options") or []
            if isinstance(o, dict)
        )
        return cls(
            id=str(payload.get("id") or ""),
            type=_as_int(payload.get("type")),
            application_id=str(payload.get("application_id") or ""),
            token=str(payload.get("token") or ""),
            command_name=str(data.get("name") or ""),
            options=options,
            user_display_name=_display_name(payload),
            raw=payload,
        )


def _as_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _display_name(payload: dict[str, Any]) -> str:
    # Guild interactions carry member.user, DMs carry user
    user = (payload.get("member") or {}).get("user") or payload.get("user") or {}
    return user.get("global_name") or user.get("username") or ""
