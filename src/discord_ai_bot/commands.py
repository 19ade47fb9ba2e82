"""
Slash command metadata shared by the runtime and the registration tool,
plus typed parsing of interaction options.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import IntEnum
from types import MappingProxyType
from typing import Any

from .errors import InvalidOptions, UnknownCommand
from .interactions import InteractionOption


class OptionType(IntEnum):
    STRING = 3
    BOOLEAN = 5


@dataclass(frozen=True)
class OptionChoice:
    name: str
    value: str


@dataclass(frozen=True)
class OptionDescriptor:
    name: str
    description: str
    type: OptionType
    required: bool = False
    choices: tuple[OptionChoice, ...] = ()
    # Applied locally when the option is absent; not sent to Discord
    default: Any = None

    def to_payload(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "type": int(self.type),
            "required": self.required,
        }
        if self.choices:
            out["choices"] = [{"name": c.name, "value": c.value} for c in self.choices]
        return out


@dataclass(frozen=True)
class CommandDescriptor:
    name: str
    description: str
    options: tuple[OptionDescriptor, ...] = ()

    def to_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "options": [o.to_payload() for o in self.options],
        }


AI_COMMAND = CommandDescriptor(
    name="ai",
    description="Send a message to ChatGPT",
    options=(
        OptionDescriptor(
            "prompt",
            "The message to send to ChatGPT",
            OptionType.STRING,
            required=True,
            default="Hello!",
        ),
    ),
)

IMAGINE_COMMAND = CommandDescriptor(
    name="imagine",
    description="Generate an image with DALL-E",
    options=(
        OptionDescriptor(
            "prompt",
            "The prompt for DALL-E",
            OptionType.STRING,
            required=True,
            default="A photograph of a cat.",
        ),
        OptionDescriptor(
            "ratio",
            "Image ratio (default: square)",
            OptionType.STRING,
            choices=(
                OptionChoice("Square", "square"),
                OptionChoice("Wide", "wide"),
                OptionChoice("Tall", "tall"),
            ),
            default="square",
        ),
        OptionDescriptor(
            "revise",
            "Allow Dall-E to automatically revise your prompt (default: true)",
            OptionType.BOOLEAN,
            default=True,
        ),
        OptionDescriptor(
            "hd",
            "Generate image in HD quality (default: true)",
            OptionType.BOOLEAN,
            default=True,
        ),
    ),
)

REGISTRY: Mapping[str, CommandDescriptor] = MappingProxyType(
    {c.name.lower(): c for c in (AI_COMMAND, IMAGINE_COMMAND)}
)


def lookup(name: str) -> CommandDescriptor:
    try:
        return REGISTRY[name.lower()]
    except KeyError:
        raise UnknownCommand(name) from None


def registration_payload() -> list[dict[str, Any]]:
    return [c.to_payload() for c in REGISTRY.values()]


def _check_value(command: str, opt: OptionDescriptor, value: Any) -> Any:
    if opt.type is OptionType.BOOLEAN:
        if not isinstance(value, bool):
            raise InvalidOptions(f"{command}.{opt.name}: expected boolean, got {value!r}")
        return value
    if not isinstance(value, str):
        raise InvalidOptions(f"{command}.{opt.name}: expected string, got {value!r}")
    if opt.choices and value not in {c.value for c in opt.choices}:
        raise InvalidOptions(f"{command}.{opt.name}: {value!r} is not a valid choice")
    return value


def parse_options(
    descriptor: CommandDescriptor, options: Iterable[InteractionOption]
) -> dict[str, Any]:
    """Validate supplied options against the descriptor and fill defaults.

    Unknown option names are ignored. A missing option takes its declared
    default; a missing required option without a default is an error.
    """
    supplied = {o.name: o.value for o in options}
    values: dict[str, Any] = {}
    for opt in descriptor.options:
        value = supplied.get(opt.name)
        if value is None:
            if opt.required and opt.default is None:
                raise InvalidOptions(f"{descriptor.name}.{opt.name} is required")
            values[opt.name] = opt.default
            continue
        values[opt.name] = _check_value(descriptor.name, opt, value)
    return values


@dataclass(frozen=True)
class ChatParams:
    prompt: str

    @classmethod
    def parse(cls, options: Iterable[InteractionOption]) -> ChatParams:
        values = parse_options(AI_COMMAND, options)
        # Discord can deliver an empty string for a required option
        return cls(prompt=values["prompt"] or "Hello!")


@dataclass(frozen=True)
class ImagineParams:
    prompt: str
    ratio: str = "square"
    revise: bool = True
    hd: bool = True

    @classmethod
    def parse(cls, options: Iterable[InteractionOption]) -> ImagineParams:
        values = parse_options(IMAGINE_COMMAND, options)
        return cls(
            prompt=values["prompt"] or "A photograph of a cat.",
            ratio=values["ratio"],
            revise=values["revise"],
            hd=values["hd"],
        )
