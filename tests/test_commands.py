import pytest

from discord_ai_bot import commands
from discord_ai_bot.errors import InvalidOptions, UnknownCommand
from discord_ai_bot.interactions import InteractionOption


def _opts(**kw):
    return [InteractionOption(k, v) for k, v in kw.items()]


@pytest.mark.parametrize("name", ["ai", "AI", "Imagine", "imagine"])
def test_lookup_is_case_insensitive(name):
    assert commands.lookup(name).name == name.lower()


def test_lookup_unknown():
    with pytest.raises(UnknownCommand):
        commands.lookup("nope")


def test_registry_is_read_only():
    with pytest.raises(TypeError):
        commands.REGISTRY["x"] = commands.AI_COMMAND  # type: ignore[index]


def test_registration_payload_shape():
    payload = {c["name"]: c for c in commands.registration_payload()}
    assert set(payload) == {"ai", "imagine"}
    assert payload["ai"]["options"] == [
        {
            "name": "prompt",
            "description": "The message to send to ChatGPT",
            "type": 3,
            "required": True,
        }
    ]
    ratio = payload["imagine"]["options"][1]
    assert ratio["type"] == 3 and ratio["required"] is False
    assert [c["value"] for c in ratio["choices"]] == ["square", "wide", "tall"]
    assert [o["type"] for o in payload["imagine"]["options"][2:]] == [5, 5]


def test_chat_params_default_prompt():
    assert commands.ChatParams.parse([]).prompt == "Hello!"
    assert commands.ChatParams.parse(_opts(prompt="hey")).prompt == "hey"


def test_imagine_params_defaults():
    p = commands.ImagineParams.parse(_opts(prompt="cat"))
    assert (p.prompt, p.ratio, p.revise, p.hd) == ("cat", "square", True, True)


def test_imagine_params_supplied():
    p = commands.ImagineParams.parse(_opts(prompt="cat", ratio="wide", revise=False, hd=False))
    assert (p.ratio, p.revise, p.hd) == ("wide", False, False)


@pytest.mark.parametrize(
    "opts",
    [
        {"prompt": "cat", "ratio": "panorama"},
        {"prompt": "cat", "hd": "yes"},
        {"prompt": 42},
    ],
)
def test_imagine_params_invalid(opts):
    with pytest.raises(InvalidOptions):
        commands.ImagineParams.parse(_opts(**opts))


def test_unknown_options_are_ignored():
    assert commands.parse_options(commands.AI_COMMAND, _opts(prompt="x", extra=1)) == {
        "prompt": "x"
    }


def test_required_without_default():
    desc = commands.CommandDescriptor(
        "t",
        "test",
        (commands.OptionDescriptor("q", "q", commands.OptionType.STRING, required=True),),
    )
    with pytest.raises(InvalidOptions):
        commands.parse_options(desc, [])
