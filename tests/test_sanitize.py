import re

import pytest

from discord_ai_bot.sanitize import (
    MAX_CONTENT_LENGTH,
    RESERVED_CHARS,
    sanitize_content,
    truncate_content,
)

PLACEHOLDER_RE = re.compile(r"\[(?:mention|role|channel)\]")


def _has_unescaped_reserved(text: str) -> bool:
    # a backslash escapes only the character it pairs with; pairs scan left to right
    text = PLACEHOLDER_RE.sub("", text)
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == "\\" and i + 1 < len(text) and text[i + 1] in RESERVED_CHARS:
            i += 2
            continue
        if ch in RESERVED_CHARS:
            return True
        i += 1
    return False


@pytest.mark.parametrize(
    "text,expect",
    [
        ("<@123>", "[mention]"),
        ("<@!123>", "[mention]"),
        ("<@&123>", "[role]"),
        ("<#123>", "[channel]"),
        ("hi <@1> and <@&2> in <#3>", "hi [mention] and [role] in [channel]"),
        # already escaped forms
        ("<\\@123\\>", "[mention]"),
        ("<\\@\\!123\\>", "[mention]"),
        ("<\\#9\\>", "[channel]"),
    ],
)
def test_mentions_become_placeholders(text, expect):
    assert sanitize_content(text) == expect


def test_markdown_is_escaped():
    assert sanitize_content("*bold* _it_ `code`") == "\\*bold\\* \\_it\\_ \\`code\\`"
    assert sanitize_content("[link](http://x)") == "\\[link\\]\\(http\\://x\\)"
    assert sanitize_content("@everyone #general") == "\\@everyone \\#general"


def test_trims_whitespace():
    assert sanitize_content("  \n hello \t ") == "hello"


def test_keeps_plain_text():
    assert sanitize_content("Revised Prompt. A vivid cat") == "Revised Prompt. A vivid cat"


def test_truncates_with_ellipsis():
    out = sanitize_content("a" * 2500)
    assert len(out) == MAX_CONTENT_LENGTH
    assert out.endswith("...")
    assert out[:-3] == "a" * 1997


def test_truncates_after_escaping():
    out = sanitize_content("*" * 1500)
    assert len(out) <= MAX_CONTENT_LENGTH
    assert out.endswith("...")


@pytest.mark.parametrize(
    "text",
    [
        "",
        "plain",
        "Hello, this is a test message! <@1234567890> #general",
        "~~strike~~ || spoiler || > quote",
        "already \\*escaped\\* text",
        "[mention] typed by hand",
        "x" * 3000,
        "*" * 1500,
        "\\<@123>",
        "\\\\*x*",
        "a \\ b",
        "[mention\\]",
    ],
)
def test_idempotent_and_safe(text):
    once = sanitize_content(text)
    assert sanitize_content(once) == once
    assert len(once) <= MAX_CONTENT_LENGTH
    assert not _has_unescaped_reserved(once)


def test_truncate_content_only_limits_length():
    assert truncate_content("**keep**") == "**keep**"
    assert len(truncate_content("b" * 2001)) == MAX_CONTENT_LENGTH


def test_backslashes_are_escaped():
    assert sanitize_content("\\<@123>") == "\\\\[mention]"
    assert sanitize_content("\\\\*bold*") == "\\\\\\*bold\\*"
    assert sanitize_content("C:\\temp") == "C\\:\\\\temp"
    assert sanitize_content("keep \\* as is") == "keep \\* as is"


def test_truncation_does_not_split_escape():
    out = sanitize_content("a" * 1996 + "*" * 10)
    assert out == "a" * 1996 + "..."
    assert sanitize_content(out) == out
