"""
Content sanitization for text posted back to Discord.
"""

from __future__ import annotations

import re
from typing import Iterator

MAX_CONTENT_LENGTH = 2000
ELLIPSIS = "..."

# The backslash is reserved too: a lone one is doubled, so every backslash in
# the output starts an escape pair.
RESERVED_CHARS = "\\*_`~|>@#:![]()"

_RESERVED = re.escape(RESERVED_CHARS)

# One scan handles placeholders, mentions and escapes together, so mention
# patterns never see partially escaped text and a second pass is a no-op.
_TOKEN_RE = re.compile(
    r"(?P<placeholder>\[(?:mention|role|channel)\])"
    r"|(?P<role><\\?@&\d+\\?>)"
    r"|(?P<user><\\?@(?:\\?!)?\d+\\?>)"
    r"|(?P<channel><\\?#\d+\\?>)"
    rf"|(?P<escaped>\\[{_RESERVED}])"
    rf"|(?P<reserved>[{_RESERVED}])"
)

_PLACEHOLDERS = {"role": "[role]", "user": "[mention]", "channel": "[channel]"}


def _replace(m: re.Match[str]) -> str:
    kind = m.lastgroup
    if kind in _PLACEHOLDERS:
        return _PLACEHOLDERS[kind]
    if kind == "reserved":
        return "\\" + m.group(0)
    # placeholder / escaped: keep as-is
    return m.group(0)


def _tokens(text: str) -> Iterator[str]:
    pos = 0
    for m in _TOKEN_RE.finditer(text):
        yield from text[pos : m.start()]
        yield _replace(m)
        pos = m.end()
    yield from text[pos:]


def truncate_content(content: str) -> str:
    if len(content) > MAX_CONTENT_LENGTH:
        return content[: MAX_CONTENT_LENGTH - len(ELLIPSIS)] + ELLIPSIS
    return content


def sanitize_content(content: str) -> str:
    """Make free text safe to post as a Discord message.

    - Trims leading and trailing whitespace.
    - Replaces user, role and channel mentions with ``[mention]``,
      ``[role]`` and ``[channel]`` (escaped forms are matched too).
    - Backslash-escapes Markdown and mention characters, and lone
      backslashes, that are not escaped yet; the placeholders are left
      unescaped.
    - Caps the result at 2000 characters, ending in ``...`` when cut. The
      cut never splits an escape pair or a placeholder.

    >>> sanitize_content("Hello <@1234567890> in <#42>!")
    'Hello [mention] in [channel]\\\\!'
    """
    tokens = list(_tokens(content.strip()))
    out = "".join(tokens)
    if len(out) <= MAX_CONTENT_LENGTH:
        return out

    budget = MAX_CONTENT_LENGTH - len(ELLIPSIS)
    kept: list[str] = []
    used = 0
    for tok in tokens:
        if used + len(tok) > budget:
            break
        kept.append(tok)
        used += len(tok)
    return "".join(kept) + ELLIPSIS
