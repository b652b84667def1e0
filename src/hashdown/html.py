"""HTML escaping and block-level HTML protection."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hashdown.store import PlaceholderStore

# Block-level tags whose literal HTML passes through untouched (list from Markdown.pl).
BLOCK_TAGS: tuple[str, ...] = (
    "p",
    "div",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "blockquote",
    "pre",
    "table",
    "dl",
    "ol",
    "ul",
    "script",
    "noscript",
    "form",
    "fieldset",
    "iframe",
    "math",
    "ins",
    "del",
)

# The closing tag must be followed by a blank line or the end of text, so that
# nested tags of the same name stay inside one block.
_HTML_BLOCK_RE = re.compile(
    r"^ {0,3}(<(%s)\b.*?</\2>)[ \t]*(?=\n[ \t]*\n|\n?\Z)" % "|".join(BLOCK_TAGS),
    re.IGNORECASE | re.MULTILINE | re.DOTALL,
)

_BARE_AMPERSAND_RE = re.compile(r"&(?!#?[xX]?(?:[0-9a-fA-F]+|\w+);)")


def escape_html(text: str) -> str:
    """Escape text for HTML body content."""
    result: list[str] = []
    for ch in text:
        if ch == "&":
            result.append("&amp;")
        elif ch == "<":
            result.append("&lt;")
        elif ch == ">":
            result.append("&gt;")
        else:
            result.append(ch)
    return "".join(result)


def escape_attr(text: str) -> str:
    """Escape text for HTML attribute values.

    Ampersands that already start an entity are kept as written.
    """
    text = _BARE_AMPERSAND_RE.sub("&amp;", text)
    result: list[str] = []
    for ch in text:
        if ch == "<":
            result.append("&lt;")
        elif ch == ">":
            result.append("&gt;")
        elif ch == '"':
            result.append("&quot;")
        else:
            result.append(ch)
    return "".join(result)


def protect_html_blocks(text: str, store: PlaceholderStore) -> str:
    """Replace literal block-level HTML with blank-line-delimited store keys.

    Idempotent: protected blocks are keys afterwards and never match again.
    """
    return _HTML_BLOCK_RE.sub(lambda m: store.wrap(m.group(1)), text)
