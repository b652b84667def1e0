"""Block transformer: headings, rules, lists, code blocks, quotes and paragraphs.

Every construct is rendered as soon as it is recognized, stored in the
placeholder store and replaced by its key on a block of its own, so later
passes never look inside it again.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from hashdown.html import protect_html_blocks
from hashdown.inline import render_inline

if TYPE_CHECKING:
    from hashdown.context import ParseContext

_SETEXT_HEADING_RE = re.compile(r"^(.+?)[ \t]*\n(=+|-+)[ \t]*(?:\n+|\Z)", re.MULTILINE)
_ATX_HEADING_RE = re.compile(r"^(#{1,6})[ \t]*(.+?)[ \t]*#*(?:\n+|\Z)", re.MULTILINE)

_HR_RE = re.compile(
    r"^ {0,3}(?:(?:\*[ \t]*){3,}|(?:-[ \t]*){3,}|(?:_[ \t]*){3,})$",
    re.MULTILINE,
)

# Group 1 is the whole list, group 4 its first marker. A list runs until a
# blank line followed by text that is neither indented nor another item.
_LIST_BODY = (
    r"(( {0,3}(([*+-]|\d+\.)[ \t]+)(?s:.+?)"
    r"(\n*\Z|\n{2,}(?=\S)(?![ \t]*(?:[*+-]|\d+\.)[ \t]+))))"
)
_TOP_LIST_RE = re.compile(r"(?:(?<=\n\n)|\A\n?)" + _LIST_BODY, re.MULTILINE)
_NESTED_LIST_RE = re.compile(r"^" + _LIST_BODY, re.MULTILINE)

# Group 1 is set when a blank line precedes the item, group 4 is its content.
_LIST_ITEM_RE = re.compile(
    r"(\n)?(^[ \t]*)([*+-]|\d+\.)[ \t]+((?s:.+?)(\n{1,2}|\n?\Z))"
    r"(?=\n*(\Z|\2([*+-]|\d+\.)[ \t]+))",
    re.MULTILINE,
)

_CODE_BLOCK_RE = re.compile(r"(?:\n\n|\A\n?)((?:(?: {4}|\t).*(?:\n+|\Z))+)", re.MULTILINE)

_BLOCK_QUOTE_RE = re.compile(r"((?:^[ \t]*>[ \t]?.+(?:\n|\Z)(?:.+\n)*\n*)+)", re.MULTILINE)
_QUOTE_PREFIX_RE = re.compile(r"^[ \t]*>(?:[ \t]*$|[ \t]?)", re.MULTILINE)

_OUTDENT_RE = re.compile(r"^(?:\t| {1,4})", re.MULTILINE)
_BLANK_LINES_RE = re.compile(r"\n(?:[ \t]*\n)+")
_MULTI_NEWLINE_RE = re.compile(r"\n{2,}")


def render_blocks(text: str, ctx: ParseContext, in_list: bool = False) -> str:
    """Render block constructs in *text* and return finished HTML."""
    with ctx.nested():
        text = _render_headings(text, ctx)
        text = _HR_RE.sub(lambda m: ctx.store.wrap("<hr>"), text)
        text = _render_lists(text, ctx, in_list)
        text = _CODE_BLOCK_RE.sub(lambda m: _render_code_block(m, ctx), text)
        text = _BLOCK_QUOTE_RE.sub(lambda m: _render_block_quote(m, ctx), text)

        # Literal HTML exposed by the passes above must not be paragraphed
        text = protect_html_blocks(text, ctx.store)

        return _paragraphify(text, ctx)


def outdent(text: str) -> str:
    """Remove one level of indentation (a tab or up to four spaces) per line."""
    return _OUTDENT_RE.sub("", text)


# ---------------------------------------------------------------------------
# Headings
# ---------------------------------------------------------------------------


def _render_headings(text: str, ctx: ParseContext) -> str:
    def _heading(level: int, content: str) -> str:
        return ctx.store.wrap(f"<h{level}>{render_inline(content, ctx)}</h{level}>")

    text = _SETEXT_HEADING_RE.sub(
        lambda m: _heading(1 if m.group(2)[0] == "=" else 2, m.group(1)), text
    )
    return _ATX_HEADING_RE.sub(lambda m: _heading(len(m.group(1)), m.group(2)), text)


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------


def _render_lists(text: str, ctx: ParseContext, in_list: bool) -> str:
    pattern = _NESTED_LIST_RE if in_list else _TOP_LIST_RE
    return pattern.sub(lambda m: _render_list(m, ctx), text)


def _render_list(match: re.Match[str], ctx: ParseContext) -> str:
    body = _MULTI_NEWLINE_RE.sub("\n\n\n", match.group(1))
    body = re.sub(r"\n{2,}\Z", "\n", body)
    items = _LIST_ITEM_RE.sub(lambda m: _render_item(m, ctx), body)
    tag = "ul" if match.group(4) in ("*", "+", "-") else "ol"
    return ctx.store.wrap(f"<{tag}>\n{items}</{tag}>")


def _render_item(match: re.Match[str], ctx: ParseContext) -> str:
    item = match.group(4)
    if match.group(1) or "\n\n" in item:
        # Loose item: full block processing
        item = render_blocks(outdent(item), ctx, in_list=True)
    else:
        with ctx.nested():
            item = _render_lists(outdent(item), ctx, in_list=True).rstrip("\n")
        # A nested list sits on its own line right under the item text
        item = ctx.finish(render_inline(_MULTI_NEWLINE_RE.sub("\n", item), ctx))
    return f"<li>{item}</li>\n"


# ---------------------------------------------------------------------------
# Code blocks and quotes
# ---------------------------------------------------------------------------


def _render_code_block(match: re.Match[str], ctx: ParseContext) -> str:
    code = ctx.escapes.protect(ctx.escapes.restore(outdent(match.group(1))))
    code = code.strip("\n").rstrip()
    return ctx.store.wrap(f"<pre><code>{code}\n</code></pre>")


def _render_block_quote(match: re.Match[str], ctx: ParseContext) -> str:
    quote = _QUOTE_PREFIX_RE.sub("", match.group(1))
    quote = render_blocks(quote, ctx)
    return ctx.store.wrap(f"<blockquote>\n{quote}\n</blockquote>")


# ---------------------------------------------------------------------------
# Paragraphs
# ---------------------------------------------------------------------------


def _paragraphify(text: str, ctx: ParseContext) -> str:
    blocks: list[str] = []
    for part in _BLANK_LINES_RE.split(text.strip("\n")):
        key = part.strip()
        if not key:
            continue
        if key in ctx.store:
            blocks.append(ctx.store[key])
        else:
            blocks.append(f"<p>{render_inline(part, ctx)}</p>")
    return ctx.finish("\n\n".join(blocks))
