"""Inline transformer: code spans, links, images, emphasis and hard breaks.

Each pass assumes the earlier ones already consumed their syntax, so the
order in render_inline() matters.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from hashdown.html import escape_attr

if TYPE_CHECKING:
    from hashdown.context import ParseContext

# A span opens only on a whole backtick run and closes on a run of equal length
_CODE_SPAN_RE = re.compile(r"(?<!`)(`+)(?!`)[ \t]*(.+?)[ \t]*(?<!`)\1(?!`)", re.DOTALL)

# Link text may hold one level of nested brackets, e.g. an inline image
_LINK_TEXT = r"((?:[^\[\]]|\[[^\[\]]*\])*)"
_TARGET = r"\([ \t]*<?(\S+?)>?[ \t]*(?:(['\"])(.*?)\3[ \t]*)?\)"

# A "[" right after "!" belongs to an image and is left for the image pass
_REFERENCE_LINK_RE = re.compile(r"(?<!!)\[" + _LINK_TEXT + r"\] ?(?:\n *)?\[([^\]]*)\]")
_INLINE_LINK_RE = re.compile(r"(?<!!)\[" + _LINK_TEXT + r"\]" + _TARGET, re.DOTALL)
_AUTOLINK_RE = re.compile(r"<((?:https?|ftp|mailto):[^'\">\s]+)>", re.IGNORECASE)

_REFERENCE_IMAGE_RE = re.compile(r"!\[([^\]]*)\] ?(?:\n *)?\[([^\]]*)\]")
_INLINE_IMAGE_RE = re.compile(r"!\[([^\]]*)\]" + _TARGET, re.DOTALL)

# Underscores only delimit emphasis away from word characters (snake_case stays)
_STRONG_RE = (
    re.compile(r"\*\*(?=\S)(.+?[*_]*)(?<=\S)\*\*", re.DOTALL),
    re.compile(r"(?<!\w)__(?=\S)(.+?[*_]*)(?<=\S)__(?!\w)", re.DOTALL),
)
_EM_RE = (
    re.compile(r"\*(?=\S)(.+?)(?<=\S)\*", re.DOTALL),
    re.compile(r"(?<!\w)_(?=\S)(.+?)(?<=\S)_(?!\w)", re.DOTALL),
)

_HARD_BREAK_RE = re.compile(r" {2,}\n")


def render_inline(text: str, ctx: ParseContext) -> str:
    """Apply every inline pass to the text of one block."""
    text = _CODE_SPAN_RE.sub(lambda m: _render_code_span(m, ctx), text)
    text = _render_anchors(text, ctx)
    text = _render_images(text, ctx)
    text = _render_emphasis(text)
    text = _HARD_BREAK_RE.sub("<br>\n", text)
    return ctx.escapes.unescape(text)


# ---------------------------------------------------------------------------
# Code spans
# ---------------------------------------------------------------------------


def _render_code_span(m: re.Match[str], ctx: ParseContext) -> str:
    code = ctx.escapes.protect(ctx.escapes.restore(m.group(2)))
    return f"<code>{code}</code>"


# ---------------------------------------------------------------------------
# Links and images
# ---------------------------------------------------------------------------


def _attr(value: str, ctx: ParseContext) -> str:
    """Escape an attribute value and hide it from the emphasis pass."""
    return ctx.escapes.hide(escape_attr(value))


def _title_attr(title: str | None, ctx: ParseContext) -> str:
    return f' title="{_attr(title, ctx)}"' if title else ""


def _anchor(url: str, text: str, title: str | None, ctx: ParseContext) -> str:
    return f'<a href="{_attr(url, ctx)}"{_title_attr(title, ctx)}>{text}</a>'


def _image(url: str, alt: str, title: str | None, ctx: ParseContext) -> str:
    return f'<img src="{_attr(url, ctx)}" alt="{_attr(alt, ctx)}"{_title_attr(title, ctx)}>'


def _render_anchors(text: str, ctx: ParseContext) -> str:
    def _reference(m: re.Match[str]) -> str:
        link_text = m.group(1)
        ref = ctx.references.lookup(m.group(2).strip() or link_text)
        if ref is None:
            return m.group(0)
        return _anchor(ref.url, link_text, ref.title, ctx)

    def _inline(m: re.Match[str]) -> str:
        return _anchor(m.group(2), m.group(1), m.group(4), ctx)

    def _auto(m: re.Match[str]) -> str:
        url = m.group(1)
        shown = url[len("mailto:") :] if url.lower().startswith("mailto:") else url
        return f'<a href="{_attr(url, ctx)}">{_attr(shown, ctx)}</a>'

    text = _REFERENCE_LINK_RE.sub(_reference, text)
    text = _INLINE_LINK_RE.sub(_inline, text)
    return _AUTOLINK_RE.sub(_auto, text)


def _render_images(text: str, ctx: ParseContext) -> str:
    def _reference(m: re.Match[str]) -> str:
        alt = m.group(1)
        ref = ctx.references.lookup(m.group(2).strip() or alt)
        if ref is None:
            return m.group(0)
        return _image(ref.url, alt, ref.title, ctx)

    def _inline(m: re.Match[str]) -> str:
        return _image(m.group(2), m.group(1), m.group(4), ctx)

    text = _REFERENCE_IMAGE_RE.sub(_reference, text)
    return _INLINE_IMAGE_RE.sub(_inline, text)


# ---------------------------------------------------------------------------
# Emphasis
# ---------------------------------------------------------------------------


def _render_emphasis(text: str) -> str:
    for pattern in _STRONG_RE:
        text = pattern.sub(r"<strong>\1</strong>", text)
    for pattern in _EM_RE:
        text = pattern.sub(r"<em>\1</em>", text)
    return text
