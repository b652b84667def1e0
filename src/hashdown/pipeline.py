"""Pipeline driver: normalize, protect, strip references, escape, render."""

from __future__ import annotations

import logging

from hashdown.blocks import render_blocks
from hashdown.context import DEFAULT_MAX_DEPTH, ParseContext
from hashdown.errors import NestingError
from hashdown.html import protect_html_blocks
from hashdown.inline import render_inline
from hashdown.references import ReferenceTable

logger = logging.getLogger(__name__)


class Markdown:
    """Reusable converter.

    Every parse() starts from an empty placeholder store and reference table;
    the table of the most recent call stays available on ``references`` for
    transform_inline(). An instance must not be shared between threads.
    """

    def __init__(self, max_depth: int = DEFAULT_MAX_DEPTH) -> None:
        if max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {max_depth}")
        self.max_depth = max_depth
        self.references = ReferenceTable()

    def parse(self, document: str) -> str:
        """Convert a whole document to HTML."""
        ctx = ParseContext(max_depth=self.max_depth)
        self.references = ctx.references

        text = ctx.escapes.normalize(document)
        text = protect_html_blocks(text, ctx.store)
        text = ctx.references.extract(text)
        text = ctx.escapes.encode_escapes(text)
        try:
            html = render_blocks(text, ctx)
        except RecursionError as exc:
            # The interpreter stack ran out before max_depth was reached
            raise NestingError(
                f"nesting depth limit exceeded after {ctx.deepest} levels "
                f"(configured limit {self.max_depth})",
                ctx.deepest + 1,
                self.max_depth,
            ) from exc
        html = ctx.escapes.decode_markers(html)

        logger.debug(
            "parsed %d chars: %d references, %d stored fragments",
            len(document),
            len(ctx.references),
            len(ctx.store),
        )
        return html

    def transform_inline(self, text: str) -> str:
        """Convert one fragment with inline rules only.

        Links resolve against ``self.references``.
        """
        ctx = ParseContext(references=self.references, max_depth=self.max_depth)
        text = ctx.escapes.encode_escapes(ctx.escapes.normalize(text))
        return ctx.escapes.decode_markers(ctx.finish(render_inline(text, ctx)))


def parse(document: str, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
    """Convert a document to HTML with a fresh engine."""
    return Markdown(max_depth).parse(document)


def transform_inline(text: str, references: ReferenceTable | None = None) -> str:
    """Convert a fragment with inline rules, resolving links against *references*."""
    engine = Markdown()
    if references is not None:
        engine.references = references
    return engine.transform_inline(text)
