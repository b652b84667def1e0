"""Hashdown: a Markdown to HTML converter built on placeholder rewriting."""

from __future__ import annotations

from hashdown.context import DEFAULT_MAX_DEPTH
from hashdown.errors import NestingError
from hashdown.escapes import ESCAPE_CHARS
from hashdown.html import BLOCK_TAGS
from hashdown.pipeline import Markdown, parse, transform_inline
from hashdown.references import Reference, ReferenceTable, extract_references

__version__ = "0.1.0"

__all__ = [
    "BLOCK_TAGS",
    "DEFAULT_MAX_DEPTH",
    "ESCAPE_CHARS",
    "Markdown",
    "NestingError",
    "Reference",
    "ReferenceTable",
    "extract_references",
    "parse",
    "transform_inline",
]
