"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from hashdown.context import DEFAULT_MAX_DEPTH, ParseContext
from hashdown.pipeline import Markdown


@pytest.fixture
def md():
    """Return a helper that converts a whole document with a fresh engine."""

    def _md(source: str, max_depth: int = DEFAULT_MAX_DEPTH) -> str:
        return Markdown(max_depth).parse(source)

    return _md


@pytest.fixture
def ctx() -> ParseContext:
    """A fresh parse context with an empty store and reference table."""
    return ParseContext()
