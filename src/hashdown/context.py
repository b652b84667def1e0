"""Per-call parse state."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from hashdown.errors import NestingError
from hashdown.escapes import ESCAPES, EscapeTable
from hashdown.references import ReferenceTable
from hashdown.store import PlaceholderStore

DEFAULT_MAX_DEPTH = 64


@dataclass
class ParseContext:
    """State carried through one top-level parse."""

    store: PlaceholderStore = field(default_factory=PlaceholderStore)
    references: ReferenceTable = field(default_factory=ReferenceTable)
    escapes: EscapeTable = ESCAPES
    max_depth: int = DEFAULT_MAX_DEPTH
    depth: int = 0
    deepest: int = 0

    @contextmanager
    def nested(self) -> Iterator[None]:
        """Open one level of block recursion, failing past max_depth."""
        if self.depth >= self.max_depth:
            raise NestingError(
                f"nesting depth limit ({self.max_depth}) exceeded",
                self.depth + 1,
                self.max_depth,
            )
        self.depth += 1
        self.deepest = max(self.deepest, self.depth)
        try:
            yield
        finally:
            self.depth -= 1

    def finish(self, text: str) -> str:
        """Expand every placeholder and decode escape tokens (markers stay encoded)."""
        return self.escapes.unescape(self.store.expand(text))
