"""Error types."""

from __future__ import annotations


class NestingError(Exception):
    """Raised when nested quotes or lists exceed the configured depth limit."""

    def __init__(self, message: str, depth: int, limit: int) -> None:
        self.message = message
        self.depth = depth
        self.limit = limit
        super().__init__(self.format())

    def format(self, filename: str = "input.md") -> str:
        return (
            f"error: {self.message}\n"
            f"  --> {filename}\n"
            f"   |\n"
            f"   = note: {self.depth} levels of nested quotes or lists were opened "
            f"(limit {self.limit})"
        )
