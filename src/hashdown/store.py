"""Placeholder store: finished HTML fragments hidden behind digest keys."""

from __future__ import annotations

import hashlib
import re

from hashdown.escapes import CLOSE, OPEN

_KEY_RE = re.compile(OPEN + r"b[0-9a-f]{64}" + CLOSE)


def make_key(fragment: str) -> str:
    """Return the store key for *fragment* (SHA-256 of its UTF-8 bytes)."""
    digest = hashlib.sha256(fragment.encode("utf-8")).hexdigest()
    return f"{OPEN}b{digest}{CLOSE}"


class PlaceholderStore:
    """Maps keys to verbatim HTML fragments for the duration of one parse."""

    def __init__(self) -> None:
        self._fragments: dict[str, str] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._fragments

    def __getitem__(self, key: str) -> str:
        return self._fragments[key]

    def __len__(self) -> int:
        return len(self._fragments)

    def add(self, fragment: str) -> str:
        """Store *fragment* and return its key."""
        key = make_key(fragment)
        self._fragments[key] = fragment
        return key

    def wrap(self, fragment: str) -> str:
        """Store *fragment* and return its key on a block of its own."""
        return f"\n\n{self.add(fragment)}\n\n"

    def expand(self, text: str) -> str:
        """Replace every known key in *text* with its fragment.

        Unknown key-shaped text is left alone.
        """
        while True:
            expanded = _KEY_RE.sub(lambda m: self._fragments.get(m.group(0), m.group(0)), text)
            if expanded == text:
                return expanded
            text = expanded
