"""Reference definitions: ``[label]: url "title"`` lines and their lookup."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from hashdown.escapes import normalize_newlines

logger = logging.getLogger(__name__)

_DEFINITION_RE = re.compile(
    r"^[ \t]{0,3}\[([^\]]+)\]:[ \t]*<?(\S+?)>?"
    r"(?:(?:[ \t]+|[ \t]*\n[ \t]*)(\".+\"|\(.+\)|'.+'))?[ \t]*$",
    re.MULTILINE,
)

# [text][label] and ![alt][label], on a single line
_USAGE_RE = re.compile(r"!?\[([^\[\]\n]*)\] ?\[([^\[\]\n]*)\]")
_CODE_SPAN_RE = re.compile(r"(?<!`)(`+)(?!`).+?(?<!`)\1(?!`)")
_BACKSLASH_RE = re.compile(r"\\.")


@dataclass(frozen=True, slots=True)
class Reference:
    """Target of a reference-style link or image."""

    url: str
    title: str | None = None


@dataclass(frozen=True, slots=True)
class UnresolvedReference:
    """A reference-style link whose label has no definition (1-based position)."""

    label: str
    line: int
    column: int
    length: int


def normalize_label(label: str) -> str:
    """Lowercase a label and collapse its internal whitespace."""
    return " ".join(label.lower().split())


class ReferenceTable:
    """Case-insensitive label → Reference map. The first definition wins."""

    def __init__(self) -> None:
        self._entries: dict[str, Reference] = {}

    def __contains__(self, label: object) -> bool:
        return isinstance(label, str) and normalize_label(label) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def define(self, label: str, url: str, title: str | None = None) -> bool:
        """Add a definition. Returns False if the label was already defined."""
        key = normalize_label(label)
        if key in self._entries:
            logger.debug("ignoring duplicate definition of reference %r", key)
            return False
        self._entries[key] = Reference(url, title)
        return True

    def lookup(self, label: str) -> Reference | None:
        return self._entries.get(normalize_label(label))

    def extract(self, document: str) -> str:
        """Record every definition line and return the document without them."""
        matches = list(_DEFINITION_RE.finditer(document))
        for m in matches:
            title = m.group(3)[1:-1] if m.group(3) else None
            self.define(m.group(1), m.group(2), title)

        # Delete back to front so earlier offsets stay valid
        for m in reversed(matches):
            document = document[: m.start()] + document[m.end() + 1 :]
        return document


def extract_references(document: str) -> tuple[str, ReferenceTable]:
    """Strip reference definitions from *document* and return them as a table."""
    table = ReferenceTable()
    return table.extract(document), table


def find_unresolved(document: str) -> list[UnresolvedReference]:
    """Locate reference-style links and images whose label is never defined.

    Indented code, code spans and backslash escapes are skipped.
    """
    text = normalize_newlines(document)
    _, table = extract_references(text)
    found: list[UnresolvedReference] = []
    for lineno, line in enumerate(text.split("\n"), start=1):
        if line.startswith(("    ", "\t")) or _DEFINITION_RE.match(line):
            continue
        line = _BACKSLASH_RE.sub("  ", line)
        line = _CODE_SPAN_RE.sub(lambda m: " " * len(m.group(0)), line)
        for m in _USAGE_RE.finditer(line):
            label = m.group(2) or m.group(1)
            if label.strip() and label not in table:
                found.append(UnresolvedReference(label, lineno, m.start() + 1, m.end() - m.start()))
    return found
