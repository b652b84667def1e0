"""Escape codec: markup-significant characters to inert tokens and back.

A token is ``OPEN + "e" + md5(char) + CLOSE``, with both markers taken from
the Private Use Area. Literal markers in the input are themselves encoded as
tokens during normalization and stay encoded through every pass; only
decode_markers() on the final output turns them back into characters, so no
input text can ever spell a live token or store key.
"""

from __future__ import annotations

import hashlib
import re

from hashdown.html import escape_html

OPEN = "\uf8ff"
CLOSE = "\uf8fe"
MARKERS = OPEN + CLOSE

# Characters that may be backslash-escaped in source text.
ESCAPE_CHARS = "*_{}[]\\`#+-.!"

# Characters hidden inside code and attribute values.
PROTECTED_CHARS = "*_{}[]\\"

_BACKSLASH_ESCAPE_RE = re.compile(r"\\([*_{}\[\]\\`#+\-.!])")
_PROTECTED_RE = re.compile(r"[*_{}\[\]\\]")
_MARKER_RE = re.compile(f"[{MARKERS}]")
_TOKEN_RE = re.compile(OPEN + r"e[0-9a-f]{32}" + CLOSE)


def normalize_newlines(text: str) -> str:
    """Turn ``\\r\\n`` and lone ``\\r`` into ``\\n``."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def _make_token(ch: str) -> str:
    digest = hashlib.md5(ch.encode("utf-8"), usedforsecurity=False).hexdigest()
    return f"{OPEN}e{digest}{CLOSE}"


class EscapeTable:
    """Bijection between the escape alphabet and placeholder tokens."""

    def __init__(self, chars: str = ESCAPE_CHARS) -> None:
        self._tokens: dict[str, str] = {ch: _make_token(ch) for ch in chars + MARKERS}
        self._chars: dict[str, str] = {tok: ch for ch, tok in self._tokens.items()}
        self._markers: dict[str, str] = {self._tokens[ch]: ch for ch in MARKERS}

    def encode(self, ch: str) -> str:
        """Return the token standing for *ch*."""
        try:
            return self._tokens[ch]
        except KeyError:
            raise ValueError(f"not an escapable character: {ch!r}") from None

    def decode(self, token: str) -> str:
        """Return the character a token stands for."""
        try:
            return self._chars[token]
        except KeyError:
            raise ValueError(f"unknown escape token: {token!r}") from None

    def normalize(self, text: str) -> str:
        """Unify line endings and encode literal token markers."""
        return _MARKER_RE.sub(lambda m: self._tokens[m.group(0)], normalize_newlines(text))

    def encode_escapes(self, text: str) -> str:
        """Turn backslash escapes (``\\*``, ``\\_`` ...) into tokens."""
        return _BACKSLASH_ESCAPE_RE.sub(lambda m: self._tokens[m.group(1)], text)

    def hide(self, text: str) -> str:
        """Tokenize emphasis, link and escape characters in finished text."""
        return _PROTECTED_RE.sub(lambda m: self._tokens[m.group(0)], text)

    def protect(self, text: str) -> str:
        """Make literal text HTML-safe and inert to every later pass."""
        return self.hide(escape_html(text))

    def unescape(self, text: str) -> str:
        """Replace every alphabet token with its literal character.

        Encoded markers stay tokens, so running this again never revives them.
        """

        def _literal(m: re.Match[str]) -> str:
            tok = m.group(0)
            if tok in self._markers:
                return tok
            return self._chars.get(tok, tok)

        return _TOKEN_RE.sub(_literal, text)

    def restore(self, text: str) -> str:
        """Replace every token with the backslash escape it came from.

        Encoded markers stay tokens.
        """

        def _source(m: re.Match[str]) -> str:
            tok = m.group(0)
            if tok in self._markers or tok not in self._chars:
                return tok
            return "\\" + self._chars[tok]

        return _TOKEN_RE.sub(_source, text)

    def decode_markers(self, text: str) -> str:
        """Turn encoded markers back into literal characters.

        Only ever applied once, to the finished output.
        """
        return _TOKEN_RE.sub(lambda m: self._markers.get(m.group(0), m.group(0)), text)


ESCAPES = EscapeTable()
