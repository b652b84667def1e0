"""Standalone HTML document around a converted fragment."""

from __future__ import annotations

from collections.abc import Sequence

from hashdown.html import escape_attr, escape_html


def wrap_document(
    body: str,
    *,
    title: str | None = None,
    lang: str | None = None,
    css_files: Sequence[str] = (),
    meta_tags: Sequence[tuple[str, str]] = (),
) -> str:
    """Wrap an HTML fragment in a complete HTML document."""
    parts: list[str] = ["<!DOCTYPE html>\n"]
    if lang:
        parts.append(f'<html lang="{escape_attr(lang)}">\n')
    else:
        parts.append("<html>\n")
    parts.append("<head>\n")
    parts.append('<meta charset="utf-8">\n')
    for name, content in meta_tags:
        parts.append(f'<meta name="{escape_attr(name)}" content="{escape_attr(content)}">\n')
    if title:
        parts.append(f"<title>{escape_html(title)}</title>\n")
    for path in css_files:
        parts.append(f'<link rel="stylesheet" href="{escape_attr(path)}">\n')
    parts.append("</head>\n")
    parts.append("<body>\n")
    if body:
        parts.append(body)
        parts.append("\n")
    parts.append("</body>\n")
    parts.append("</html>\n")

    return "".join(parts)
