"""Tests for reference definition extraction and lookup."""

from __future__ import annotations

import logging

import pytest

from hashdown.references import (
    Reference,
    ReferenceTable,
    extract_references,
    find_unresolved,
    normalize_label,
)


class TestNormalizeLabel:
    def test_lowercase(self) -> None:
        assert normalize_label("Ref") == "ref"

    def test_collapse_whitespace(self) -> None:
        assert normalize_label("  My \t Label ") == "my label"


class TestExtract:
    def test_definition_removed(self) -> None:
        text, table = extract_references('Hello\n[ref]: http://example.com "Title"\nWorld')
        assert text == "Hello\nWorld"
        assert table.lookup("ref") == Reference("http://example.com", "Title")

    def test_lookup_ignores_case(self) -> None:
        _, table = extract_references("[Ref]: http://example.com\n")
        assert table.lookup("REF") == Reference("http://example.com")
        assert "rEf" in table

    def test_angle_brackets(self) -> None:
        _, table = extract_references("[x]: <http://x.com>")
        assert table.lookup("x").url == "http://x.com"

    @pytest.mark.parametrize(
        "definition",
        [
            '[x]: http://x.com "A Title"',
            "[x]: http://x.com 'A Title'",
            "[x]: http://x.com (A Title)",
        ],
    )
    def test_title_quoting(self, definition: str) -> None:
        _, table = extract_references(definition)
        assert table.lookup("x").title == "A Title"

    def test_title_on_next_line(self) -> None:
        text, table = extract_references('[x]: http://x.com\n    "Next"\nrest')
        assert text == "rest"
        assert table.lookup("x") == Reference("http://x.com", "Next")

    def test_up_to_three_spaces_indent(self) -> None:
        text, table = extract_references("   [x]: http://x.com")
        assert text == ""
        assert "x" in table

    def test_four_spaces_is_not_a_definition(self) -> None:
        text, table = extract_references("    [x]: http://x.com")
        assert text == "    [x]: http://x.com"
        assert len(table) == 0

    def test_multiple_definitions(self) -> None:
        text, table = extract_references("[a]: /a\n[b]: /b\n\nbody")
        assert text == "\nbody"
        assert len(table) == 2
        assert "a" in table and "b" in table


class TestDuplicateDefinitions:
    def test_first_definition_wins(self) -> None:
        text, table = extract_references("[a]: http://one\n[a]: http://two\n")
        assert text == ""
        assert table.lookup("a").url == "http://one"

    def test_define_reports_duplicate(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.DEBUG, logger="hashdown.references")
        table = ReferenceTable()
        assert table.define("A", "/one") is True
        assert table.define("a", "/two") is False
        assert "duplicate" in caplog.text
        assert table.lookup("a").url == "/one"


class TestFindUnresolved:
    def test_reports_position(self) -> None:
        found = find_unresolved("See [docs][missing] and [ok][].\n\n[ok]: http://ok")
        assert len(found) == 1
        ref = found[0]
        assert ref.label == "missing"
        assert ref.line == 1
        assert ref.column == 5
        assert ref.length == len("[docs][missing]")

    def test_later_line(self) -> None:
        found = find_unresolved("Title\n\n![img][nope]")
        assert [(r.label, r.line, r.column) for r in found] == [("nope", 3, 1)]

    def test_defined_labels_resolve(self) -> None:
        assert find_unresolved("[a][Ref]\n\n[ref]: /x") == []

    def test_code_span_skipped(self) -> None:
        assert find_unresolved("`[a][b]`") == []

    def test_indented_code_skipped(self) -> None:
        assert find_unresolved("    [a][b]") == []

    def test_escaped_brackets_skipped(self) -> None:
        assert find_unresolved(r"\[a\][b]") == []
