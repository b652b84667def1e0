"""Tests for the conversion engine and its whole-document guarantees."""

from __future__ import annotations

import logging

import pytest

import hashdown
from hashdown import Markdown, NestingError, parse
from hashdown.escapes import CLOSE, ESCAPES, OPEN
from hashdown.store import make_key


class TestPublicApi:
    def test_exports(self) -> None:
        assert hashdown.parse is parse
        assert hashdown.DEFAULT_MAX_DEPTH == 64
        assert "blockquote" in hashdown.BLOCK_TAGS
        assert len(hashdown.BLOCK_TAGS) == 22

    def test_heading(self) -> None:
        assert parse("# Hello") == "<h1>Hello</h1>"

    def test_invalid_max_depth(self) -> None:
        with pytest.raises(ValueError, match="max_depth"):
            Markdown(0)


class TestReferences:
    def test_reference_link_in_document(self, md) -> None:
        source = '[text][ref]\n\n[ref]: http://example.com "Title"'
        assert md(source) == '<p><a href="http://example.com" title="Title">text</a></p>'

    def test_labels_case_insensitive(self, md) -> None:
        assert md("[text][REF]\n\n[ref]: /x") == '<p><a href="/x">text</a></p>'

    def test_reference_image_in_document(self, md) -> None:
        assert md("![logo][l]\n\n[l]: /logo.png") == '<p><img src="/logo.png" alt="logo"></p>'

    def test_definition_after_use_in_quote(self, md) -> None:
        assert md("> see [x][]\n\n[x]: /x") == (
            '<blockquote>\n<p>see <a href="/x">x</a></p>\n</blockquote>'
        )

    def test_unresolved_left_as_text(self, md) -> None:
        assert md("[text][missing]") == "<p>[text][missing]</p>"

    def test_definition_only_document(self, md) -> None:
        assert md("[r]: http://one") == ""


class TestEngineReuse:
    def test_references_do_not_leak_between_parses(self) -> None:
        engine = Markdown()
        engine.parse("[a][r]\n\n[r]: http://one")
        assert engine.parse("[a][r]") == "<p>[a][r]</p>"

    def test_transform_inline_uses_last_parse(self) -> None:
        engine = Markdown()
        engine.parse("[r]: http://one")
        assert engine.transform_inline("[x][r]") == '<a href="http://one">x</a>'

    def test_repeated_parse_is_stable(self) -> None:
        engine = Markdown()
        source = "# T\n\n* a\n* b\n\n> q"
        assert engine.parse(source) == engine.parse(source)


class TestOutputInvariants:
    SAMPLES = [
        "# Title\n\nSome *text* with `code`.",
        "* a\n    * b\n\n> quote\n\n    code",
        "<div>\n*raw*\n</div>\n\n[link][r]\n\n[r]: /r",
        r"\*escaped\* and \\ backslash",
    ]

    @pytest.mark.parametrize("source", SAMPLES)
    def test_no_markers_left(self, md, source: str) -> None:
        html = md(source)
        assert OPEN not in html
        assert CLOSE not in html

    @pytest.mark.parametrize("source", SAMPLES)
    def test_deterministic(self, md, source: str) -> None:
        assert md(source) == md(source)

    def test_crlf_matches_lf(self, md) -> None:
        assert md("# T\r\n\r\na\r\nb") == md("# T\n\na\nb")

    def test_escaped_characters_never_become_markup(self, md) -> None:
        assert md(r"\*a\* \_b\_ \`c\` \[d\]") == "<p>*a* _b_ `c` [d]</p>"


class TestForgery:
    def test_forged_escape_token_is_literal(self, md) -> None:
        forged = ESCAPES.encode("*")
        assert md(f"a{forged}b") == f"<p>a{forged}b</p>"

    def test_forged_store_key_is_literal(self, md) -> None:
        forged = make_key("<hr>")
        assert md(f"***\n\n{forged}") == f"<hr>\n\n<p>{forged}</p>"

    def test_forged_escape_token_in_heading(self, md) -> None:
        forged = ESCAPES.encode("*")
        assert md(f"# a{forged}b") == f"<h1>a{forged}b</h1>"

    def test_forged_store_key_in_heading(self, md) -> None:
        forged = make_key("<hr>")
        assert md(f"***\n\n# x{forged}") == f"<hr>\n\n<h1>x{forged}</h1>"

    def test_forged_escape_token_in_list_item(self, md) -> None:
        forged = ESCAPES.encode("_")
        assert md(f"* a{forged}") == f"<ul>\n<li>a{forged}</li>\n</ul>"

    def test_forged_store_key_in_block_quote(self, md) -> None:
        forged = make_key("<hr>")
        assert md(f"***\n\n> x{forged}") == (
            f"<hr>\n\n<blockquote>\n<p>x{forged}</p>\n</blockquote>"
        )

    def test_literal_markers_survive(self, md) -> None:
        assert md(f"a{OPEN}b{CLOSE}c") == f"<p>a{OPEN}b{CLOSE}c</p>"

    def test_forged_token_in_transform_inline(self) -> None:
        forged = ESCAPES.encode("*")
        assert Markdown().transform_inline(f"*a{forged}*") == f"<em>a{forged}</em>"


class TestNesting:
    def test_deep_quotes_raise(self) -> None:
        with pytest.raises(NestingError) as info:
            parse("> " * 100 + "deep")
        assert info.value.limit == 64

    def test_large_budget_still_raises_nesting_error(self) -> None:
        with pytest.raises(NestingError) as info:
            Markdown(5000).parse(">" * 2000 + " x")
        assert info.value.limit == 5000
        assert "nesting depth limit exceeded" in info.value.message

    def test_engine_usable_after_stack_exhaustion(self) -> None:
        engine = Markdown(5000)
        with pytest.raises(NestingError):
            engine.parse(">" * 2000 + " x")
        assert engine.parse("> x") == "<blockquote>\n<p>x</p>\n</blockquote>"

    def test_module_level_limit(self) -> None:
        with pytest.raises(NestingError):
            parse("> > x", max_depth=2)
        assert parse("> x", max_depth=2) == "<blockquote>\n<p>x</p>\n</blockquote>"


class TestLogging:
    def test_parse_logs_summary(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.DEBUG, logger="hashdown.pipeline")
        parse("[r]: /r\n\ntext")
        assert "1 references" in caplog.text
