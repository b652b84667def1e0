"""Minimal LSP server for Hashdown: diagnostics only."""

from __future__ import annotations

from lsprotocol.types import (
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_OPEN,
    Diagnostic,
    DiagnosticSeverity,
    DidChangeTextDocumentParams,
    DidOpenTextDocumentParams,
    Position,
    PublishDiagnosticsParams,
    Range,
    TextDocumentSyncKind,
)
from pygls.lsp.server import LanguageServer

from hashdown import __version__
from hashdown.errors import NestingError
from hashdown.pipeline import Markdown
from hashdown.references import find_unresolved

server = LanguageServer("hashdown-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full)


def _validate(ls: LanguageServer, uri: str) -> None:
    """Convert the document and publish diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    source = doc.source
    diagnostics: list[Diagnostic] = []

    try:
        Markdown().parse(source)
    except NestingError as exc:
        diagnostics.append(
            Diagnostic(
                range=Range(
                    start=Position(line=0, character=0),
                    end=Position(line=0, character=0),
                ),
                message=exc.message,
                severity=DiagnosticSeverity.Error,
                source="hashdown",
            )
        )

    for ref in find_unresolved(source):
        line = ref.line - 1
        col = ref.column - 1
        diagnostics.append(
            Diagnostic(
                range=Range(
                    start=Position(line=line, character=col),
                    end=Position(line=line, character=col + ref.length),
                ),
                message=f"unresolved reference '{ref.label}'",
                severity=DiagnosticSeverity.Warning,
                source="hashdown",
            )
        )

    ls.text_document_publish_diagnostics(
        PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    )


@server.feature(TEXT_DOCUMENT_DID_OPEN)
def did_open(ls: LanguageServer, params: DidOpenTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


@server.feature(TEXT_DOCUMENT_DID_CHANGE)
def did_change(ls: LanguageServer, params: DidChangeTextDocumentParams) -> None:
    _validate(ls, params.text_document.uri)


def main() -> None:
    server.start_io()
