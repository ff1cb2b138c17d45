"""Minimal LSP server for shell scripts — lexer diagnostics only."""

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

from shellhl import __version__
from shellhl.errors import LexError
from shellhl.lexer import tokenize
from shellhl.syntax import SYNTAXES, resolve_syntax

server = LanguageServer(
    "shellhl-lsp", __version__, text_document_sync_kind=TextDocumentSyncKind.Full
)


def syntax_for_language(language_id: str | None) -> str:
    """Map an LSP language id (sh, bash, zsh, ksh, csh, tcsh) to a dialect name."""
    if not language_id:
        return "bourne"
    name = resolve_syntax(language_id.lower())
    if name in SYNTAXES:
        return name
    # "shellscript" and anything unknown
    return "bourne"


def _validate(ls: LanguageServer, uri: str) -> None:
    """Tokenize the document and publish diagnostics."""
    doc = ls.workspace.get_text_document(uri)
    syntax = syntax_for_language(doc.language_id)
    diagnostics: list[Diagnostic] = []

    try:
        tokenize(doc.source, syntax)
    except LexError as exc:
        line = exc.position.line - 1
        col = exc.position.column - 1
        diagnostics.append(
            Diagnostic(
                range=Range(
                    start=Position(line=line, character=col),
                    end=Position(line=line, character=col + 1),
                ),
                message=exc.message,
                severity=DiagnosticSeverity.Error,
                source="shellhl",
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
