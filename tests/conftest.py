"""Shared test fixtures and helpers."""

from __future__ import annotations

import pytest

from shellhl.lexer import tokenize
from shellhl.tokens import Token, TokenType


@pytest.fixture
def lex():
    """Return a helper that tokenizes source with the given dialect."""

    def _lex(source: str, syntax: str = "bourne") -> list[Token]:
        return tokenize(source, syntax)

    return _lex


@pytest.fixture
def words():
    """Return a helper giving (type, text) pairs, skipping whitespace and newlines."""

    def _words(source: str, syntax: str = "bourne") -> list[tuple[TokenType, str]]:
        return [(t.type, t.text) for t in tokenize(source, syntax) if t.type != TokenType.DEFAULT]

    return _words
