"""Token types, data structures, and character classification helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TokenType(Enum):
    # The value doubles as the key into the CSS class map
    METACHAR = "metachar"  # ; | & < > ( ) ` \ and friends
    KEYWORD = "keyword"  # if, then, for, do, done, ...
    BUILTIN = "builtin"  # cd, echo, export, ...
    COMMAND = "command"  # external command in command position
    ARGUMENT = "argument"  # any other word
    QUOTE = "quote"  # a word that is one complete quoted string
    VARIABLE = "variable"  # $NAME, ${NAME}, $1, $?
    ASSIGN = "assign"  # NAME=value
    COMMENT = "comment"  # # to end of line
    DEFAULT = "default"  # whitespace and newlines


@dataclass(frozen=True, slots=True)
class Position:
    """Source position, 1-based line and column, 0-based character offset."""

    line: int
    column: int
    offset: int


@dataclass(frozen=True, slots=True)
class Span:
    """Source range from start to end position."""

    start: Position
    end: Position


@dataclass(frozen=True, slots=True)
class Token:
    """A single lexer token with its source text."""

    type: TokenType
    text: str
    span: Span


def is_name_start(ch: str) -> bool:
    """Return True if ch can start a shell variable name."""
    return ch.isascii() and (ch.isalpha() or ch == "_")


def is_name_char(ch: str) -> bool:
    """Return True if ch can continue a shell variable name."""
    return ch.isascii() and (ch.isalnum() or ch == "_")

