"""Test the Lexer driver: chunked feeding, eof flushing, reset, spans, round trips."""

from __future__ import annotations

import pytest
from pygments.token import Operator

from shellhl.errors import ConfigError, LexError
from shellhl.lexer import Lexer, tokenize
from shellhl.scanner import HEREDOC, HEREDOC_END, CshScanner, ShellScanner, get_scanner
from shellhl.syntax import get_syntax
from shellhl.tokens import Token, TokenType

SCRIPT = """\
#!/bin/sh
# find my name
if [ -f /etc/passwd ]; then
    grep $USER /etc/passwd | awk -F: '{print $5}' /etc/passwd
fi
NAME="world" ; echo "hello $NAME" > /dev/null 2>&1
for f in *.txt; do cat "$f"; done
"""


def _collect(chunks: list[str], syntax: str = "bourne") -> list[Token]:
    tokens: list[Token] = []
    lexer = Lexer(tokens.append, syntax)
    for chunk in chunks:
        lexer.feed(chunk)
    lexer.eof()
    return tokens


class TestRoundTrip:
    def test_texts_rebuild_source(self):
        tokens = tokenize(SCRIPT)
        assert "".join(t.text for t in tokens) == SCRIPT

    def test_no_empty_tokens(self):
        for tok in tokenize(SCRIPT):
            assert tok.text != "", f"Empty token {tok.type} at {tok.span.start}"

    def test_offsets_are_contiguous(self):
        offset = 0
        for tok in tokenize(SCRIPT):
            assert tok.span.start.offset == offset
            offset = tok.span.end.offset
        assert offset == len(SCRIPT)

    def test_one_newline_token_per_source_line(self):
        newlines = [t for t in tokenize(SCRIPT) if t.text == "\n"]
        assert len(newlines) == SCRIPT.count("\n")


class TestChunkedFeed:
    def test_char_by_char_matches_single_feed(self):
        whole = [(t.type, t.text) for t in tokenize(SCRIPT)]
        chunked = [(t.type, t.text) for t in _collect(list(SCRIPT))]
        assert chunked == whole

    def test_word_split_across_feeds(self):
        tokens = _collect(["ec", "ho hi"])
        assert [(t.type, t.text) for t in tokens][:1] == [(TokenType.BUILTIN, "echo")]

    def test_token_held_until_eof(self):
        tokens: list[Token] = []
        lexer = Lexer(tokens.append)
        lexer.feed("echo")
        assert tokens == []
        lexer.eof()
        assert [(t.type, t.text) for t in tokens] == [(TokenType.BUILTIN, "echo")]

    def test_quote_spanning_feeds(self):
        tokens = _collect(["echo 'a", "\nb'\n"])
        assert (TokenType.QUOTE, "'a\nb'") in [(t.type, t.text) for t in tokens]

    def test_heredoc_spanning_feeds(self):
        source = "cat <<EOF\nit's\nEOF\nls\n"
        whole = [(t.type, t.text) for t in tokenize(source)]
        chunked = [(t.type, t.text) for t in _collect(["cat <<E", "OF\nit", "'s\nE", "OF\nls\n"])]
        assert chunked == whole


class TestEofAndReset:
    def test_eof_resets_state(self):
        tokens: list[Token] = []
        lexer = Lexer(tokens.append)
        lexer.feed("echo a\n")
        lexer.eof()
        tokens.clear()
        lexer.feed("ls")
        lexer.eof()
        assert tokens[0].type == TokenType.COMMAND
        assert tokens[0].span.start.line == 1
        assert tokens[0].span.start.offset == 0

    def test_reset_after_error(self):
        tokens: list[Token] = []
        lexer = Lexer(tokens.append)
        lexer.feed("echo 'open")
        with pytest.raises(LexError):
            lexer.eof()
        tokens.clear()
        lexer.feed("pwd")
        lexer.eof()
        assert [(t.type, t.text) for t in tokens] == [(TokenType.BUILTIN, "pwd")]

    def test_reset_discards_pending(self):
        tokens: list[Token] = []
        lexer = Lexer(tokens.append)
        lexer.feed("for x")
        lexer.reset()
        tokens.clear()
        lexer.feed("ls")
        lexer.eof()
        assert [(t.type, t.text) for t in tokens] == [(TokenType.COMMAND, "ls")]


class TestSpans:
    def test_word_position(self):
        tokens = tokenize("echo hi")
        hi = tokens[-1]
        assert hi.span.start.line == 1
        assert hi.span.start.column == 6
        assert hi.span.end.column == 8

    def test_second_line_position(self):
        tokens = tokenize("ls\n  pwd")
        pwd = tokens[-1]
        assert pwd.span.start.line == 2
        assert pwd.span.start.column == 3

    def test_split_word_positions(self):
        tokens = tokenize("echo $A/b")
        var, rest = tokens[-2], tokens[-1]
        assert var.span.start.offset == 5
        assert var.span.end.offset == 7
        assert rest.span.start.offset == 7


class TestSyntaxSelection:
    def test_unknown_syntax(self):
        with pytest.raises(ConfigError, match="unknown shell syntax"):
            Lexer(lambda tok: None, "fish")

    def test_alias(self):
        assert Lexer(lambda tok: None, "ksh").syntax.name == "korn93"

    def test_dialect_changes_builtins(self):
        assert tokenize("local x", "bash")[0].type == TokenType.BUILTIN
        assert tokenize("local x", "bourne")[0].type == TokenType.COMMAND


class TestScanner:
    def test_scanner_per_dialect(self):
        assert type(get_scanner(get_syntax("tcsh"))) is CshScanner
        assert type(get_scanner(get_syntax("bash"))) is ShellScanner

    def test_fragments_cover_source(self):
        source = "cat <<EOF 2>&1\nbody\nEOF\n"
        fragments = list(get_scanner(get_syntax("bourne")).get_tokens_unprocessed(source))
        assert "".join(value for _, _, value in fragments) == source
        assert (4, Operator, "<<") in fragments
        assert (10, Operator, "2>&") in fragments
        assert (15, HEREDOC, "body") in fragments
        assert (20, HEREDOC_END, "EOF") in fragments
