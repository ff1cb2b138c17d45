"""Shell lexer — converts shell source text into a stream of classified tokens."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum, auto

from pygments.token import Comment, Error, Name, Operator, String, Text, Whitespace

from shellhl import scanner
from shellhl.errors import LexError
from shellhl.syntax import Syntax, get_syntax
from shellhl.tokens import Position, Span, Token, TokenType, is_name_char, is_name_start

TokenHandler = Callable[[Token], None]

# Keywords after which the next word is a name, not a command
_NAME_KEYWORDS = frozenset(("for", "select", "foreach", "case", "function"))

# Keywords after which the next word is not in command position
_CLOSING_KEYWORDS = frozenset(("fi", "done", "esac", "}", "end", "endif", "endsw", "]]"))

_CASE_TERMINATORS = frozenset((";;", ";&", ";;&", ";|"))

# Scanner fragments that open a construct spanning several fragments
_OPENERS = {
    scanner.SINGLE_OPEN: "single",
    scanner.DOUBLE_OPEN: "double",
    scanner.PARAM_OPEN: "param",
    scanner.INNER_SUBST_OPEN: "subst",
    scanner.INNER_BACKTICK_OPEN: "subst",
}
_CLOSERS = frozenset(
    (
        scanner.SINGLE_CLOSE,
        scanner.DOUBLE_CLOSE,
        scanner.PARAM_CLOSE,
        scanner.INNER_SUBST_CLOSE,
        scanner.INNER_BACKTICK_CLOSE,
    )
)
_UNTERMINATED = {
    "single": "unterminated single-quoted string",
    "double": "unterminated double-quoted string",
    "param": "unterminated parameter expansion",
    "subst": "unterminated command substitution in string",
}

# Fragments that continue the current word
_WORD_PARTS = frozenset((Text, String.Escape, Name.Variable, Error))

# Separator fragments and the token type each becomes
_SEPARATORS = {
    Whitespace: TokenType.DEFAULT,
    scanner.NEWLINE: TokenType.DEFAULT,
    scanner.CONTINUATION_NEWLINE: TokenType.DEFAULT,
    scanner.HEREDOC: TokenType.DEFAULT,
    scanner.HEREDOC_END: TokenType.ARGUMENT,
    Comment.Single: TokenType.COMMENT,
    scanner.CONTINUATION: TokenType.METACHAR,
    scanner.BACKTICK: TokenType.METACHAR,
    scanner.SUBST_OPEN: TokenType.METACHAR,
    scanner.ARITH_OPEN: TokenType.METACHAR,
    scanner.ARITH_CLOSE: TokenType.METACHAR,
    Operator: TokenType.METACHAR,
}


class _Expect(Enum):
    NONE = auto()
    NAME = auto()  # loop variable, case subject, function name
    IN_KEYWORD = auto()  # "in" after for/select/case NAME
    REDIRECT = auto()  # target of a redirection operator
    WORD_LIST = auto()  # csh ( ... ) after if, while, switch, foreach NAME


class Lexer:
    """Tokenize shell source, passing each Token to a handler in source order.

    Fragments come from the pygments scanner in ``shellhl.scanner``; this
    class joins them into words and tracks where commands start, so a word
    can be told apart as a keyword, builtin, command, argument or assignment.
    Data may arrive in several ``feed`` calls. It is buffered and scanned
    when ``eof`` is signalled, so chunked input produces the same tokens as
    a single feed.
    """

    def __init__(self, handler: TokenHandler, syntax: str = "bourne") -> None:
        self._handler = handler
        self._syntax = get_syntax(syntax)
        self._scanner = scanner.get_scanner(self._syntax)
        self.reset()

    @property
    def syntax(self) -> Syntax:
        return self._syntax

    def reset(self) -> None:
        """Discard all buffered input and parser state."""
        self._source = ""
        self._cursor = (0, 1, 1)  # offset, line, column of the last located position
        self._cmd_pos = True
        self._expect = _Expect.NONE
        self._pending_keyword = ""
        self._case_depth = 0
        self._case_patterns = False
        self._in_test = False
        self._backtick = False
        self._arith = 0
        # Command position after each open $( or (
        self._nesting: list[bool] = []
        # Current word: (start offset, is_variable) per piece, and open constructs
        self._pieces: list[tuple[int, bool]] = []
        self._word_end = 0
        self._open: list[tuple[str, int]] = []

    def feed(self, data: str) -> None:
        """Append data to the input buffer."""
        self._source += data

    def eof(self) -> None:
        """Scan the buffered input and reset; raises LexError on unterminated input."""
        try:
            for index, ttype, value in self._scanner.get_tokens_unprocessed(self._source):
                self._fragment(index, ttype, value)
            if self._open:
                kind, offset = self._open[-1]
                raise LexError(_UNTERMINATED[kind], self._locate(offset), self._source)
            self._end_word()
        finally:
            self.reset()

    # ------------------------------------------------------------------
    # Position helpers
    # ------------------------------------------------------------------

    def _locate(self, offset: int) -> Position:
        pos, line, col = self._cursor
        chunk = self._source[pos:offset]
        newlines = chunk.count("\n")
        if newlines:
            line += newlines
            col = len(chunk) - chunk.rfind("\n")
        else:
            col += len(chunk)
        self._cursor = (offset, line, col)
        return Position(line, col, offset)

    def _emit(self, tt: TokenType, start: int, end: int) -> None:
        span = Span(self._locate(start), self._locate(end))
        self._handler(Token(tt, self._source[start:end], span))

    # ------------------------------------------------------------------
    # Fragments
    # ------------------------------------------------------------------

    def _fragment(self, index: int, ttype: object, value: str) -> None:
        if self._open:
            if ttype in _OPENERS:
                self._open.append((_OPENERS[ttype], index))
            elif ttype in _CLOSERS:
                self._open.pop()
            self._word_end = index + len(value)
            return

        if ttype in _OPENERS:
            kind = _OPENERS[ttype]
            self._open.append((kind, index))
            self._add_piece(index, kind == "param")
        elif ttype in _WORD_PARTS or ttype not in _SEPARATORS:
            self._add_piece(index, ttype is Name.Variable)
        else:
            self._end_word()
            self._separator(index, ttype, value)
            return
        self._word_end = index + len(value)

    def _add_piece(self, index: int, is_var: bool) -> None:
        if is_var or not self._pieces or self._pieces[-1][1]:
            self._pieces.append((index, is_var))

    def _separator(self, index: int, ttype: object, value: str) -> None:
        self._emit(_SEPARATORS[ttype], index, index + len(value))

        if ttype is scanner.NEWLINE:
            self._end_of_line()
        elif ttype is scanner.BACKTICK:
            self._backtick = not self._backtick
            self._cmd_pos = self._backtick
        elif ttype is scanner.SUBST_OPEN:
            self._nesting.append(False)
            self._cmd_pos = True
        elif ttype is scanner.ARITH_OPEN:
            self._arith += 1
            self._cmd_pos = False
            self._expect = _Expect.NONE
        elif ttype is scanner.ARITH_CLOSE:
            self._arith = max(self._arith - 1, 0)
            self._cmd_pos = False
        elif ttype is Operator and not self._arith:
            self._operator_state(value.lstrip("0123456789"))

    def _end_of_line(self) -> None:
        if self._in_test or self._arith:
            return
        self._cmd_pos = True
        if self._expect is not _Expect.IN_KEYWORD:
            self._expect = _Expect.NONE

    def _operator_state(self, op: str) -> None:
        if op == ")" and self._nesting:
            self._cmd_pos = self._nesting.pop()
            return
        if self._in_test:
            return
        if "<" in op or ">" in op:
            self._expect = _Expect.REDIRECT
            return
        if op == "()":
            self._cmd_pos = True
            return
        if op == "(":
            if self._expect is _Expect.WORD_LIST:
                # csh: if (expr) then / while (expr) take a command after ")"
                self._expect = _Expect.NONE
                self._nesting.append(self._pending_keyword in ("if", "while"))
                self._cmd_pos = False
            elif not self._case_patterns:
                self._nesting.append(False)
                self._cmd_pos = True
            return
        if op == ")":
            if self._case_patterns:
                self._case_patterns = False
                self._cmd_pos = True
            else:
                self._cmd_pos = False
            return
        if op in _CASE_TERMINATORS:
            self._case_patterns = self._case_depth > 0
        self._cmd_pos = True
        self._expect = _Expect.NONE

    # ------------------------------------------------------------------
    # Words
    # ------------------------------------------------------------------

    def _end_word(self) -> None:
        if not self._pieces:
            return
        pieces, self._pieces = self._pieces, []
        start, end = pieces[0][0], self._word_end
        text = self._source[start:end]

        if self._arith:
            word_type = TokenType.ARGUMENT
        elif self._is_assignment(text):
            self._emit(TokenType.ASSIGN, start, end)
            return
        else:
            plain = not any(is_var for _, is_var in pieces)
            word_type = self._word_type(text, plain)

        stops = [offset for offset, _ in pieces[1:]] + [end]
        for (offset, is_var), stop in zip(pieces, stops):
            self._emit(TokenType.VARIABLE if is_var else word_type, offset, stop)

    def _is_assignment(self, text: str) -> bool:
        """Return True for NAME=..., NAME+=... or NAME[idx]=... in command position."""
        if not (self._syntax.assignments and self._cmd_pos):
            return False
        if self._expect is not _Expect.NONE or self._case_patterns or self._in_test:
            return False
        if not text or not is_name_start(text[0]):
            return False
        i = 1
        while i < len(text) and is_name_char(text[i]):
            i += 1
        if i < len(text) and text[i] == "[":
            close = text.find("]", i)
            if close < 0:
                return False
            i = close + 1
        if text.startswith("+=", i):
            return True
        return text.startswith("=", i)

    def _word_type(self, text: str, plain: bool) -> TokenType:
        """Classify a word and update the command-position state."""
        keywords = self._syntax.keywords

        if self._expect is _Expect.REDIRECT:
            self._expect = _Expect.NONE
            return TokenType.ARGUMENT

        if self._expect is _Expect.NAME:
            keyword = self._pending_keyword
            if keyword == "function":
                self._expect = _Expect.NONE
                self._cmd_pos = True
            elif keyword == "foreach":
                self._expect = _Expect.WORD_LIST
            else:
                self._expect = _Expect.IN_KEYWORD
            return TokenType.ARGUMENT

        if self._expect is _Expect.IN_KEYWORD:
            self._expect = _Expect.NONE
            if plain and text == "in" and "in" in keywords:
                if self._pending_keyword == "case":
                    self._case_patterns = True
                self._cmd_pos = False
                return TokenType.KEYWORD
            if plain and text == "do" and "do" in keywords:
                self._cmd_pos = True
                return TokenType.KEYWORD

        if self._case_patterns:
            if plain and text == "esac":
                self._case_patterns = False
                self._case_depth -= 1
                self._cmd_pos = False
                return TokenType.KEYWORD
            return TokenType.ARGUMENT

        if self._in_test:
            if plain and text == "]]":
                self._in_test = False
                self._cmd_pos = False
                return TokenType.KEYWORD
            return TokenType.ARGUMENT

        if not self._cmd_pos:
            if plain and _is_quoted_string(text):
                return TokenType.QUOTE
            return TokenType.ARGUMENT

        if plain and text in keywords:
            self._keyword_state(text)
            return TokenType.KEYWORD

        self._cmd_pos = False
        if plain and text in self._syntax.builtins:
            return TokenType.BUILTIN
        return TokenType.COMMAND

    def _keyword_state(self, word: str) -> None:
        if word in _NAME_KEYWORDS:
            self._expect = _Expect.NAME
            self._pending_keyword = word
            self._cmd_pos = False
            if word == "case" and "esac" in self._syntax.keywords:
                self._case_depth += 1
        elif word == "[[":
            self._in_test = True
            self._cmd_pos = False
        elif word in ("if", "while", "switch") and not self._syntax.assignments:
            self._expect = _Expect.WORD_LIST
            self._pending_keyword = word
            self._cmd_pos = False
        elif word in _CLOSING_KEYWORDS:
            if word == "esac" and self._case_depth > 0:
                self._case_depth -= 1
            self._cmd_pos = False
        else:
            self._cmd_pos = True


def _is_quoted_string(text: str) -> bool:
    """Return True if text is exactly one single- or double-quoted string."""
    if len(text) < 2 or text[0] not in "'\"" or text[-1] != text[0]:
        return False
    inner = text[1:-1]
    if text[0] == "'":
        return "'" not in inner
    # Any unescaped double quote inside means two strings glued together
    i = 0
    while i < len(inner):
        if inner[i] == "\\":
            i += 2
            continue
        if inner[i] == '"':
            return False
        i += 1
    return True


def tokenize(source: str, syntax: str = "bourne") -> list[Token]:
    """Convenience function: tokenize source text and return the token list."""
    tokens: list[Token] = []
    lexer = Lexer(tokens.append, syntax)
    lexer.feed(source)
    lexer.eof()
    return tokens
