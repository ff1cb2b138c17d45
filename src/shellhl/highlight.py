"""HTML highlighter — turns a shell token stream into CSS-classed markup."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

from shellhl.config import HighlighterConfig
from shellhl.errors import ConfigError, LexError
from shellhl.lexer import Lexer, TokenHandler
from shellhl.tokens import Token, TokenType

# Internal class name -> CSS class used in the generated markup
CSS_CLASSES: Mapping[str, str] = MappingProxyType(
    {
        "metachar": "s-mta",  # shell metacharacters (; | > & \)
        "keyword": "s-key",  # if, for, while, do, ...
        "builtin": "s-blt",  # builtin commands
        "command": "s-cmd",  # external commands
        "argument": "s-arg",  # command arguments
        "quote": "s-quo",  # single (') and double (") quotes
        "variable": "s-var",  # expanded variables ($VARIABLE)
        "assigned": "s-avr",  # assigned variables (VARIABLE=value)
        "value": "s-val",  # values, inside quotes or after =
        "comment": "s-cmt",  # comments
        "line_number": "s-lno",  # line numbers
    }
)

# Token types wrapped whole, without looking at their text
_WRAPPED = frozenset(("metachar", "keyword", "builtin", "command", "variable", "comment"))

LexerFactory = Callable[..., Any]


class Highlighter:
    """Highlight shell source as HTML.

    The highlighter owns a lexer built from ``lexer_factory`` and receives
    tokens through a callback. Options are ``pre``, ``nnn``, ``syntax`` and
    ``tabs`` (see HighlighterConfig); pass either those or a ready config.

        >>> Highlighter(pre=False).parse("cd /tmp")
        '<span class="s-blt">cd</span> /tmp'

    One instance must not run ``parse`` from several threads at once.
    """

    def __init__(
        self,
        config: HighlighterConfig | None = None,
        *,
        lexer_factory: LexerFactory = Lexer,
        **options: Any,
    ) -> None:
        if config is None:
            config = HighlighterConfig.from_options(**options)
        elif options:
            raise ConfigError("pass either a HighlighterConfig or keyword options, not both")
        self._config = config
        self._output: list[str] = []
        handler: TokenHandler = self._on_token
        self._lexer = lexer_factory(handler, syntax=config.syntax)

    @property
    def config(self) -> HighlighterConfig:
        return self._config

    def parse(self, source: str) -> str:
        """Highlight source and return the HTML.

        Raises LexError if the lexer cannot tokenize source; no partial
        output is returned in that case.
        """
        self._output = []
        try:
            self._lexer.feed(source)
            self._lexer.eof()
        except LexError:
            self._output = []
            self._lexer.reset()
            raise

        html = "".join(self._output)
        self._output = []

        if self._config.nnn:
            html = number_lines(html)
        if self._config.pre:
            html = wrap_pre(html)
        if self._config.tabs:
            html = expand_tabs(html, self._config.tabs)
        return html

    def _on_token(self, token: Token) -> None:
        self._output.append(render_token(token.text, token.type))


# ---------------------------------------------------------------------------
# Token markup
# ---------------------------------------------------------------------------


def escape_html(text: str) -> str:
    """Escape &, < and > for HTML body content."""
    result: list[str] = []
    for ch in text:
        if ch == "&":
            result.append("&amp;")
        elif ch == "<":
            result.append("&lt;")
        elif ch == ">":
            result.append("&gt;")
        else:
            result.append(ch)
    return "".join(result)


def css_class(name: str) -> str:
    return CSS_CLASSES[name]


def _span(name: str, text: str) -> str:
    return f'<span class="{css_class(name)}">{escape_html(text)}</span>'


def _type_name(token_type: TokenType | str) -> str:
    if isinstance(token_type, TokenType):
        return token_type.value
    return str(token_type)


def split_quoted(text: str) -> tuple[str, str] | None:
    """Split a whole quoted literal into (quote, inner), or return None.

    Matches a single or double quote, then text holding neither quote
    character, then the same quote again.
    """
    if len(text) < 2:
        return None
    quote = text[0]
    if quote not in ("'", '"') or text[-1] != quote:
        return None
    inner = text[1:-1]
    if "'" in inner or '"' in inner:
        return None
    return quote, inner


def render_token(text: str, token_type: TokenType | str) -> str:
    """Return the HTML for one token.

    Unknown token types never raise; they are passed through like arguments.
    """
    name = _type_name(token_type)

    if name in _WRAPPED:
        return _span(name, text)

    quoted = split_quoted(text)
    if quoted is not None:
        quote, inner = quoted
        return _span("quote", quote) + _span("value", inner) + _span("quote", quote)

    if name == "assign" and "=" in text:
        left, _, right = text.partition("=")
        return _span("assigned", left) + "=" + _span("value", right)

    return text


# ---------------------------------------------------------------------------
# Post-processing
# ---------------------------------------------------------------------------


def number_lines(html: str) -> str:
    """Prefix every line with a 3-wide, space-padded line number span.

    A trailing newline does not start another line; empty input stays empty.
    """
    if not html:
        return html
    lines = html.split("\n")
    trailing = lines[-1] == ""
    if trailing:
        lines.pop()
    lno = css_class("line_number")
    numbered = [f'<span class="{lno}">{n:3d}</span> {line}' for n, line in enumerate(lines, 1)]
    result = "\n".join(numbered)
    if trailing:
        result += "\n"
    return result


def wrap_pre(html: str) -> str:
    return f"<pre>\n{html}</pre>\n"


def expand_tabs(html: str, width: int) -> str:
    """Replace every tab with width spaces (no tab-stop alignment)."""
    return html.replace("\t", " " * width)
