"""Shell scanner — pygments lexers that split shell source into raw fragments.

The scanner knows quoting, expansions, operators, arithmetic and
here-documents, but not what a word means. ``shellhl.lexer`` groups the
fragments into words and classifies them.
"""

from __future__ import annotations

import re

from pygments.lexer import ExtendedRegexLexer, bygroups, include
from pygments.token import Comment, Name, Operator, Punctuation, String, Text, Whitespace

from shellhl.syntax import Syntax

# Fragment types beyond the stock pygments ones
NEWLINE = Whitespace.Newline
CONTINUATION = Punctuation.Continuation
CONTINUATION_NEWLINE = Whitespace.Continuation
BACKTICK = String.Backtick
SUBST_OPEN = Punctuation.Substitution
ARITH_OPEN = Operator.Arithmetic.Open
ARITH_CLOSE = Operator.Arithmetic.Close
HEREDOC = String.Heredoc
HEREDOC_END = String.Delimiter

# Openers and closers of constructs that keep a word going until they close
SINGLE_OPEN = String.Single.Open
SINGLE_CLOSE = String.Single.Close
DOUBLE_OPEN = String.Double.Open
DOUBLE_CLOSE = String.Double.Close
PARAM_OPEN = Name.Variable.Open
PARAM_CLOSE = Name.Variable.Close
INNER_SUBST_OPEN = String.Interpol.Open
INNER_SUBST_CLOSE = String.Interpol.Close
INNER_BACKTICK_OPEN = String.Backtick.Open
INNER_BACKTICK_CLOSE = String.Backtick.Close

# Unquoted word characters
_WORD = r"[^ \t\r\n;&|<>()`'\"\\$]+"

# Here-document delimiter word following << or <<-
_HEREDOC_WORD = re.compile(r"""[ \t]*((?:'[^'\n]*'|"[^"\n]*"|\\.|[^ \t\r\n;&|<>()`'"\\])+)""")


class ShellScanner(ExtendedRegexLexer):
    """Fragment scanner for the Bourne family (sh, ksh, bash, zsh).

    Operators come from the dialect's table, longest first, so ``;;&`` is one
    operator in bash and two in sh. Here-document bodies are read line by
    line after the newline that ends the command introducing them.
    """

    name = "Shell fragments"
    aliases = ["shellhl"]
    filenames = []

    flags = re.MULTILINE | re.DOTALL

    def __init__(self, syntax: Syntax, **options) -> None:
        self.syntax = syntax
        super().__init__(**options)

    def newline_callback(self, match, ctx):
        yield match.start(), NEWLINE, match.group()
        ctx.pos = match.end()
        heredocs = ctx.__dict__.get("heredocs")
        while heredocs and ctx.pos < ctx.end:
            strip_tabs, delimiter = heredocs[0]
            eol = ctx.text.find("\n", ctx.pos, ctx.end)
            stop = ctx.end if eol < 0 else eol
            line = ctx.text[ctx.pos : stop]
            if (line.lstrip("\t") if strip_tabs else line) == delimiter:
                heredocs.pop(0)
                if line:
                    yield ctx.pos, HEREDOC_END, line
            elif line:
                yield ctx.pos, HEREDOC, line
            ctx.pos = stop
            if eol >= 0:
                yield eol, HEREDOC, "\n"
                ctx.pos = eol + 1

    def operator_callback(self, match, ctx):
        start = match.start()
        pos = match.end(1)
        op = next(
            (op for op in self.syntax.operators if ctx.text.startswith(op, pos, ctx.end)),
            ctx.text[pos],
        )
        ctx.pos = pos + len(op)
        yield start, Operator, ctx.text[start : ctx.pos]
        if op in ("<<", "<<-"):
            word = _HEREDOC_WORD.match(ctx.text, ctx.pos, ctx.end)
            if word:
                delimiter = re.sub(r"['\"\\]", "", word.group(1))
                ctx.__dict__.setdefault("heredocs", []).append((op == "<<-", delimiter))

    tokens = {
        "root": [
            (r"\n", newline_callback),
            (r"[ \t\r]+", Whitespace),
            (r"(?<![^ \t\r\n;&|()<>`])#[^\n]*", Comment.Single),
            (r"(\\)(\n)", bygroups(CONTINUATION, CONTINUATION_NEWLINE)),
            (r"`", BACKTICK),
            (r"\$\(\(", ARITH_OPEN, "arithmetic"),
            (r"\$\(", SUBST_OPEN),
            include("arithmetic_command"),
            # fd digits belong to the redirection: 2>&1, 0<
            (r"(\d+(?=[<>])|)(?=[;&|<>()])", operator_callback),
            include("word"),
        ],
        "arithmetic_command": [
            (r"\(\(", ARITH_OPEN, "arithmetic"),
        ],
        "word": [
            include("ansi_string"),
            (r"'", SINGLE_OPEN, "single"),
            (r'"', DOUBLE_OPEN, "double"),
            (r"\$\{", PARAM_OPEN, "param"),
            include("variable"),
            (r"\\.", String.Escape),
            (r"\\", String.Escape),
            (_WORD, Text),
            (r"\$", Text),
        ],
        "ansi_string": [
            (r"\$'", SINGLE_OPEN, "ansi"),
        ],
        "variable": [
            (r"\$[A-Za-z_][A-Za-z0-9_]*", Name.Variable),
            (r"\$[?#@*$!0-9-]", Name.Variable),
        ],
        "single": [
            (r"[^']+", String.Single),
            (r"'", SINGLE_CLOSE, "#pop"),
        ],
        "ansi": [
            (r"\\.", String.Escape),
            (r"[^'\\]+", String.Single),
            (r"\\", String.Single),
            (r"'", SINGLE_CLOSE, "#pop"),
        ],
        "double": [
            (r'"', DOUBLE_CLOSE, "#pop"),
            (r"\\.", String.Escape),
            (r"\\", String.Double),
            (r"\$\(\(", String.Interpol, "arithmetic"),
            (r"\$\(", INNER_SUBST_OPEN, "subst"),
            (r"`", INNER_BACKTICK_OPEN, "backtick"),
            (r"\$\{", PARAM_OPEN, "param_in_double"),
            include("variable"),
            (r'[^"\\$`]+', String.Double),
            (r"\$", String.Double),
        ],
        "subst": [
            (r"\)", INNER_SUBST_CLOSE, "#pop"),
            (r"\(", Punctuation, "group"),
            include("root"),
        ],
        "group": [
            (r"\)", Punctuation, "#pop"),
            (r"\(", Punctuation, "#push"),
            include("root"),
        ],
        "backtick": [
            (r"`", INNER_BACKTICK_CLOSE, "#pop"),
            (r"\\.", String.Escape),
            (r"\\", String.Backtick),
            (r"[^`\\]+", String.Backtick),
        ],
        # Quotes inside ${...} nest, so a quoted } does not close it
        "param": [
            (r"'", SINGLE_OPEN, "single"),
            include("param_body"),
        ],
        # Within double quotes a ' inside ${...} is literal
        "param_in_double": [
            include("param_body"),
        ],
        "param_body": [
            (r"\}", PARAM_CLOSE, "#pop"),
            (r"\$?\{", PARAM_OPEN, "#push"),
            (r'"', DOUBLE_OPEN, "double"),
            (r"\$\(\(", String.Interpol, "arithmetic"),
            (r"\$\(", INNER_SUBST_OPEN, "subst"),
            (r"`", INNER_BACKTICK_OPEN, "backtick"),
            include("variable"),
            (r"\\.", String.Escape),
            (r"\\", Text),
            (r"[^{}'\"$`\\]+", Text),
            (r"['$]", Text),
        ],
        # $(( ... )) and (( ... )): << is a shift here, never a here-document
        "arithmetic": [
            (r"\)\)", ARITH_CLOSE, "#pop"),
            (r"\(", Operator, "arithmetic_group"),
            include("arithmetic_body"),
        ],
        "arithmetic_group": [
            (r"\)", Operator, "#pop"),
            (r"\(", Operator, "#push"),
            include("arithmetic_body"),
        ],
        "arithmetic_body": [
            (r"[ \t\r\n]+", Whitespace),
            (r"\$\(\(", ARITH_OPEN, "arithmetic"),
            (r"'", SINGLE_OPEN, "single"),
            (r'"', DOUBLE_OPEN, "double"),
            (r"\$\{", PARAM_OPEN, "param"),
            include("variable"),
            (r"\\.", String.Escape),
            (r"\\", Text),
            (r"[;&|<>]+", Operator),
            (r"\)", Operator),
            (r"[^ \t\r\n()'\"$`\\;&|<>]+", Text),
            (r"[$`]", Text),
        ],
    }


class CshScanner(ShellScanner):
    """Fragment scanner for csh and tcsh: no (( )) commands and no $'...' strings."""

    name = "C shell fragments"
    aliases = ["shellhl-csh"]

    tokens = {
        "arithmetic_command": [],
        "ansi_string": [],
    }


def get_scanner(syntax: Syntax) -> ShellScanner:
    """Return a fragment scanner for a resolved dialect."""
    if syntax.name in ("csh", "tcsh"):
        return CshScanner(syntax)
    return ShellScanner(syntax)
