"""Shell dialect registry: keywords, builtins, and operators per syntax."""

from __future__ import annotations

from dataclasses import dataclass

from shellhl.errors import ConfigError

# Alias map: alternate name -> canonical name
ALIASES: dict[str, str] = {
    "sh": "bourne",
    "ksh": "korn93",
    "ksh88": "korn88",
    "ksh93": "korn93",
}


@dataclass(frozen=True, slots=True)
class Syntax:
    """Lexical vocabulary of one shell dialect."""

    name: str
    keywords: frozenset[str]
    builtins: frozenset[str]
    operators: tuple[str, ...]  # longest first
    assignments: bool  # NAME=value words are assignments


def _ops(*groups: str) -> tuple[str, ...]:
    ops = {op for group in groups for op in group.split()}
    return tuple(sorted(ops, key=len, reverse=True))


def _words(*groups: str) -> frozenset[str]:
    return frozenset(word for group in groups for word in group.split())


_BOURNE_KEYWORDS = "case do done elif else esac fi for if in then until while { } !"
_BOURNE_BUILTINS = (
    ". : [ break cd continue echo eval exec exit export getopts hash pwd read "
    "readonly return set shift test times trap type ulimit umask unset wait"
)
_BOURNE_OPS = ";; && || >> <<- << >& <& <> >| () ; & | < > ( )"

_KORN_KEYWORDS = "function select time [[ ]]"
_KORN88_BUILTINS = (
    "alias bg fc fg jobs kill let newgrp print false true unalias whence"
)
_KORN93_BUILTINS = "builtin command disown getconf printf sleep typeset"
_KORN93_OPS = ";& |& <<<"

_BASH_KEYWORDS = "function select time [[ ]] coproc"
_BASH_BUILTINS = (
    "alias bg bind builtin caller command compgen complete compopt declare dirs "
    "disown enable false fc fg help history jobs kill let local logout mapfile "
    "popd printf pushd readarray shopt source suspend true typeset unalias"
)
_BASH_OPS = ";;& ;& |& &>> &> <<<"

_ZSH_KEYWORDS = "function select time repeat foreach end [[ ]] coproc nocorrect"
_ZSH_BUILTINS = (
    "alias autoload bg bindkey builtin command declare dirs disown emulate false "
    "fc fg float functions history integer jobs kill let local print printf "
    "popd pushd rehash setopt source true typeset unalias unsetopt whence where "
    "which zle zmodload zstyle"
)
_ZSH_OPS = ";| ;& |& &! &| &>> &> >>| >! <<<"

_CSH_KEYWORDS = "if then else endif foreach end while switch case breaksw default endsw"
_CSH_BUILTINS = (
    "@ alias bg cd chdir dirs echo eval exec exit fg glob goto hashstat history "
    "jobs kill limit login logout nice nohup notify onintr popd pushd rehash "
    "repeat set setenv shift source stop suspend time umask unalias unhash "
    "unlimit unset unsetenv wait"
)
_CSH_OPS = ">>& >>! >& >! |& && || >> << ; & | < > ( )"

_TCSH_BUILTINS = (
    "bindkey builtins complete echotc filetest hup log ls-F printenv sched "
    "settc setty telltc uncomplete where which"
)


def _make_syntaxes() -> dict[str, Syntax]:
    defs: dict[str, Syntax] = {}

    def d(
        name: str,
        keywords: frozenset[str],
        builtins: frozenset[str],
        operators: tuple[str, ...],
        *,
        assignments: bool = True,
    ) -> None:
        defs[name] = Syntax(name, keywords, builtins, operators, assignments)

    d(
        "bourne",
        _words(_BOURNE_KEYWORDS),
        _words(_BOURNE_BUILTINS),
        _ops(_BOURNE_OPS),
    )
    d(
        "korn88",
        _words(_BOURNE_KEYWORDS, _KORN_KEYWORDS),
        _words(_BOURNE_BUILTINS, _KORN88_BUILTINS),
        _ops(_BOURNE_OPS, "|&"),
    )
    d(
        "korn93",
        _words(_BOURNE_KEYWORDS, _KORN_KEYWORDS),
        _words(_BOURNE_BUILTINS, _KORN88_BUILTINS, _KORN93_BUILTINS),
        _ops(_BOURNE_OPS, _KORN93_OPS),
    )
    d(
        "bash",
        _words(_BOURNE_KEYWORDS, _BASH_KEYWORDS),
        _words(_BOURNE_BUILTINS, _BASH_BUILTINS),
        _ops(_BOURNE_OPS, _BASH_OPS),
    )
    d(
        "zsh",
        _words(_BOURNE_KEYWORDS, _ZSH_KEYWORDS),
        _words(_BOURNE_BUILTINS, _ZSH_BUILTINS),
        _ops(_BOURNE_OPS, _ZSH_OPS),
    )
    d(
        "csh",
        _words(_CSH_KEYWORDS),
        _words(_CSH_BUILTINS),
        _ops(_CSH_OPS),
        assignments=False,
    )
    d(
        "tcsh",
        _words(_CSH_KEYWORDS),
        _words(_CSH_BUILTINS, _TCSH_BUILTINS),
        _ops(_CSH_OPS),
        assignments=False,
    )

    return defs


_SYNTAX_DEFS: dict[str, Syntax] = _make_syntaxes()

SYNTAXES: tuple[str, ...] = tuple(_SYNTAX_DEFS)


def resolve_syntax(name: str) -> str:
    """Resolve a dialect alias to its canonical name."""
    return ALIASES.get(name, name)


def get_syntax(name: str) -> Syntax:
    """Return the dialect definition for name, raising ConfigError if unknown."""
    syntax = _SYNTAX_DEFS.get(resolve_syntax(name))
    if syntax is None:
        known = ", ".join(SYNTAXES)
        raise ConfigError(f"unknown shell syntax '{name}' (expected one of: {known})", "syntax")
    return syntax
