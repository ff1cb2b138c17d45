"""Highlighter configuration: defaults, validation, and TOML config files."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from shellhl.errors import ConfigError
from shellhl.syntax import get_syntax

CONFIG_FILENAME = "shellhl.toml"

OPTIONS: tuple[str, ...] = ("pre", "nnn", "syntax", "tabs")


@dataclass(frozen=True, slots=True)
class HighlighterConfig:
    """Options fixed for the life of one Highlighter.

    pre     surround the result with <pre>...</pre>
    nnn     prefix every line with a line number
    syntax  shell dialect handed to the lexer
    tabs    spaces per tab character; 0 leaves tabs alone
    """

    pre: bool = True
    nnn: bool = False
    syntax: str = "bourne"
    tabs: int = 4

    def __post_init__(self) -> None:
        for name in ("pre", "nnn"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigError(f"expected a boolean, got {getattr(self, name)!r}", name)
        if not isinstance(self.syntax, str):
            raise ConfigError(f"expected a string, got {self.syntax!r}", "syntax")
        get_syntax(self.syntax)
        # bool is an int subclass; tabs=True is almost certainly a mistake
        if isinstance(self.tabs, bool) or not isinstance(self.tabs, int):
            raise ConfigError(f"expected an integer, got {self.tabs!r}", "tabs")
        if self.tabs < 0:
            raise ConfigError(f"must not be negative, got {self.tabs}", "tabs")

    @classmethod
    def from_options(cls, **options: Any) -> HighlighterConfig:
        """Build a config from keyword options; None means "use the default".

        Explicit False and 0 values are honoured: tabs=0 disables tab
        expansion and pre=False drops the <pre> wrapper.
        """
        unknown = sorted(set(options) - set(OPTIONS))
        if unknown:
            raise ConfigError(
                f"unknown option(s): {', '.join(unknown)} (expected: {', '.join(OPTIONS)})"
            )
        given = {name: value for name, value in options.items() if value is not None}
        return cls(**given)


def load_config(config_path: Path | None, search_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else search_dir / CONFIG_FILENAME

    if not path.is_file():
        return {}

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"invalid config file {path}: {exc}") from exc


def config_from_file(config_path: Path | None, search_dir: Path) -> HighlighterConfig:
    """Build a HighlighterConfig from the [highlight] table of a config file.

    Missing file or missing table gives the defaults.
    """
    config = load_config(config_path, search_dir)
    table = config.get("highlight", {})
    if not isinstance(table, dict):
        raise ConfigError("[highlight] must be a table")
    return HighlighterConfig.from_options(**table)
