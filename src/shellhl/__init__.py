"""Shell script syntax highlighter producing CSS-classed HTML."""

from __future__ import annotations

from typing import Any

__version__ = "0.1.0"


def highlight(source: str, **options: Any) -> str:
    """Highlight shell source to HTML with a one-off Highlighter."""
    from shellhl.highlight import Highlighter

    return Highlighter(**options).parse(source)
