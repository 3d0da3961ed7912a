"""String helpers for transition keys and diagnostic messages."""
from __future__ import annotations

from typing import Mapping


def substitute(template: str, values: Mapping[str, object]) -> str:
    """Replace ``{name}`` placeholders in *template* with entries of *values*.

    Substituted values are inserted verbatim and never re-expanded.
    Raises KeyError if *template* names a placeholder missing from *values*.

    >>> substitute("{from}->{to}", {"from": "idle", "to": "running"})
    'idle->running'
    """
    return template.format_map(values)


def capitalize_first(value: str) -> str:
    """Upper-case the first character, leave the rest untouched."""
    return value[:1].upper() + value[1:]
