"""SQL placeholder normalization.

Generated and user-supplied statements use positional ``?`` placeholders.
This module converts them to the driver's DB-API paramstyle, leaving quoted
string literals and quoted identifiers untouched.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from functools import lru_cache
from typing import Any

# Single-quoted literals (escaped quotes handled) and double-quoted identifiers
_QUOTED_PATTERN = re.compile(r"'(?:[^'\\]|\\.)*'|\"(?:[^\"\\]|\\.)*\"")

_PLACEHOLDER = "?"


def normalize_placeholders(sql: str, paramstyle: str, *, escape_percent: bool = False) -> str:
    """Convert ``?`` placeholders to the target paramstyle.

    Args:
        sql: SQL string with ``?`` placeholders.
        paramstyle: Target DB-API style - 'qmark' (no conversion), 'format'
            (``%s``) or 'numeric' (``:1``, ``:2`` ...).
        escape_percent: Double every literal ``%`` for 'format' drivers that
            un-escape ``%%`` (psycopg). Ignored for other styles.

    Returns:
        SQL with placeholders converted to the target style.
    """
    if paramstyle == "qmark":
        return sql
    if paramstyle == "format":
        return _convert(sql, "format", escape_percent)
    if paramstyle == "numeric":
        return _convert(sql, "numeric", False)
    raise ValueError(f"Unsupported paramstyle: {paramstyle}")


@lru_cache(maxsize=256)
def _convert(sql: str, paramstyle: str, escape_percent: bool) -> str:
    """Rewrite placeholders outside quoted segments."""
    parts: list[str] = []
    counter = 0
    last_end = 0

    def rewrite(segment: str) -> str:
        nonlocal counter
        out: list[str] = []
        for char in segment:
            if char == _PLACEHOLDER:
                counter += 1
                out.append("%s" if paramstyle == "format" else f":{counter}")
            elif char == "%" and escape_percent:
                out.append("%%")
            else:
                out.append(char)
        return "".join(out)

    for match in _QUOTED_PATTERN.finditer(sql):
        start, end = match.span()
        if start > last_end:
            parts.append(rewrite(sql[last_end:start]))
        literal = match.group()
        # psycopg scans literals for % as well
        parts.append(literal.replace("%", "%%") if escape_percent else literal)
        last_end = end

    if last_end < len(sql):
        parts.append(rewrite(sql[last_end:]))

    return "".join(parts)


def count_placeholders(sql: str) -> int:
    """Number of ``?`` placeholders outside quoted segments."""
    stripped = _QUOTED_PATTERN.sub("", sql)
    return stripped.count(_PLACEHOLDER)


def coerce_params(params: Iterable[Any] | Any | None) -> tuple[Any, ...]:
    """Normalize *params* to a positional tuple.

    * ``None`` -> empty tuple.
    * ``tuple`` / ``list`` -> tuple.
    * Any other scalar -> single-element tuple.
    """
    if params is None:
        return ()
    if isinstance(params, (tuple, list)):
        return tuple(params)
    return (params,)
