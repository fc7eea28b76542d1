"""Atomic value types and the DEFAULT marker.

Atomic types map to exactly one column. The set is closed: anything whose
runtime type is not listed here is treated as a nested mapped entity.
Membership is by exact type, so subclasses (``bool`` for ``int``) are not
atomic unless listed.
"""

from __future__ import annotations

import datetime
from typing import Any, Final


class Char(str):
    """A single character value."""

    __slots__ = ()

    def __new__(cls, value: str) -> Char:
        if len(value) != 1:
            raise ValueError(f"Char requires exactly one character, got {value!r}")
        return super().__new__(cls, value)


ATOMIC_TYPES: Final[frozenset[type]] = frozenset(
    {
        str,
        int,
        float,
        datetime.datetime,
        datetime.date,
        Char,
    }
)


def is_atomic(tp: type) -> bool:
    """Return True if values of *tp* bind as a single column."""
    return tp in ATOMIC_TYPES


def is_atomic_value(value: Any) -> bool:
    """Return True if *value* binds as a single column.

    ``None`` counts as atomic: it binds as SQL NULL.
    """
    return value is None or type(value) in ATOMIC_TYPES


class _DefaultMarker:
    """Sentinel asking the database to use the column default."""

    _instance: _DefaultMarker | None = None

    def __new__(cls) -> _DefaultMarker:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "DEFAULT"

    def __reduce__(self) -> str:
        return "DEFAULT"


DEFAULT: Final = _DefaultMarker()
