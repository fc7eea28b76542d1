"""SQL statement builder.

Pure functions composing parameterized SELECT/INSERT/UPDATE/DELETE text
together with the ordered parameter slots the text expects. Placeholders
are always ``?``; :class:`~row_mapper.core.connection.Connection` converts
them to the driver's paramstyle.

Clause lists are collected first and joined with their separator, so a
statement never carries a dangling ``AND`` or comma.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from row_mapper.core.exceptions import EmptyAssignmentError, MissingPrimaryKeyError
from row_mapper.mapping.atomic import DEFAULT

_AND = " AND "
_COMMA = ", "
_DEFAULT_KEYWORD = "DEFAULT"


@dataclass(frozen=True)
class Statement:
    """SQL text plus the column name bound by each ``?``, in order."""

    sql: str
    columns: tuple[str, ...] = ()

    def bind(self, values: Mapping[str, Any]) -> tuple[Any, ...]:
        """Positional parameters for this statement, looked up by slot name."""
        return tuple(values[name] for name in self.columns)

    def __str__(self) -> str:
        return self.sql


def where_clause(columns: Sequence[str]) -> str:
    """``c1 = ? AND c2 = ?`` over *columns*."""
    return _AND.join(f"{name} = ?" for name in columns)


def select_by_key(table: str, columns: Sequence[str]) -> Statement:
    """``SELECT * FROM table WHERE c1 = ? AND ...``.

    Raises:
        MissingPrimaryKeyError: If *columns* is empty.
    """
    if not columns:
        raise MissingPrimaryKeyError(table, "SELECT")
    return Statement(f"SELECT * FROM {table} WHERE {where_clause(columns)}", tuple(columns))


def insert(
    table: str,
    values: Mapping[str, Any],
    *,
    default_keyword: bool = True,
) -> Statement:
    """``INSERT INTO table (c1, c2) VALUES (?, DEFAULT)``.

    Columns holding the DEFAULT marker render the ``DEFAULT`` keyword and
    take no parameter slot. Without keyword support they are left out of
    the column list, which has the same effect.
    """
    names: list[str] = []
    placeholders: list[str] = []
    slots: list[str] = []
    for name, value in values.items():
        if value is DEFAULT:
            if not default_keyword:
                continue
            names.append(name)
            placeholders.append(_DEFAULT_KEYWORD)
        else:
            names.append(name)
            placeholders.append("?")
            slots.append(name)

    if not names:
        return Statement(f"INSERT INTO {table} DEFAULT VALUES")
    return Statement(
        f"INSERT INTO {table} ({_COMMA.join(names)}) VALUES ({_COMMA.join(placeholders)})",
        tuple(slots),
    )


def update(
    table: str,
    assignments: Mapping[str, Any],
    key_columns: Sequence[str],
    *,
    default_keyword: bool = True,
) -> Statement:
    """``UPDATE table SET c1 = ?, c2 = ? WHERE k1 = ?``.

    Slots run through the SET list first, then the WHERE list.

    Raises:
        MissingPrimaryKeyError: If *key_columns* is empty.
        EmptyAssignmentError: If no assignment remains.
    """
    if not key_columns:
        raise MissingPrimaryKeyError(table, "UPDATE")

    clauses: list[str] = []
    slots: list[str] = []
    for name, value in assignments.items():
        if value is DEFAULT:
            if default_keyword:
                clauses.append(f"{name} = {_DEFAULT_KEYWORD}")
            continue
        clauses.append(f"{name} = ?")
        slots.append(name)

    if not clauses:
        raise EmptyAssignmentError(table)
    return Statement(
        f"UPDATE {table} SET {_COMMA.join(clauses)} WHERE {where_clause(key_columns)}",
        (*slots, *key_columns),
    )


def delete(table: str, key_columns: Sequence[str]) -> Statement:
    """``DELETE FROM table WHERE k1 = ? AND ...``.

    Raises:
        MissingPrimaryKeyError: If *key_columns* is empty.
    """
    if not key_columns:
        raise MissingPrimaryKeyError(table, "DELETE")
    return Statement(f"DELETE FROM {table} WHERE {where_clause(key_columns)}", tuple(key_columns))
