"""SQLite adapter using stdlib sqlite3."""

from __future__ import annotations

import datetime
import sqlite3
from collections.abc import Sequence
from typing import Any

from row_mapper.core.connection import ConnectionConfig
from row_mapper.core.enums import DatabaseBackend, IsolationLevel

# Explicit adapters replace the deprecated sqlite3 defaults for dates
sqlite3.register_adapter(datetime.datetime, lambda value: value.isoformat())
sqlite3.register_adapter(datetime.date, lambda value: value.isoformat())

_LEVELS = frozenset({IsolationLevel.READ_UNCOMMITTED, IsolationLevel.SERIALIZABLE})


class SqliteAdapter:
    """SQLite adapter using stdlib sqlite3.

    SQLite only distinguishes SERIALIZABLE (its default) from
    READ UNCOMMITTED, toggled with ``PRAGMA read_uncommitted``.
    """

    @property
    def backend(self) -> DatabaseBackend:
        return DatabaseBackend.SQLITE

    @property
    def paramstyle(self) -> str:
        return "qmark"

    @property
    def supported_isolation_levels(self) -> frozenset[IsolationLevel]:
        return _LEVELS

    @property
    def supports_default_keyword(self) -> bool:
        return False

    @property
    def escapes_percent(self) -> bool:
        return False

    def connect(self, config: ConnectionConfig) -> sqlite3.Connection:
        """Open a connection with implicit transactions disabled."""
        return sqlite3.connect(config.database, isolation_level=None, **config.extra)

    def execute(
        self,
        connection: sqlite3.Connection,
        sql: str,
        params: Sequence[Any],
    ) -> sqlite3.Cursor:
        """Execute SQL and return a cursor."""
        return connection.execute(sql, tuple(params))

    def get_isolation_level(self, connection: sqlite3.Connection) -> IsolationLevel:
        (flag,) = connection.execute("PRAGMA read_uncommitted").fetchone()
        return IsolationLevel.READ_UNCOMMITTED if flag else IsolationLevel.SERIALIZABLE

    def set_isolation_level(self, connection: sqlite3.Connection, level: IsolationLevel) -> None:
        flag = 1 if level is IsolationLevel.READ_UNCOMMITTED else 0
        connection.execute(f"PRAGMA read_uncommitted = {flag}")

    def begin(self, connection: sqlite3.Connection) -> None:
        connection.execute("BEGIN")

    def commit(self, connection: sqlite3.Connection) -> None:
        connection.commit()

    def rollback(self, connection: sqlite3.Connection) -> None:
        connection.rollback()
