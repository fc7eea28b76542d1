"""Oracle adapter using oracledb."""

from __future__ import annotations

import weakref
from collections.abc import Sequence
from typing import Any

from row_mapper.core.connection import ConnectionConfig
from row_mapper.core.enums import DatabaseBackend, IsolationLevel

_LEVELS = frozenset({IsolationLevel.READ_COMMITTED, IsolationLevel.SERIALIZABLE})


def _build_dsn(config: ConnectionConfig) -> str:
    """Build an Oracle DSN string from config fields (host:port/database)."""
    return f"{config.host}:{config.port}/{config.database}"


class OracleAdapter:
    """Oracle adapter using oracledb.

    Oracle has no session query for the isolation level, so the adapter
    remembers what it applied per connection. Entries go away with their
    connection.
    """

    def __init__(self) -> None:
        self._levels: weakref.WeakKeyDictionary[Any, IsolationLevel] = (
            weakref.WeakKeyDictionary()
        )

    @property
    def backend(self) -> DatabaseBackend:
        return DatabaseBackend.ORACLE

    @property
    def paramstyle(self) -> str:
        return "numeric"

    @property
    def supported_isolation_levels(self) -> frozenset[IsolationLevel]:
        return _LEVELS

    @property
    def supports_default_keyword(self) -> bool:
        return True

    @property
    def escapes_percent(self) -> bool:
        return False

    def connect(self, config: ConnectionConfig) -> Any:
        """Open an Oracle connection in autocommit mode."""
        import oracledb

        conn = oracledb.connect(
            user=config.user, password=config.password, dsn=_build_dsn(config), **config.extra
        )
        conn.autocommit = True
        return conn

    def execute(self, connection: Any, sql: str, params: Sequence[Any]) -> Any:
        cursor = connection.cursor()
        cursor.execute(sql, list(params))
        return cursor

    def get_isolation_level(self, connection: Any) -> IsolationLevel | None:
        return self._levels.get(connection)

    def set_isolation_level(self, connection: Any, level: IsolationLevel) -> None:
        cursor = connection.cursor()
        cursor.execute(f"ALTER SESSION SET ISOLATION_LEVEL = {level.value}")
        cursor.close()
        self._levels[connection] = level

    def begin(self, connection: Any) -> None:
        # Oracle opens transactions implicitly on the first DML
        connection.autocommit = False

    def commit(self, connection: Any) -> None:
        connection.commit()
        connection.autocommit = True

    def rollback(self, connection: Any) -> None:
        connection.rollback()
        connection.autocommit = True
