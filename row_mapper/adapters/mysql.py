"""MySQL adapter using mysql-connector-python."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from row_mapper.core.connection import ConnectionConfig
from row_mapper.core.enums import DatabaseBackend, IsolationLevel


class MysqlAdapter:
    """MySQL adapter using mysql-connector-python."""

    @property
    def backend(self) -> DatabaseBackend:
        return DatabaseBackend.MYSQL

    @property
    def paramstyle(self) -> str:
        return "format"

    @property
    def supported_isolation_levels(self) -> frozenset[IsolationLevel]:
        return frozenset(IsolationLevel)

    @property
    def supports_default_keyword(self) -> bool:
        return True

    @property
    def escapes_percent(self) -> bool:
        return False

    def connect(self, config: ConnectionConfig) -> Any:
        """Open a MySQL connection in autocommit mode."""
        import mysql.connector

        return mysql.connector.connect(
            host=config.host,
            port=config.port,
            user=config.user,
            password=config.password,
            database=config.database,
            autocommit=True,
            **config.extra,
        )

    def execute(self, connection: Any, sql: str, params: Sequence[Any]) -> Any:
        """Execute SQL and return a buffered cursor."""
        cursor = connection.cursor(buffered=True)
        cursor.execute(sql, tuple(params))
        return cursor

    def get_isolation_level(self, connection: Any) -> IsolationLevel | None:
        cursor = connection.cursor()
        cursor.execute("SELECT @@transaction_isolation")
        (value,) = cursor.fetchone()
        cursor.close()
        return IsolationLevel(str(value).replace("-", " "))

    def set_isolation_level(self, connection: Any, level: IsolationLevel) -> None:
        cursor = connection.cursor()
        cursor.execute(f"SET SESSION TRANSACTION ISOLATION LEVEL {level.value}")
        cursor.close()

    def begin(self, connection: Any) -> None:
        connection.start_transaction()

    def commit(self, connection: Any) -> None:
        connection.commit()

    def rollback(self, connection: Any) -> None:
        connection.rollback()
