"""PostgreSQL adapter using psycopg (v3+)."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from row_mapper.core.connection import ConnectionConfig
from row_mapper.core.enums import DatabaseBackend, IsolationLevel


def _build_conninfo(config: ConnectionConfig) -> str:
    """Build a libpq connection string from config fields."""
    parts: list[str] = []
    if config.host is not None:
        parts.append(f"host={config.host}")
    if config.port is not None:
        parts.append(f"port={config.port}")
    if config.user is not None:
        parts.append(f"user={config.user}")
    if config.password is not None:
        parts.append(f"password={config.password}")
    parts.append(f"dbname={config.database}")
    return " ".join(parts)


class PostgresqlAdapter:
    """PostgreSQL adapter using psycopg (v3+).

    The isolation level is stored on the psycopg connection and used by the
    ``BEGIN`` psycopg issues once a transaction is opened.
    """

    @property
    def backend(self) -> DatabaseBackend:
        return DatabaseBackend.POSTGRESQL

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
        return True

    def connect(self, config: ConnectionConfig) -> Any:
        import psycopg

        return psycopg.connect(_build_conninfo(config), autocommit=True, **config.extra)

    def execute(self, connection: Any, sql: str, params: Sequence[Any]) -> Any:
        # An empty tuple still routes through psycopg's placeholder parser,
        # which turns %% back into %
        return connection.execute(sql, tuple(params))

    def get_isolation_level(self, connection: Any) -> IsolationLevel | None:
        level = connection.isolation_level
        if level is None:
            return None
        return IsolationLevel[level.name]

    def set_isolation_level(self, connection: Any, level: IsolationLevel) -> None:
        import psycopg

        connection.isolation_level = psycopg.IsolationLevel[level.name]

    def begin(self, connection: Any) -> None:
        connection.autocommit = False

    def commit(self, connection: Any) -> None:
        connection.commit()
        connection.autocommit = True

    def rollback(self, connection: Any) -> None:
        connection.rollback()
        connection.autocommit = True
