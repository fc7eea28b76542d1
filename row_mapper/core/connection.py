"""Connection configuration and the connection collaborator.

ConnectionConfig is a Pydantic model for type-safe connection config.
Connection wraps a raw DB-API connection together with the adapter that
knows its dialect; mappers only ever talk to a Connection. ConnectionManager
opens and closes connections from a ConnectionConfig.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

from pydantic import BaseModel

from row_mapper.core.enums import DatabaseBackend, IsolationLevel
from row_mapper.core.exceptions import AdapterError, ConnectionError, StatementError
from row_mapper.core.params import normalize_placeholders

logger = logging.getLogger(__name__)


class ConnectionConfig(BaseModel):
    """Configuration for database connections."""

    driver: str
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str
    isolation_level: IsolationLevel | None = None
    extra: dict[str, Any] = {}


# Adapter module mapping: driver name -> (module_path, class_name)
_ADAPTER_MAP: dict[str, tuple[str, str]] = {
    DatabaseBackend.SQLITE.value: ("row_mapper.adapters.sqlite", "SqliteAdapter"),
    DatabaseBackend.POSTGRESQL.value: ("row_mapper.adapters.postgresql", "PostgresqlAdapter"),
    DatabaseBackend.MYSQL.value: ("row_mapper.adapters.mysql", "MysqlAdapter"),
    DatabaseBackend.ORACLE.value: ("row_mapper.adapters.oracle", "OracleAdapter"),
}


def _load_adapter(driver: str | DatabaseBackend) -> Any:
    """Load an adapter by driver name."""
    driver_lower = (driver.value if isinstance(driver, DatabaseBackend) else driver).lower()
    if driver_lower not in _ADAPTER_MAP:
        raise AdapterError(f"Unsupported database driver: {driver}")

    module_path, cls_name = _ADAPTER_MAP[driver_lower]
    try:
        module = importlib.import_module(module_path)
        return getattr(module, cls_name)()
    except (ImportError, AttributeError) as e:
        raise AdapterError(f"Failed to load adapter for '{driver}': {e}") from e


def column_names(cursor: Any) -> list[str]:
    """Result-set column names in select order, empty for non-queries."""
    if cursor.description is None:
        return []
    return [desc[0] for desc in cursor.description]


def rows_to_dicts(cursor: Any) -> list[dict[str, Any]]:
    """Convert cursor results to list of dicts.

    Handles both tuple-like rows and dict-like rows from different adapters.
    """
    columns = column_names(cursor)
    if not columns:
        return []
    rows = cursor.fetchall()
    if not rows:
        return []

    # Check if rows are already dict-like (e.g., psycopg dict_row, MySQL dict cursor)
    if isinstance(rows[0], dict):
        return [dict(row) for row in rows]

    # Tuple-like rows, zip with columns
    return [dict(zip(columns, row, strict=True)) for row in rows]


class Connection:
    """A live database connection as seen by the mappers.

    The connection never opens or commits transactions on its own. Adapters
    open raw connections in autocommit mode, so every statement commits
    unless the caller brackets work with :class:`TransactionManager`.
    """

    def __init__(self, raw: Any, adapter: Any) -> None:
        self._raw = raw
        self._adapter = adapter

    @classmethod
    def wrap(cls, raw: Any, driver: str | DatabaseBackend) -> Connection:
        """Adopt a caller-supplied DB-API connection.

        The caller keeps ownership of the raw connection and its
        transaction mode.
        """
        return cls(raw, _load_adapter(driver))

    @property
    def raw(self) -> Any:
        return self._raw

    @property
    def adapter(self) -> Any:
        return self._adapter

    @property
    def backend(self) -> DatabaseBackend:
        return self._adapter.backend  # type: ignore[no-any-return]

    @property
    def supports_default_keyword(self) -> bool:
        """Whether ``DEFAULT`` may appear in VALUES and SET lists."""
        return bool(self._adapter.supports_default_keyword)

    def execute(self, sql: str, params: Sequence[Any] = ()) -> Any:
        """Execute a ``?``-parameterized statement and return the cursor."""
        driver_sql = normalize_placeholders(
            sql, self._adapter.paramstyle, escape_percent=self._adapter.escapes_percent
        )
        logger.debug("Executing SQL (%d params): %s", len(params), sql)
        try:
            return self._adapter.execute(self._raw, driver_sql, tuple(params))
        except Exception as e:
            raise StatementError(sql, str(e)) from e

    # --- Isolation level ---

    def supports_isolation_level(self, level: IsolationLevel) -> bool:
        """Capability check against the backend's supported levels."""
        return level in self._adapter.supported_isolation_levels

    @property
    def isolation_level(self) -> IsolationLevel | None:
        """Current isolation level, or None when the server default applies."""
        try:
            return self._adapter.get_isolation_level(self._raw)  # type: ignore[no-any-return]
        except Exception as e:
            raise StatementError("<isolation level>", str(e)) from e

    def set_isolation_level(self, level: IsolationLevel) -> None:
        try:
            self._adapter.set_isolation_level(self._raw, level)
        except Exception as e:
            raise StatementError(f"<set isolation level {level.value}>", str(e)) from e

    # --- Transaction primitives ---

    def begin(self) -> None:
        try:
            self._adapter.begin(self._raw)
        except Exception as e:
            raise StatementError("BEGIN", str(e)) from e

    def commit(self) -> None:
        try:
            self._adapter.commit(self._raw)
        except Exception as e:
            raise StatementError("COMMIT", str(e)) from e

    def rollback(self) -> None:
        try:
            self._adapter.rollback(self._raw)
        except Exception as e:
            raise StatementError("ROLLBACK", str(e)) from e

    def close(self) -> None:
        self._raw.close()


class ConnectionManager:
    """Opens connections described by a ConnectionConfig."""

    def __init__(self, config: ConnectionConfig) -> None:
        self.config = config
        self._adapter = _load_adapter(config.driver)

    @property
    def adapter(self) -> Any:
        return self._adapter

    def connect(self) -> Connection:
        """Open a new connection. The caller owns it and must close it."""
        try:
            raw = self._adapter.connect(self.config)
        except Exception as e:
            raise ConnectionError(f"Failed to connect to '{self.config.database}': {e}") from e

        connection = Connection(raw, self._adapter)
        level = self.config.isolation_level
        if level is not None:
            if connection.supports_isolation_level(level):
                connection.set_isolation_level(level)
            else:
                logger.debug(
                    "Isolation level %s not supported by %s, keeping default",
                    level.value,
                    self.config.driver,
                )
        return connection

    @contextmanager
    def get_connection(self) -> Iterator[Connection]:
        """Open a connection as a context manager, closing it on exit."""
        connection = self.connect()
        try:
            yield connection
        finally:
            connection.close()
