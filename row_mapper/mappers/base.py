"""Mapper base classes.

A mapper is bound to one entity type and one shared Connection. It walks a
small state machine::

    unconfigured -> configured -> prepared -> bound -> executed

``define_class`` binds the type, building or setting a statement prepares
it, setting parameters binds it, and executing moves to ``executed``, from
which the mapper can be re-bound and executed again.

Mappers are not thread-safe. Create one per unit of work.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Iterable, Mapping, Sequence
from enum import Enum
from typing import Any, Generic, Self, TypeVar

from row_mapper.core.connection import Connection, rows_to_dicts
from row_mapper.core.enums import IsolationLevel
from row_mapper.core.exceptions import (
    ConfigurationError,
    MapperStateError,
    MissingPrimaryKeyError,
    StatementError,
)
from row_mapper.core.params import coerce_params, count_placeholders
from row_mapper.core.statements import Statement, select_by_key
from row_mapper.mapping.foreign_keys import foreign_key_columns
from row_mapper.mapping.keys import primary_key_fields
from row_mapper.mapping.metadata import ColumnBinding, EntityMetadata, entity_metadata
from row_mapper.mapping.model import EntityMapper

T = TypeVar("T")

logger = logging.getLogger(__name__)


class _MapperState(Enum):
    UNCONFIGURED = "unconfigured"
    CONFIGURED = "configured"
    PREPARED = "prepared"
    BOUND = "bound"
    EXECUTED = "executed"


class BaseMapper(Generic[T]):
    """Shared configuration and ad-hoc statement execution."""

    def __init__(self, connection: Connection) -> None:
        self._connection = connection
        self._target_class: type[T] | None = None
        self._isolation_level: IsolationLevel | None = None
        self._sql: str | None = None
        self._params: tuple[Any, ...] = ()
        self._state = _MapperState.UNCONFIGURED

    @property
    def connection(self) -> Connection:
        return self._connection

    @property
    def state(self) -> str:
        return self._state.value

    @property
    def target_class(self) -> type[T] | None:
        return self._target_class

    @property
    def isolation_level(self) -> IsolationLevel | None:
        """Level applied before each execution, None to leave the connection alone."""
        return self._isolation_level

    def define_class(self, cls: type[T]) -> Self:
        """Bind the entity type this mapper reads or writes.

        Raises:
            UnmappedEntityError: If *cls* carries no column declarations.
        """
        entity_metadata(cls)
        self._target_class = cls
        if self._state == _MapperState.UNCONFIGURED:
            self._state = _MapperState.CONFIGURED
        return self

    def set_isolation_level(self, level: IsolationLevel) -> Self:
        """Request an isolation level for the statements this mapper runs.

        Levels the connection does not support are ignored and the previous
        level is kept.
        """
        if self._connection.supports_isolation_level(level):
            self._isolation_level = level
        else:
            logger.debug(
                "Ignoring isolation level %s: not supported by %s",
                level.value,
                self._connection.backend.value,
            )
        return self

    # --- Ad-hoc statements ---

    def create_update(self, sql: str) -> Self:
        """Prepare a raw ``?``-parameterized write statement."""
        self._prepare(sql)
        return self

    def define_parameters(self, *params: Any) -> Self:
        """Bind positional parameters to the prepared statement."""
        return self.define_parameters_list(params)

    def define_parameters_list(self, params: Sequence[Any] | None) -> Self:
        """Bind a parameter sequence to the prepared statement.

        Raises:
            MapperStateError: If no statement is prepared.
            StatementError: If the count does not match the placeholders.
        """
        sql = self._require_statement("bind parameters to")
        values = coerce_params(params)
        expected = count_placeholders(sql)
        if len(values) != expected:
            raise StatementError(
                sql, f"expected {expected} parameter(s), got {len(values)}"
            )
        self._params = values
        self._state = _MapperState.BOUND
        return self

    def execute_update(self) -> int:
        """Execute the prepared statement and return the affected row count."""
        sql = self._require_statement("execute")
        cursor = self._execute(sql, self._params)
        return _rowcount(cursor)

    # --- Key introspection ---

    def primary_key(self) -> dict[str, ColumnBinding]:
        """Primary key bindings of the bound type, keyed by column."""
        return primary_key_fields(self._require_class("read the primary key of"))

    def foreign_keys(self, instance: T) -> dict[str, Any]:
        """Foreign-key columns of *instance* as column name -> atomic value."""
        return foreign_key_columns(instance)

    # --- Internals ---

    def _prepare(self, sql: str) -> None:
        self._sql = sql
        self._params = ()
        self._state = _MapperState.PREPARED

    def _require_class(self, action: str) -> type[T]:
        if self._target_class is None:
            raise MapperStateError(self._state.value, action)
        return self._target_class

    def _require_statement(self, action: str) -> str:
        if self._sql is None:
            raise MapperStateError(self._state.value, action)
        return self._sql

    def _require_primary_key(self, metadata: EntityMetadata, operation: str) -> None:
        if not metadata.primary_key:
            raise MissingPrimaryKeyError(metadata.table, operation)

    def _configure_connection(self) -> None:
        level = self._isolation_level
        if level is None:
            return
        if self._connection.isolation_level != level:
            self._connection.set_isolation_level(level)

    def _execute(self, sql: str, params: Sequence[Any]) -> Any:
        self._configure_connection()
        cursor = self._connection.execute(sql, params)
        self._state = _MapperState.EXECUTED
        return cursor

    def _run(self, statement: Statement, values: Mapping[str, Any]) -> int:
        """Bind *statement* from *values*, execute it and return its row count."""
        self._sql = statement.sql
        self._params = statement.bind(values)
        self._state = _MapperState.BOUND
        return _rowcount(self._execute(statement.sql, self._params))

    def _lookup(self, target: type, key_values: Mapping[str, Any]) -> Any | None:
        """Fetch the *target* entity whose key columns equal *key_values*.

        Types without a table declaration, and keys holding a NULL, yield None.
        The fetched entity's own references are not followed.
        """
        metadata = entity_metadata(target)
        if not metadata.table_declared:
            return None
        if not key_values or any(value is None for value in key_values.values()):
            return None

        statement = select_by_key(metadata.table, tuple(key_values))
        cursor = self._connection.execute(statement.sql, statement.bind(key_values))
        rows = rows_to_dicts(cursor)
        if not rows:
            return None
        return EntityMapper(target).map_one(rows[0], use_foreign_keys=False)


class WriteMapper(BaseMapper[T]):
    """Mapper that accumulates instances and writes them one statement each.

    Pool order is execution order. Executing consumes the pool: an item is
    removed once its statement succeeds, so a failure leaves the failing
    item and everything after it pending.
    """

    def __init__(self, connection: Connection) -> None:
        super().__init__(connection)
        self._pool: deque[T] = deque()

    @property
    def pending(self) -> tuple[T, ...]:
        return tuple(self._pool)

    def add(self, instance: T) -> Self:
        """Queue *instance* for the next write."""
        cls = self._require_class("add to")
        if not isinstance(instance, cls):
            raise ConfigurationError(
                f"Cannot add {type(instance).__name__} to a mapper bound to {cls.__name__}"
            )
        self._pool.append(instance)
        return self

    def add_all(self, instances: Iterable[T]) -> Self:
        """Queue every instance of *instances*, in order."""
        for instance in instances:
            self.add(instance)
        return self

    def clear(self) -> None:
        """Drop all pending instances."""
        self._pool.clear()

    def _drain(self, write: Callable[[T], int]) -> int:
        total = 0
        while self._pool:
            total += write(self._pool[0])
            self._pool.popleft()
        return total


def _rowcount(cursor: Any) -> int:
    # DB-API reports -1 when the count is unknown
    count = getattr(cursor, "rowcount", -1)
    return count if count is not None and count > 0 else 0
