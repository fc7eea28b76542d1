"""Database adapter protocol.

Every adapter module MUST implement this protocol so that mappers see an
identical interface across backends.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from row_mapper.core.connection import ConnectionConfig
from row_mapper.core.enums import DatabaseBackend, IsolationLevel


@runtime_checkable
class SyncAdapter(Protocol):
    """Synchronous database adapter protocol."""

    @property
    def backend(self) -> DatabaseBackend:
        """Backend this adapter speaks to."""
        ...

    @property
    def paramstyle(self) -> str:
        """DB-API placeholder style: 'qmark', 'format' or 'numeric'."""
        ...

    @property
    def supported_isolation_levels(self) -> frozenset[IsolationLevel]:
        """Isolation levels the backend accepts."""
        ...

    @property
    def supports_default_keyword(self) -> bool:
        """Whether the dialect accepts DEFAULT in VALUES and SET lists."""
        ...

    @property
    def escapes_percent(self) -> bool:
        """Whether the driver expects literal ``%`` doubled as ``%%``."""
        ...

    def connect(self, config: ConnectionConfig) -> Any:
        """Open a raw connection in autocommit mode."""
        ...

    def execute(self, connection: Any, sql: str, params: Sequence[Any]) -> Any:
        """Execute SQL and return a cursor-like object."""
        ...

    def get_isolation_level(self, connection: Any) -> IsolationLevel | None:
        """Current isolation level of the connection."""
        ...

    def set_isolation_level(self, connection: Any, level: IsolationLevel) -> None:
        """Apply an isolation level to the connection."""
        ...

    def begin(self, connection: Any) -> None:
        """Leave autocommit and open a transaction."""
        ...

    def commit(self, connection: Any) -> None:
        """Commit and return to autocommit."""
        ...

    def rollback(self, connection: Any) -> None:
        """Roll back and return to autocommit."""
        ...
