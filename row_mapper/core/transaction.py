"""Transaction management.

Mappers run every statement in autocommit mode. TransactionManager
brackets a unit of work on a shared Connection so that a whole pending
pool commits or rolls back together. Commits on success, rolls back on
exception.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from row_mapper.core.connection import Connection
from row_mapper.core.exceptions import TransactionStateError


class _TxState(Enum):
    IDLE = "idle"
    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class TransactionManager:
    """Synchronous transaction context manager."""

    def __init__(self, connection: Connection) -> None:
        self._connection = connection
        self._state = _TxState.IDLE

    @property
    def connection(self) -> Connection:
        return self._connection

    @property
    def state(self) -> str:
        return self._state.value

    def __enter__(self) -> TransactionManager:
        if self._state != _TxState.IDLE:
            raise TransactionStateError(self._state.value, "begin")
        self._connection.begin()
        self._state = _TxState.ACTIVE
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        if self._state == _TxState.ACTIVE:
            if exc_type is not None:
                self._connection.rollback()
                self._state = _TxState.ROLLED_BACK
            else:
                self._connection.commit()
                self._state = _TxState.COMMITTED

    def commit(self) -> None:
        """Explicitly commit the transaction."""
        if self._state != _TxState.ACTIVE:
            raise TransactionStateError(self._state.value, "commit")
        self._connection.commit()
        self._state = _TxState.COMMITTED

    def rollback(self) -> None:
        """Explicitly rollback the transaction."""
        if self._state != _TxState.ACTIVE:
            raise TransactionStateError(self._state.value, "rollback")
        self._connection.rollback()
        self._state = _TxState.ROLLED_BACK
