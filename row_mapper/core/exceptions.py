"""RowMapper exception hierarchy.

All exceptions are RowMapper-specific. Driver exceptions are never raised
to callers directly; they are wrapped in StatementError with the original
chained as ``__cause__``.
"""

from __future__ import annotations


class RowMapperError(Exception):
    """Base exception for all RowMapper errors."""


# --- Configuration ---


class ConfigurationError(RowMapperError):
    """Base for entity declaration and mapper configuration errors."""


class UnmappedEntityError(ConfigurationError):
    """Raised when a type carries no column declarations."""

    def __init__(self, entity: type) -> None:
        self.entity = entity
        super().__init__(
            f"{entity.__name__} is not a mapped entity: declare its fields with column() "
            "or register it with mapped()"
        )


class MissingPrimaryKeyError(ConfigurationError):
    """Raised when a statement needs a WHERE clause but no key columns exist."""

    def __init__(self, table: str, operation: str) -> None:
        self.table = table
        self.operation = operation
        super().__init__(f"Cannot build {operation} for '{table}': no primary key declared")


class EmptyAssignmentError(ConfigurationError):
    """Raised when an UPDATE would have an empty SET list."""

    def __init__(self, table: str) -> None:
        self.table = table
        super().__init__(f"Cannot build UPDATE for '{table}': no updatable columns")


class CyclicKeyError(ConfigurationError):
    """Raised when primary keys reference each other in a cycle."""

    def __init__(self, path: list[str]) -> None:
        self.path = path
        super().__init__(f"Cyclic primary key reference: {' -> '.join(path)}")


class ForeignKeySpecError(ConfigurationError):
    """Raised for malformed or unresolvable foreign-key specs."""

    def __init__(self, spec: str, detail: str) -> None:
        self.spec = spec
        super().__init__(f"Invalid foreign key spec '{spec}': {detail}")


class MapperStateError(ConfigurationError):
    """Raised when a mapper action is invoked in the wrong state."""

    def __init__(self, current_state: str, attempted_action: str) -> None:
        self.current_state = current_state
        self.attempted_action = attempted_action
        super().__init__(f"Cannot {attempted_action} mapper in state '{current_state}'")


class PlanCompilationError(ConfigurationError):
    """Raised when a mapping builder fails validation during build()."""


# --- Access ---


class AccessError(RowMapperError):
    """Raised when a mapped attribute cannot be read or written."""

    def __init__(self, entity: str, field: str, detail: str) -> None:
        self.entity = entity
        self.field = field
        super().__init__(f"Cannot access {entity}.{field}: {detail}")


# --- Execution ---


class StatementError(RowMapperError):
    """Raised when the driver rejects a statement.

    Always carries the driver's message; the driver exception is chained.
    """

    def __init__(self, sql: str, detail: str) -> None:
        self.sql = sql
        self.detail = detail
        super().__init__(f"Statement failed: {detail} [{sql}]")


# --- Materialization ---


class MaterializationError(RowMapperError):
    """Base for result-row to object conversion errors."""


class ConstructionError(MaterializationError):
    """Raised when a mapped type cannot be built without arguments."""

    def __init__(self, target_class: str, detail: str) -> None:
        self.target_class = target_class
        super().__init__(f"Cannot construct {target_class}(): {detail}")


class CoercionError(MaterializationError):
    """Raised when a column value does not fit the declared field type."""

    def __init__(self, target_class: str, field: str, detail: str) -> None:
        self.target_class = target_class
        self.field = field
        super().__init__(f"Cannot assign {target_class}.{field}: {detail}")


# --- Transaction ---


class TransactionError(RowMapperError):
    """Base for transaction errors."""


class TransactionStateError(TransactionError):
    """Raised on invalid transaction state transitions."""

    def __init__(self, current_state: str, attempted_action: str) -> None:
        self.current_state = current_state
        self.attempted_action = attempted_action
        super().__init__(f"Cannot {attempted_action} transaction in state '{current_state}'")


# --- Adapter ---


class AdapterError(RowMapperError):
    """Base for adapter errors."""


class ConnectionError(AdapterError):  # noqa: A001
    """Raised on connection failures."""
