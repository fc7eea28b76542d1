"""RowMapper - metadata-driven object-relational mapping over raw SQL."""

from __future__ import annotations

import logging

from row_mapper.core.connection import Connection, ConnectionConfig, ConnectionManager
from row_mapper.core.enums import DatabaseBackend, IsolationLevel
from row_mapper.core.exceptions import (
    AccessError,
    AdapterError,
    CoercionError,
    ConfigurationError,
    ConnectionError,  # noqa: A004
    ConstructionError,
    CyclicKeyError,
    EmptyAssignmentError,
    ForeignKeySpecError,
    MapperStateError,
    MaterializationError,
    MissingPrimaryKeyError,
    PlanCompilationError,
    RowMapperError,
    StatementError,
    TransactionError,
    TransactionStateError,
    UnmappedEntityError,
)
from row_mapper.core.transaction import TransactionManager
from row_mapper.mappers import DeleteMapper, InsertionMapper, QueryMapper, UpdateMapper
from row_mapper.mapping.atomic import DEFAULT, Char
from row_mapper.mapping.builder import mapped
from row_mapper.mapping.metadata import column, table

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Connection
    "Connection",
    "ConnectionConfig",
    "ConnectionManager",
    # Transaction
    "TransactionManager",
    # Declaration
    "table",
    "column",
    "mapped",
    "Char",
    "DEFAULT",
    # Mappers
    "QueryMapper",
    "InsertionMapper",
    "UpdateMapper",
    "DeleteMapper",
    # Enums
    "DatabaseBackend",
    "IsolationLevel",
    # Exceptions
    "RowMapperError",
    "ConfigurationError",
    "UnmappedEntityError",
    "MissingPrimaryKeyError",
    "EmptyAssignmentError",
    "CyclicKeyError",
    "ForeignKeySpecError",
    "MapperStateError",
    "PlanCompilationError",
    "AccessError",
    "StatementError",
    "MaterializationError",
    "ConstructionError",
    "CoercionError",
    "TransactionError",
    "TransactionStateError",
    "AdapterError",
    "ConnectionError",
]
