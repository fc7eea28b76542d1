"""Mapping layer - entity declarations, keys and row materialization."""

from __future__ import annotations

from row_mapper.mapping.atomic import ATOMIC_TYPES, DEFAULT, Char, is_atomic
from row_mapper.mapping.builder import EntityMappingBuilder, mapped
from row_mapper.mapping.foreign_keys import (
    ForeignKeyPair,
    foreign_key_columns,
    parse_foreign_keys,
    reference_columns,
)
from row_mapper.mapping.keys import atomic_primary_key, key_columns, primary_key_fields
from row_mapper.mapping.metadata import (
    ColumnBinding,
    EntityMetadata,
    column,
    entity_metadata,
    table,
)
from row_mapper.mapping.model import EntityMapper

__all__ = [
    # Declaration
    "table",
    "column",
    "mapped",
    "EntityMappingBuilder",
    # Metadata
    "EntityMetadata",
    "ColumnBinding",
    "ForeignKeyPair",
    "entity_metadata",
    # Atomic values
    "ATOMIC_TYPES",
    "Char",
    "DEFAULT",
    "is_atomic",
    # Keys
    "primary_key_fields",
    "key_columns",
    "atomic_primary_key",
    "parse_foreign_keys",
    "foreign_key_columns",
    "reference_columns",
    # Materialization
    "EntityMapper",
]
