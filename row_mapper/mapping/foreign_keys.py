"""Foreign key resolution.

Flattens the reference fields of an instance into the local columns that
store them. Referenced entities contribute their atomic primary key only;
their own foreign keys are never visited, so resolution goes exactly one
level deep whatever the shape of the object graph.
"""

from __future__ import annotations

from typing import Any

from row_mapper.core.exceptions import ForeignKeySpecError
from row_mapper.mapping.atomic import is_atomic_value
from row_mapper.mapping.keys import atomic_primary_key, key_columns, outer_key_columns
from row_mapper.mapping.metadata import (
    ColumnBinding,
    ForeignKeyPair,
    entity_metadata,
    format_foreign_keys,
    parse_foreign_keys,
    read_field,
)

__all__ = [
    "ForeignKeyPair",
    "foreign_key_columns",
    "parse_foreign_keys",
    "reference_columns",
    "reference_key_columns",
]


def reference_key_columns(binding: ColumnBinding) -> list[str]:
    """Local columns that store a reference field."""
    if binding.is_reference:
        assert binding.target is not None
        return outer_key_columns(binding, key_columns(binding.target))
    return [binding.value_column]


def reference_columns(binding: ColumnBinding, value: Any) -> dict[str, Any]:
    """Flatten one reference field value into its local columns.

    A None value contributes nothing: absent relations leave their columns
    out rather than forcing NULLs.
    """
    if value is None:
        return {}
    if binding.is_scalar_reference:
        return {binding.value_column: value}

    if is_atomic_value(value):
        # Raw key stored in an entity-typed field
        columns = reference_key_columns(binding)
        if len(columns) != 1:
            raise ForeignKeySpecError(
                format_foreign_keys(binding.fkeys),
                f"a single value cannot fill columns {columns}",
            )
        return {columns[0]: value}

    leaves = atomic_primary_key(value)
    outer = outer_key_columns(binding, tuple(leaves))
    return dict(zip(outer, leaves.values(), strict=True))


def foreign_key_columns(instance: Any) -> dict[str, Any]:
    """All foreign-key columns of *instance* as column name -> atomic value."""
    result: dict[str, Any] = {}
    for binding in entity_metadata(type(instance)).references:
        result.update(reference_columns(binding, read_field(instance, binding)))
    return result
