"""Insertion mapper."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

from row_mapper.core import statements
from row_mapper.mapping.atomic import DEFAULT
from row_mapper.mapping.foreign_keys import reference_columns, reference_key_columns
from row_mapper.mapping.metadata import EntityMetadata, entity_metadata, read_field
from row_mapper.mappers.base import WriteMapper

T = TypeVar("T")


def insertion_values(instance: Any, metadata: EntityMetadata) -> dict[str, Any]:
    """Column name -> value for inserting *instance*.

    Direct fields holding DEFAULT, or None on a has-default column, insert
    the column default. Reference fields contribute their flattened key
    columns, nothing when unset.
    """
    values: dict[str, Any] = {}
    for binding in metadata.columns:
        value = read_field(instance, binding)
        if binding.target is None:
            use_default = value is DEFAULT or (binding.has_default and value is None)
            values[binding.column] = DEFAULT if use_default else value
        elif value is DEFAULT or (binding.has_default and value is None):
            values.update(dict.fromkeys(reference_key_columns(binding), DEFAULT))
        else:
            values.update(reference_columns(binding, value))
    return values


class InsertionMapper(WriteMapper[T]):
    """Inserts pending instances, one INSERT per instance in pool order."""

    def insert(self) -> int:
        """Insert every pending instance and return the affected row count."""
        metadata = entity_metadata(self._require_class("insert with"))
        default_keyword = self._connection.supports_default_keyword

        def write(instance: T) -> int:
            values = insertion_values(instance, metadata)
            statement = statements.insert(
                metadata.table, values, default_keyword=default_keyword
            )
            return self._run(statement, values)

        return self._drain(write)

    def custom_insertion(
        self,
        values: Mapping[str, Any] | Sequence[Mapping[str, Any]],
        table: str,
    ) -> int:
        """Insert hand-built column maps into *table*.

        Maps may hold DEFAULT. Needs no bound type and leaves the pool alone.
        """
        rows = [values] if isinstance(values, Mapping) else list(values)
        default_keyword = self._connection.supports_default_keyword
        total = 0
        for row in rows:
            statement = statements.insert(table, row, default_keyword=default_keyword)
            total += self._run(statement, row)
        return total
