"""Update mapper."""

from __future__ import annotations

from typing import Any, TypeVar

from row_mapper.core import statements
from row_mapper.mapping.atomic import DEFAULT
from row_mapper.mapping.foreign_keys import reference_columns, reference_key_columns
from row_mapper.mapping.keys import atomic_primary_key
from row_mapper.mapping.metadata import EntityMetadata, entity_metadata, read_field
from row_mapper.mappers.base import WriteMapper

T = TypeVar("T")


def assignment_values(
    instance: Any, metadata: EntityMetadata, *, allow_null_values: bool = False
) -> dict[str, Any]:
    """SET list of *instance*: every non-key column, None values only if allowed.

    DEFAULT resets a column, or every key column of a reference, to its
    default.
    """
    assignments: dict[str, Any] = {}
    for binding in metadata.columns:
        if binding.pkey:
            continue
        value = read_field(instance, binding)
        if value is None:
            if allow_null_values:
                assignments.update(dict.fromkeys(reference_key_columns(binding), None))
            continue
        if binding.is_reference and value is DEFAULT:
            assignments.update(dict.fromkeys(reference_key_columns(binding), DEFAULT))
        elif binding.is_reference:
            assignments.update(reference_columns(binding, value))
        else:
            assignments[binding.value_column] = value
    return assignments


class UpdateMapper(WriteMapper[T]):
    """Updates pending instances by primary key, in pool order."""

    def update(self, allow_null_values: bool = False) -> int:
        """Update every pending instance and return the affected row count.

        Args:
            allow_null_values: Write None fields as NULL instead of leaving
                their columns untouched.

        Raises:
            MissingPrimaryKeyError: If the bound type has no primary key.
            EmptyAssignmentError: If an instance has nothing to assign.
        """
        metadata = entity_metadata(self._require_class("update with"))
        self._require_primary_key(metadata, "UPDATE")
        default_keyword = self._connection.supports_default_keyword

        def write(instance: T) -> int:
            assignments = assignment_values(
                instance, metadata, allow_null_values=allow_null_values
            )
            key = atomic_primary_key(instance)
            statement = statements.update(
                metadata.table, assignments, tuple(key), default_keyword=default_keyword
            )
            return self._run(statement, {**assignments, **key})

        return self._drain(write)
