"""Delete mapper."""

from __future__ import annotations

from typing import TypeVar

from row_mapper.core import statements
from row_mapper.mapping.keys import atomic_primary_key, key_columns
from row_mapper.mapping.metadata import entity_metadata
from row_mapper.mappers.base import WriteMapper

T = TypeVar("T")


class DeleteMapper(WriteMapper[T]):
    """Deletes pending instances by primary key, in pool order."""

    def delete(self) -> int:
        """Delete every pending instance and return the affected row count.

        Raises:
            MissingPrimaryKeyError: If the bound type has no primary key.
        """
        cls = self._require_class("delete with")
        metadata = entity_metadata(cls)
        self._require_primary_key(metadata, "DELETE")
        statement = statements.delete(metadata.table, key_columns(cls))
        return self._drain(lambda instance: self._run(statement, atomic_primary_key(instance)))
