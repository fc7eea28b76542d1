"""Query mapper: raw SELECT statements to entities or plain mappings."""

from __future__ import annotations

from typing import Any, Self, TypeVar

from row_mapper.core.connection import rows_to_dicts
from row_mapper.core.statements import select_by_key
from row_mapper.mapping.keys import atomic_primary_key
from row_mapper.mapping.metadata import entity_metadata
from row_mapper.mapping.model import EntityMapper
from row_mapper.mappers.base import BaseMapper

T = TypeVar("T")


class QueryMapper(BaseMapper[T]):
    """Runs a query and materializes its rows.

    Example::

        users = (
            QueryMapper(conn)
            .define_class(User)
            .create_query("SELECT * FROM Person WHERE username = ?")
            .define_parameters("juanf")
            .fetch_all()
        )

    With ``use_foreign_keys`` set, every entity-typed reference is replaced
    by the referenced row, fetched by key. Referenced rows are loaded one
    level deep.
    """

    def create_query(self, sql: str) -> Self:
        """Prepare a raw ``?``-parameterized SELECT."""
        self._prepare(sql)
        return self

    def fetch_all(self, use_foreign_keys: bool = True) -> list[T]:
        """All rows of the prepared query as bound-type instances."""
        cls = self._require_class("fetch from")
        rows = self._fetch_rows()
        return self._entity_mapper(cls).map_many(rows, use_foreign_keys=use_foreign_keys)

    def find_first(self, use_foreign_keys: bool = True) -> T | None:
        """First row of the prepared query, or None when it returns nothing."""
        cls = self._require_class("fetch from")
        rows = self._fetch_rows()
        if not rows:
            return None
        return self._entity_mapper(cls).map_one(rows[0], use_foreign_keys=use_foreign_keys)

    def get(self, instance: T, use_foreign_keys: bool = True) -> T | None:
        """Reload *instance* by its primary key.

        Replaces any prepared statement with a select on the key columns.
        """
        cls = self._require_class("fetch from")
        metadata = entity_metadata(cls)
        self._require_primary_key(metadata, "SELECT")

        key = atomic_primary_key(instance)
        statement = select_by_key(metadata.table, tuple(key))
        self._prepare(statement.sql)
        self._params = statement.bind(key)
        return self.find_first(use_foreign_keys=use_foreign_keys)

    def fetch_mappings(self) -> list[dict[str, Any]]:
        """Rows of the prepared query as column name -> value dicts.

        Needs no bound type.
        """
        return self._fetch_rows()

    def _fetch_rows(self) -> list[dict[str, Any]]:
        sql = self._require_statement("fetch from")
        return rows_to_dicts(self._execute(sql, self._params))

    def _entity_mapper(self, cls: type[T]) -> EntityMapper[T]:
        return EntityMapper(cls, self._lookup)
