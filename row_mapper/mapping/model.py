"""Row-to-entity materialization.

Builds a fresh instance per row with a zero-argument constructor and fills
every mapped field whose column is present in the result set. Column names
match exactly first and case-insensitively second, since some backends
(Oracle) fold unquoted identifiers to upper case.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Generic, TypeVar

from row_mapper.core.exceptions import ConstructionError, ForeignKeySpecError
from row_mapper.mapping.coercion import coerce_value
from row_mapper.mapping.keys import key_columns
from row_mapper.mapping.metadata import ColumnBinding, entity_metadata, write_field
from row_mapper.mapping.protocol import ReferenceResolver

T = TypeVar("T")

logger = logging.getLogger(__name__)


class _ColumnIndex:
    """Resolves requested column names against result-set columns."""

    def __init__(self, columns: Iterable[str]) -> None:
        self._exact = set(columns)
        self._folded: dict[str, str] = {}
        for name in self._exact:
            self._folded.setdefault(name.lower(), name)

    def resolve(self, name: str) -> str | None:
        if name in self._exact:
            return name
        return self._folded.get(name.lower())


class EntityMapper(Generic[T]):
    """Materializes result rows into instances of a mapped entity.

    Args:
        target_class: Mapped entity type; must be constructible without
            arguments.
        resolve_reference: Lookup used to dereference foreign keys. Without
            one, reference fields are left untouched.
    """

    def __init__(
        self,
        target_class: type[T],
        resolve_reference: ReferenceResolver | None = None,
    ) -> None:
        self._target_class = target_class
        self._metadata = entity_metadata(target_class)
        self._resolve_reference = resolve_reference

    def map_one(self, row: Mapping[str, Any], *, use_foreign_keys: bool = True) -> T:
        """Map a single row to a target_class instance."""
        return self._map(row, _ColumnIndex(row), use_foreign_keys)

    def map_many(
        self, rows: list[dict[str, Any]], *, use_foreign_keys: bool = True
    ) -> list[T]:
        """Map all rows, reading the column names once."""
        if not rows:
            return []
        index = _ColumnIndex(rows[0])
        return [self._map(row, index, use_foreign_keys) for row in rows]

    def _map(self, row: Mapping[str, Any], index: _ColumnIndex, use_foreign_keys: bool) -> T:
        instance = self._construct()
        for binding in self._metadata.columns:
            if binding.is_reference:
                if use_foreign_keys:
                    self._dereference(instance, binding, row, index)
                continue

            column = index.resolve(binding.value_column)
            if column is None:
                continue
            value = coerce_value(
                row[column],
                binding.annotation,
                owner=self._target_class.__name__,
                field=binding.field,
            )
            write_field(instance, binding, value)
        return instance

    def _construct(self) -> T:
        try:
            return self._target_class()
        except Exception as e:
            raise ConstructionError(self._target_class.__name__, str(e)) from e

    def _dereference(
        self,
        instance: T,
        binding: ColumnBinding,
        row: Mapping[str, Any],
        index: _ColumnIndex,
    ) -> None:
        """Replace a foreign key in *row* by the entity it references.

        Leaves the field unset when the row lacks any column the key needs.
        """
        target = binding.target
        assert target is not None

        if not entity_metadata(target).table_declared:
            write_field(instance, binding, None)
            return

        key_values: dict[str, Any] = {}
        if binding.fkeys:
            for pair in binding.fkeys:
                column = index.resolve(pair.local)
                if column is None:
                    logger.debug(
                        "Skipping %s.%s: column '%s' not in result set",
                        self._target_class.__name__,
                        binding.field,
                        pair.local,
                    )
                    return
                key_values[pair.target] = row[column]
        else:
            column = index.resolve(binding.column)
            if column is None:
                return
            target_key = key_columns(target)
            if len(target_key) != 1:
                raise ForeignKeySpecError(
                    "",
                    f"field '{binding.field}' references {target.__name__} by a "
                    f"{len(target_key)}-column key; declare fkeys",
                )
            key_values[target_key[0]] = row[column]

        if self._resolve_reference is None:
            return
        write_field(instance, binding, self._resolve_reference(target, key_values))
