"""Mapper protocols.

Row mappers turn result rows (column name -> value dicts) into objects.
Reference resolvers fetch the entity a foreign key points at.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, TypeVar

T = TypeVar("T")


class Mapper(Protocol[T]):
    """Base row mapper protocol."""

    def map_one(self, row: Mapping[str, Any], *, use_foreign_keys: bool = True) -> T:
        """Map a single row dict to a target object."""
        ...

    def map_many(
        self, rows: list[dict[str, Any]], *, use_foreign_keys: bool = True
    ) -> list[T]:
        """Map multiple row dicts to a list of target objects."""
        ...


class ReferenceResolver(Protocol):
    """Looks up a referenced entity by target column values."""

    def __call__(self, target: type, key_values: Mapping[str, Any]) -> Any | None:
        """Return the matching entity, or None when absent."""
        ...
