"""Primary key resolution.

A primary key field may itself hold a mapped entity; its key is then
flattened down to the atomic columns of the referenced entity's key, named
after the outer field's column (or the local columns of its foreign-key
spec when the referenced key has several columns).
"""

from __future__ import annotations

from typing import Any

from row_mapper.core.exceptions import ConfigurationError, CyclicKeyError, ForeignKeySpecError
from row_mapper.mapping.atomic import is_atomic_value
from row_mapper.mapping.metadata import (
    ColumnBinding,
    entity_metadata,
    format_foreign_keys,
    is_entity,
    read_field,
)

# Flattened key shape per type
_KEY_SHAPES: dict[type, tuple[str, ...]] = {}


def clear_key_cache() -> None:
    """Forget memoized key shapes (after entity registration)."""
    _KEY_SHAPES.clear()


def primary_key_fields(cls: type) -> dict[str, ColumnBinding]:
    """Declared primary key bindings of *cls*, keyed by column name."""
    return {binding.column: binding for binding in entity_metadata(cls).primary_key}


def key_columns(cls: type) -> tuple[str, ...]:
    """Flattened primary key column names of *cls*.

    Raises:
        CyclicKeyError: If primary keys reference each other in a cycle.
        ForeignKeySpecError: If a composite referenced key cannot be
            mapped onto local columns.
    """
    return _key_columns(cls, ())


def _key_columns(cls: type, path: tuple[type, ...]) -> tuple[str, ...]:
    if cls in path:
        raise CyclicKeyError([t.__name__ for t in (*path, cls)])
    cached = _KEY_SHAPES.get(cls)
    if cached is not None:
        return cached

    columns: list[str] = []
    for binding in entity_metadata(cls).primary_key:
        if binding.is_reference:
            assert binding.target is not None
            inner = _key_columns(binding.target, (*path, cls))
            columns.extend(outer_key_columns(binding, inner))
        else:
            columns.append(binding.value_column)

    shape = tuple(columns)
    _KEY_SHAPES[cls] = shape
    return shape


def outer_key_columns(binding: ColumnBinding, inner: tuple[str, ...]) -> list[str]:
    """Names under which a referenced key's columns are stored locally."""
    if binding.fkeys:
        translate = {pair.target: pair.local for pair in binding.fkeys}
        missing = [name for name in inner if name not in translate]
        if missing:
            raise ForeignKeySpecError(
                format_foreign_keys(binding.fkeys),
                f"no local column for referenced key column(s) {missing}",
            )
        return [translate[name] for name in inner]
    if len(inner) != 1:
        raise ForeignKeySpecError(
            "",
            f"field '{binding.field}' references a {len(inner)}-column key; "
            "declare fkeys to name the local columns",
        )
    return [binding.column]


def atomic_primary_key(instance: Any) -> dict[str, Any]:
    """Primary key of *instance* as column name -> atomic value.

    Non-atomic key values are replaced by their own atomic key, recursively.

    Raises:
        CyclicKeyError: If the instance graph loops back through primary keys.
        ConfigurationError: If a key value is neither atomic nor an entity.
    """
    return _atomic_key(instance, ())


def _atomic_key(instance: Any, path: tuple[type, ...]) -> dict[str, Any]:
    cls = type(instance)
    if cls in path:
        raise CyclicKeyError([t.__name__ for t in (*path, cls)])

    result: dict[str, Any] = {}
    for binding in entity_metadata(cls).primary_key:
        value = read_field(instance, binding)

        if is_atomic_value(value):
            if binding.is_reference:
                assert binding.target is not None
                columns = outer_key_columns(binding, key_columns(binding.target))
                if value is None:
                    result.update(dict.fromkeys(columns, None))
                    continue
                if len(columns) != 1:
                    raise ForeignKeySpecError(
                        format_foreign_keys(binding.fkeys),
                        f"a single value cannot fill key columns {columns}",
                    )
                result[columns[0]] = value
            else:
                result[binding.value_column] = value
            continue

        if not is_entity(type(value)):
            raise ConfigurationError(
                f"Key field {cls.__name__}.{binding.field} holds a {type(value).__name__}, "
                "which is neither an atomic type nor a mapped entity"
            )
        inner = _atomic_key(value, (*path, cls))
        outer = outer_key_columns(binding, tuple(inner))
        result.update(zip(outer, inner.values(), strict=True))

    return result
