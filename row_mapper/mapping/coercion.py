"""Coercion of database values to declared field types.

Drivers return what the wire gives them: SQLite hands back timestamps as
text and booleans as integers, Oracle returns every number as a float or
Decimal. Values are validated against the field annotation with a Pydantic
TypeAdapter in lax mode, which performs those conversions.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError

from row_mapper.core.exceptions import CoercionError
from row_mapper.mapping.atomic import Char


@lru_cache(maxsize=512)
def _adapter_for(annotation: Any) -> TypeAdapter[Any] | None:
    """TypeAdapter for an annotation, None when Pydantic cannot build one."""
    try:
        return TypeAdapter(annotation)
    except (PydanticSchemaGenerationError, TypeError):
        return None


def coerce_value(value: Any, annotation: Any, *, owner: str, field: str) -> Any:
    """Convert *value* to *annotation*, returning it unchanged when no
    conversion applies.

    Raises:
        CoercionError: If the value cannot represent the declared type.
    """
    if value is None or annotation is None or annotation is Any:
        return value
    if isinstance(annotation, type) and type(value) is annotation:
        return value
    if annotation is Char or annotation == (Char | None):
        return _to_char(value, owner=owner, field=field)

    try:
        adapter = _adapter_for(annotation)
    except TypeError:
        # Unhashable annotation objects cannot be cached
        adapter = None
    if adapter is None:
        return value

    try:
        return adapter.validate_python(value)
    except ValidationError as e:
        raise CoercionError(owner, field, f"{value!r} is not a valid {annotation!r}: {e}") from e


def _to_char(value: Any, *, owner: str, field: str) -> Char:
    try:
        return Char(str(value))
    except ValueError as e:
        raise CoercionError(owner, field, str(e)) from e
