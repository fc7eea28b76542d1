"""Entity mapping DSL builder.

Provides a fluent builder that registers column bindings for plain classes
which cannot carry dataclass field metadata::

    (
        mapped(User, table="Person")
        .column("username", pkey=True)
        .column("name", "firstName")
        .column("job", fkeys="idJob:id", target=Job)
        .build()
    )
"""

from __future__ import annotations

import inspect
import typing
from typing import Any

from row_mapper.core.exceptions import (
    CyclicKeyError,
    ForeignKeySpecError,
    PlanCompilationError,
    UnmappedEntityError,
)
from row_mapper.mapping.keys import key_columns
from row_mapper.mapping.metadata import (
    ColumnBinding,
    EntityMetadata,
    parse_foreign_keys,
    register_entity,
    resolve_target,
    unregister_entity,
)


def _constructible_without_arguments(cls: type) -> bool:
    """Check that cls() binds, without calling it."""
    try:
        sig = inspect.signature(cls)
    except (ValueError, TypeError):
        return True
    try:
        sig.bind()
    except TypeError:
        return False
    return True


def _annotations(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError):
        return {}


def mapped(entity_class: type, table: str | None = None) -> EntityMappingBuilder:
    """Entry point for the entity mapping DSL.

    Args:
        entity_class: The class to map.
        table: Table name. When omitted the entity is mapped to a table
            named after the class but counts as undeclared, so foreign keys
            pointing at it are not dereferenced.

    Returns:
        A builder for chaining column declarations.
    """
    return EntityMappingBuilder(entity_class, table)


class EntityMappingBuilder:
    """Fluent builder for entity mapping definitions."""

    def __init__(self, entity_class: type, table: str | None) -> None:
        self._entity_class = entity_class
        self._table = table
        self._columns: list[dict[str, Any]] = []

    def column(
        self,
        attr_name: str,
        column_name: str | None = None,
        *,
        pkey: bool = False,
        has_default: bool = False,
        fkeys: str = "",
        target: type | str | None = None,
        not_null: bool = False,
        annotation: Any = None,
    ) -> EntityMappingBuilder:
        """Map one attribute. Arguments mirror :func:`~row_mapper.mapping.metadata.column`."""
        self._columns.append(
            {
                "attr_name": attr_name,
                "column_name": column_name or attr_name,
                "pkey": pkey,
                "has_default": has_default,
                "fkeys": fkeys,
                "target": target,
                "not_null": not_null,
                "annotation": annotation,
            }
        )
        return self

    def build(self) -> EntityMetadata:
        """Compile, validate and register the mapping.

        Raises:
            PlanCompilationError: If the mapping is empty or inconsistent.
            CyclicKeyError: If primary keys reference each other in a cycle.
            ForeignKeySpecError: If a referenced key cannot be stored locally.
        """
        cls = self._entity_class
        if not self._columns:
            raise PlanCompilationError(f"{cls.__name__} must map at least one column")
        if not _constructible_without_arguments(cls):
            raise PlanCompilationError(
                f"{cls.__name__} must be constructible without arguments to be materialized"
            )

        hints = _annotations(cls)
        seen_attrs: set[str] = set()
        seen_columns: set[str] = set()
        bindings: list[ColumnBinding] = []
        for spec in self._columns:
            attr_name = spec["attr_name"]
            if attr_name in seen_attrs:
                raise PlanCompilationError(f"Attribute '{attr_name}' mapped more than once")
            if spec["column_name"] in seen_columns:
                raise PlanCompilationError(
                    f"Column '{spec['column_name']}' mapped more than once"
                )
            seen_attrs.add(attr_name)
            seen_columns.add(spec["column_name"])

            bindings.append(
                ColumnBinding(
                    field=attr_name,
                    column=spec["column_name"],
                    pkey=spec["pkey"],
                    has_default=spec["has_default"],
                    not_null=spec["not_null"],
                    fkeys=parse_foreign_keys(spec["fkeys"]),
                    target=resolve_target(cls, spec["target"]),
                    annotation=spec["annotation"] or hints.get(attr_name),
                )
            )

        metadata = EntityMetadata(
            entity=cls,
            table=self._table or cls.__name__,
            table_declared=self._table is not None,
            columns=tuple(bindings),
        )
        register_entity(metadata)
        try:
            key_columns(cls)
        except UnmappedEntityError:
            # key target not mapped yet, checked on first use
            pass
        except (CyclicKeyError, ForeignKeySpecError):
            unregister_entity(cls)
            raise
        return metadata
