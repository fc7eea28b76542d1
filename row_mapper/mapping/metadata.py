"""Entity metadata: table identity and per-field column bindings.

Entities are declared on dataclasses::

    @table("Person")
    @dataclass
    class User:
        username: str | None = column(pkey=True)
        name: str | None = column("firstName")
        job: Job | None = column(fkeys="idJob:id", target=Job)

or registered for plain classes through :func:`row_mapper.mapping.builder.mapped`.
Only fields carrying a column declaration are mapped; field order carries no
meaning beyond the order of generated column lists.
"""

from __future__ import annotations

import dataclasses
import re
import sys
import typing
from dataclasses import dataclass
from typing import Any, Callable

from row_mapper.core.exceptions import (
    AccessError,
    ForeignKeySpecError,
    PlanCompilationError,
    UnmappedEntityError,
)
from row_mapper.mapping.atomic import is_atomic

_COLUMN_KEY = "row_mapper.column"
_TABLE_ATTR = "__row_mapper_table__"

_PAIR_PATTERN = re.compile(r"(\w+):(\w+)")


@dataclass(frozen=True)
class ForeignKeyPair:
    """One ``local:target`` column pair of a foreign-key spec."""

    local: str
    target: str


def parse_foreign_keys(spec: str) -> tuple[ForeignKeyPair, ...]:
    """Parse ``"local:target[ local2:target2 ...]"`` into column pairs.

    Raises:
        ForeignKeySpecError: If any token is not a ``word:word`` pair or a
            local column repeats.
    """
    pairs: list[ForeignKeyPair] = []
    for token in spec.split():
        match = _PAIR_PATTERN.fullmatch(token)
        if match is None:
            raise ForeignKeySpecError(spec, f"'{token}' is not a 'local:target' pair")
        pairs.append(ForeignKeyPair(local=match.group(1), target=match.group(2)))

    locals_ = [pair.local for pair in pairs]
    if len(set(locals_)) != len(locals_):
        raise ForeignKeySpecError(spec, "local columns must be unique")
    return tuple(pairs)


def format_foreign_keys(pairs: tuple[ForeignKeyPair, ...]) -> str:
    """Inverse of :func:`parse_foreign_keys`."""
    return " ".join(f"{pair.local}:{pair.target}" for pair in pairs)


@dataclass(frozen=True)
class ColumnSpec:
    """Column declaration as written by the user, before resolution."""

    name: str | None = None
    pkey: bool = False
    has_default: bool = False
    fkeys: tuple[ForeignKeyPair, ...] = ()
    target: type | str | None = None
    not_null: bool = False


@dataclass(frozen=True)
class ColumnBinding:
    """Resolved mapping between one object field and its column(s)."""

    field: str
    column: str
    pkey: bool = False
    has_default: bool = False
    not_null: bool = False
    fkeys: tuple[ForeignKeyPair, ...] = ()
    target: type | None = None
    annotation: Any = None

    @property
    def is_reference(self) -> bool:
        """Field holds a nested mapped entity."""
        return self.target is not None and not is_atomic(self.target)

    @property
    def is_scalar_reference(self) -> bool:
        """Field holds a raw foreign-key value of an atomic type."""
        return self.target is not None and is_atomic(self.target)

    @property
    def value_column(self) -> str:
        """Column read or written for a scalar field."""
        if self.is_scalar_reference and self.fkeys:
            return self.fkeys[0].local
        return self.column


@dataclass(frozen=True)
class EntityMetadata:
    """Table name and column bindings of a mapped type."""

    entity: type
    table: str
    table_declared: bool
    columns: tuple[ColumnBinding, ...]

    @property
    def primary_key(self) -> tuple[ColumnBinding, ...]:
        return tuple(binding for binding in self.columns if binding.pkey)

    @property
    def references(self) -> tuple[ColumnBinding, ...]:
        return tuple(binding for binding in self.columns if binding.target is not None)

    def binding(self, field_name: str) -> ColumnBinding:
        for binding in self.columns:
            if binding.field == field_name:
                return binding
        raise KeyError(field_name)


def table(name: str | type | None = None) -> Any:
    """Declare the table of an entity type.

    Usable as ``@table``, ``@table()`` or ``@table("Person")``; the table
    name defaults to the class name.
    """

    def decorator(cls: type) -> type:
        setattr(cls, _TABLE_ATTR, name if isinstance(name, str) else cls.__name__)
        return cls

    if isinstance(name, type):
        return decorator(name)
    return decorator


def declared_table(cls: type) -> str | None:
    """Table name declared directly on *cls*, ignoring base classes."""
    return vars(cls).get(_TABLE_ATTR)


def column(
    name: str | None = None,
    *,
    pkey: bool = False,
    has_default: bool = False,
    fkeys: str = "",
    target: type | str | None = None,
    not_null: bool = False,
    default: Any = None,
    default_factory: Callable[[], Any] | None = None,
) -> Any:
    """Declare a mapped dataclass field.

    Args:
        name: Column name. Defaults to the field name.
        pkey: Field is (part of) the primary key.
        has_default: The column has a database default, used on insert
            when the field value is None.
        fkeys: Foreign-key spec ``"local:target[ local2:target2 ...]"``.
        target: Referenced type. An atomic type marks a raw foreign-key
            value; any other type a nested entity. A string is resolved
            by name in the declaring module when metadata is first built.
        not_null: Documentation only, never enforced.
        default: Field default, None unless given, so that entities stay
            constructible without arguments.
        default_factory: Alternative to ``default``.
    """
    spec = ColumnSpec(
        name=name,
        pkey=pkey,
        has_default=has_default,
        fkeys=parse_foreign_keys(fkeys),
        target=target,
        not_null=not_null,
    )
    metadata = {_COLUMN_KEY: spec}
    if default_factory is not None:
        return dataclasses.field(default_factory=default_factory, metadata=metadata)
    return dataclasses.field(default=default, metadata=metadata)


# Explicitly registered entities (builder path) and derived dataclass metadata
_REGISTERED: dict[type, EntityMetadata] = {}
_DERIVED: dict[type, EntityMetadata] = {}


def register_entity(metadata: EntityMetadata) -> None:
    """Register metadata for a type, replacing any earlier derivation."""
    from row_mapper.mapping.keys import clear_key_cache

    _REGISTERED[metadata.entity] = metadata
    _DERIVED.pop(metadata.entity, None)
    clear_key_cache()


def unregister_entity(cls: type) -> None:
    """Forget explicitly registered metadata for *cls*."""
    from row_mapper.mapping.keys import clear_key_cache

    _REGISTERED.pop(cls, None)
    clear_key_cache()


def entity_metadata(cls: type) -> EntityMetadata:
    """Return the metadata of *cls*, deriving it once per type.

    Raises:
        UnmappedEntityError: If *cls* declares no mapped fields.
    """
    registered = _REGISTERED.get(cls)
    if registered is not None:
        return registered
    cached = _DERIVED.get(cls)
    if cached is not None:
        return cached

    if not (isinstance(cls, type) and dataclasses.is_dataclass(cls)):
        raise UnmappedEntityError(cls)

    hints = _type_hints(cls)
    bindings: list[ColumnBinding] = []
    for dc_field in dataclasses.fields(cls):
        spec = dc_field.metadata.get(_COLUMN_KEY)
        if spec is None:
            continue
        bindings.append(
            ColumnBinding(
                field=dc_field.name,
                column=spec.name or dc_field.name,
                pkey=spec.pkey,
                has_default=spec.has_default,
                not_null=spec.not_null,
                fkeys=spec.fkeys,
                target=resolve_target(cls, spec.target),
                annotation=hints.get(dc_field.name),
            )
        )

    if not bindings:
        raise UnmappedEntityError(cls)

    _check_unique_columns(cls, bindings)
    declared = declared_table(cls)
    metadata = EntityMetadata(
        entity=cls,
        table=declared or cls.__name__,
        table_declared=declared is not None,
        columns=tuple(bindings),
    )
    _DERIVED[cls] = metadata
    return metadata


def is_entity(cls: type) -> bool:
    """Return True if *cls* has resolvable metadata."""
    try:
        entity_metadata(cls)
    except UnmappedEntityError:
        return False
    return True


def resolve_target(owner: type, target: type | str | None) -> type | None:
    """Resolve a target given by name against the owner's module."""
    if target is None or isinstance(target, type):
        return target
    if target == owner.__name__:
        return owner
    namespace = vars(sys.modules[owner.__module__])
    resolved = namespace.get(target)
    if not isinstance(resolved, type):
        raise PlanCompilationError(
            f"Cannot resolve target '{target}' of {owner.__name__} in module {owner.__module__}"
        )
    return resolved


def read_field(instance: Any, binding: ColumnBinding) -> Any:
    """Read a mapped attribute."""
    try:
        return getattr(instance, binding.field)
    except AttributeError as e:
        raise AccessError(type(instance).__name__, binding.field, str(e)) from e


def write_field(instance: Any, binding: ColumnBinding, value: Any) -> None:
    """Assign a mapped attribute."""
    try:
        setattr(instance, binding.field, value)
    except (AttributeError, TypeError) as e:
        raise AccessError(type(instance).__name__, binding.field, str(e)) from e


def _type_hints(cls: type) -> dict[str, Any]:
    """Resolved field annotations, empty when forward references fail."""
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError):
        return {}


def _check_unique_columns(cls: type, bindings: list[ColumnBinding]) -> None:
    seen: set[str] = set()
    for binding in bindings:
        if binding.column in seen:
            raise PlanCompilationError(
                f"{cls.__name__} maps column '{binding.column}' more than once"
            )
        seen.add(binding.column)
