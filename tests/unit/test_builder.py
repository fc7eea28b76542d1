"""Unit tests for the entity mapping DSL builder."""

from __future__ import annotations

import pytest

from row_mapper.core.exceptions import (
    CyclicKeyError,
    ForeignKeySpecError,
    PlanCompilationError,
    UnmappedEntityError,
)
from row_mapper.mapping.builder import EntityMappingBuilder, mapped
from row_mapper.mapping.metadata import entity_metadata


class Department:
    def __init__(self) -> None:
        self.code: str | None = None
        self.title: str | None = None


class Employee:
    def __init__(self) -> None:
        self.badge: int | None = None
        self.name: str | None = None
        self.department: Department | None = None


class NeedsArgs:
    def __init__(self, value: int) -> None:
        self.value = value


class Temp:
    pass


class Seed:
    def __init__(self) -> None:
        self.tree: Tree | None = None


class Tree:
    def __init__(self) -> None:
        self.seed: Seed | None = None


class Loop:
    def __init__(self) -> None:
        self.parent: Loop | None = None


class TestEntityMappingBuilder:
    def test_mapped_returns_builder(self) -> None:
        assert isinstance(mapped(Department, table="Dept"), EntityMappingBuilder)

    def test_build_registers_metadata(self) -> None:
        meta = mapped(Department, table="Dept").column("code", pkey=True).column("title").build()
        assert entity_metadata(Department) is meta
        assert meta.table == "Dept"
        assert meta.table_declared is True
        assert [b.column for b in meta.columns] == ["code", "title"]
        assert [b.field for b in meta.primary_key] == ["code"]

    def test_column_rename_and_reference(self) -> None:
        mapped(Department, table="Dept").column("code", pkey=True).build()
        meta = (
            mapped(Employee, table="Staff")
            .column("badge", pkey=True)
            .column("name", "fullName")
            .column("department", fkeys="deptCode:code", target=Department)
            .build()
        )
        dept = meta.binding("department")
        assert meta.binding("name").column == "fullName"
        assert dept.target is Department
        assert dept.is_reference
        assert dept.fkeys[0].local == "deptCode"

    def test_target_by_name(self) -> None:
        meta = (
            mapped(Employee, table="Staff")
            .column("badge", pkey=True)
            .column("department", target="Department")
            .build()
        )
        assert meta.binding("department").target is Department

    def test_without_table_is_undeclared(self) -> None:
        meta = mapped(Temp).column("x").build()
        assert meta.table == "Temp"
        assert meta.table_declared is False

    def test_empty_mapping_raises(self) -> None:
        with pytest.raises(PlanCompilationError, match="at least one column"):
            mapped(Temp, table="Temp").build()

    def test_requires_zero_argument_constructor(self) -> None:
        with pytest.raises(PlanCompilationError, match="without arguments"):
            mapped(NeedsArgs, table="T").column("value").build()

    def test_duplicate_attribute(self) -> None:
        with pytest.raises(PlanCompilationError, match="Attribute 'x'"):
            mapped(Temp, table="Temp").column("x").column("x", "y").build()

    def test_duplicate_column(self) -> None:
        with pytest.raises(PlanCompilationError, match="Column 'c'"):
            mapped(Temp, table="Temp").column("x", "c").column("y", "c").build()

    def test_malformed_fkeys(self) -> None:
        with pytest.raises(ForeignKeySpecError):
            mapped(Temp, table="Temp").column("x", fkeys="nope").build()

    def test_unresolvable_target(self) -> None:
        with pytest.raises(PlanCompilationError, match="Cannot resolve target"):
            mapped(Temp, table="Temp").column("x", target="NoSuchClass").build()

    def test_self_referencing_key_rejected(self) -> None:
        with pytest.raises(CyclicKeyError, match="Loop -> Loop"):
            mapped(Loop, table="Loop").column("parent", pkey=True, target=Loop).build()
        with pytest.raises(UnmappedEntityError):
            entity_metadata(Loop)

    def test_cycle_rejected_when_closed(self) -> None:
        mapped(Seed, table="Seed").column("tree", pkey=True, target="Tree").build()
        with pytest.raises(CyclicKeyError):
            mapped(Tree, table="Tree").column("seed", pkey=True, target=Seed).build()
        with pytest.raises(UnmappedEntityError):
            entity_metadata(Tree)
