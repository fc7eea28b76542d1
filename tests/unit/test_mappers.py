"""Unit tests for mapper configuration, state and isolation handling."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import pytest

from row_mapper.core.connection import Connection
from row_mapper.core.enums import IsolationLevel
from row_mapper.core.exceptions import (
    ConfigurationError,
    MapperStateError,
    MissingPrimaryKeyError,
    StatementError,
    UnmappedEntityError,
)
from row_mapper.core import statements
from row_mapper.mappers import DeleteMapper, InsertionMapper, QueryMapper, UpdateMapper
from row_mapper.mappers.insertion import insertion_values
from row_mapper.mappers.update import assignment_values
from row_mapper.mapping.atomic import DEFAULT
from row_mapper.mapping.metadata import column, entity_metadata, table


@table("Job")
@dataclass
class Job:
    id: int | None = column(pkey=True)
    name: str | None = column()


@table("Person")
@dataclass
class User:
    username: str | None = column(pkey=True)
    job: Job | None = column(fkeys="idJob:id", target=Job)


@table("Log")
@dataclass
class LogLine:
    message: str | None = column()


class TestMapperState:
    def test_initial_state(self, connection: Connection) -> None:
        mapper: QueryMapper[Job] = QueryMapper(connection)
        assert mapper.state == "unconfigured"
        assert mapper.target_class is None

    def test_lifecycle(self, connection: Connection) -> None:
        mapper: QueryMapper[Job] = QueryMapper(connection)
        mapper.define_class(Job)
        assert mapper.state == "configured"
        mapper.create_query("SELECT ? AS id, ? AS name")
        assert mapper.state == "prepared"
        mapper.define_parameters(1, "Engineer")
        assert mapper.state == "bound"
        assert mapper.fetch_all() == [Job(id=1, name="Engineer")]
        assert mapper.state == "executed"

    def test_reuse_after_execution(self, connection: Connection) -> None:
        mapper = QueryMapper(connection).define_class(Job).create_query("SELECT ? AS id")
        assert mapper.define_parameters(1).find_first() == Job(id=1)
        assert mapper.define_parameters(2).find_first() == Job(id=2)

    def test_define_class_keeps_prepared_statement(self, connection: Connection) -> None:
        mapper: QueryMapper[Job] = QueryMapper(connection).create_query("SELECT 3 AS id")
        assert mapper.define_class(Job).state == "prepared"
        assert mapper.find_first() == Job(id=3)

    def test_fetch_requires_class(self, connection: Connection) -> None:
        mapper: QueryMapper[Job] = QueryMapper(connection).create_query("SELECT 1 AS id")
        with pytest.raises(MapperStateError, match="prepared"):
            mapper.fetch_all()

    def test_fetch_requires_statement(self, connection: Connection) -> None:
        with pytest.raises(MapperStateError):
            QueryMapper(connection).define_class(Job).fetch_all()

    def test_parameters_require_statement(self, connection: Connection) -> None:
        with pytest.raises(MapperStateError):
            QueryMapper(connection).define_parameters(1)

    def test_parameter_count_checked(self, connection: Connection) -> None:
        mapper: QueryMapper[Job] = QueryMapper(connection).create_query("SELECT ? AS id")
        with pytest.raises(StatementError, match="expected 1 parameter"):
            mapper.define_parameters(1, 2)

    def test_define_unmapped_class(self, connection: Connection) -> None:
        with pytest.raises(UnmappedEntityError):
            QueryMapper(connection).define_class(dict)

    def test_fetch_mappings_without_class(self, connection: Connection) -> None:
        rows = QueryMapper(connection).create_query("SELECT 1 AS val").fetch_mappings()
        assert rows == [{"val": 1}]

    def test_find_first_empty(self, connection: Connection) -> None:
        mapper = QueryMapper(connection).define_class(Job)
        assert mapper.create_query("SELECT 1 AS id WHERE 1 = 0").find_first() is None

    def test_driver_error_wrapped(self, connection: Connection) -> None:
        mapper = QueryMapper(connection).create_query("SELECT * FROM missing_table")
        with pytest.raises(StatementError, match="missing_table") as exc_info:
            mapper.fetch_mappings()
        assert exc_info.value.__cause__ is not None


class TestIsolationLevel:
    def test_default_is_none(self, connection: Connection) -> None:
        assert QueryMapper(connection).isolation_level is None

    def test_supported_level_stored(self, connection: Connection) -> None:
        mapper = QueryMapper(connection).set_isolation_level(IsolationLevel.SERIALIZABLE)
        assert mapper.isolation_level is IsolationLevel.SERIALIZABLE

    def test_unsupported_level_ignored(
        self, connection: Connection, caplog: pytest.LogCaptureFixture
    ) -> None:
        mapper = QueryMapper(connection).set_isolation_level(IsolationLevel.SERIALIZABLE)
        with caplog.at_level(logging.DEBUG, logger="row_mapper"):
            mapper.set_isolation_level(IsolationLevel.READ_COMMITTED)
        assert mapper.isolation_level is IsolationLevel.SERIALIZABLE
        assert "Ignoring isolation level READ COMMITTED" in caplog.text

    def test_applied_before_execution(self, connection: Connection) -> None:
        mapper = QueryMapper(connection).set_isolation_level(IsolationLevel.READ_UNCOMMITTED)
        assert connection.isolation_level is IsolationLevel.SERIALIZABLE
        mapper.create_query("SELECT 1 AS val").fetch_mappings()
        assert connection.isolation_level is IsolationLevel.READ_UNCOMMITTED

    def test_no_level_leaves_connection_alone(self, connection: Connection) -> None:
        connection.set_isolation_level(IsolationLevel.READ_UNCOMMITTED)
        QueryMapper(connection).create_query("SELECT 1 AS val").fetch_mappings()
        assert connection.isolation_level is IsolationLevel.READ_UNCOMMITTED


class TestWritePool:
    def test_add_requires_class(self, connection: Connection) -> None:
        with pytest.raises(MapperStateError):
            InsertionMapper(connection).add(Job(id=1))

    def test_add_rejects_other_types(self, connection: Connection) -> None:
        mapper = InsertionMapper(connection).define_class(Job)
        with pytest.raises(ConfigurationError, match="LogLine"):
            mapper.add(LogLine(message="x"))  # type: ignore[arg-type]

    def test_pending_and_clear(self, connection: Connection) -> None:
        mapper = InsertionMapper(connection).define_class(Job)
        mapper.add(Job(id=1)).add_all([Job(id=2), Job(id=3)])
        assert [job.id for job in mapper.pending] == [1, 2, 3]
        mapper.clear()
        assert mapper.pending == ()

    def test_update_requires_primary_key(self, connection: Connection) -> None:
        mapper = UpdateMapper(connection).define_class(LogLine).add(LogLine(message="x"))
        with pytest.raises(MissingPrimaryKeyError, match="UPDATE"):
            mapper.update()

    def test_delete_requires_primary_key(self, connection: Connection) -> None:
        mapper = DeleteMapper(connection).define_class(LogLine).add(LogLine(message="x"))
        with pytest.raises(MissingPrimaryKeyError, match="DELETE"):
            mapper.delete()

    def test_empty_pool_writes_nothing(self, connection: Connection) -> None:
        assert InsertionMapper(connection).define_class(Job).insert() == 0


class TestKeyIntrospection:
    def test_primary_key(self, connection: Connection) -> None:
        keys = QueryMapper(connection).define_class(User).primary_key()
        assert list(keys) == ["username"]

    def test_primary_key_requires_class(self, connection: Connection) -> None:
        with pytest.raises(MapperStateError):
            QueryMapper(connection).primary_key()

    def test_foreign_keys(self, connection: Connection) -> None:
        mapper = QueryMapper(connection).define_class(User)
        assert mapper.foreign_keys(User(username="juanf", job=Job(id=7))) == {"idJob": 7}


class TestAdHocUpdate:
    def test_execute_update(self, connection: Connection) -> None:
        mapper: InsertionMapper[Job] = InsertionMapper(connection)
        mapper.create_update("CREATE TABLE Job (id INTEGER PRIMARY KEY, name TEXT)")
        mapper.execute_update()
        count = (
            mapper.create_update("INSERT INTO Job (id, name) VALUES (?, ?)")
            .define_parameters_list([1, "Engineer"])
            .execute_update()
        )
        assert count == 1
        assert mapper.state == "executed"


class TestDefaultMarker:
    def test_assignment_of_default_reference(self) -> None:
        user = User(username="juanf", job=DEFAULT)  # type: ignore[arg-type]
        assignments = assignment_values(user, entity_metadata(User))
        assert assignments == {"idJob": DEFAULT}

        stmt = statements.update("Person", assignments, ["username"], default_keyword=True)
        assert stmt.sql == "UPDATE Person SET idJob = DEFAULT WHERE username = ?"
        assert stmt.columns == ("username",)

    def test_assignment_of_default_column(self) -> None:
        job = Job(id=1, name=DEFAULT)  # type: ignore[arg-type]
        assert assignment_values(job, entity_metadata(Job)) == {"name": DEFAULT}

    def test_insert_and_update_agree(self) -> None:
        user = User(username="juanf", job=DEFAULT)  # type: ignore[arg-type]
        inserted = insertion_values(user, entity_metadata(User))
        assert inserted["idJob"] is DEFAULT
        assert assignment_values(user, entity_metadata(User))["idJob"] is DEFAULT
