"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from row_mapper.core.connection import Connection, ConnectionConfig, ConnectionManager

PERSON_SCHEMA = (
    "CREATE TABLE Job (id INTEGER PRIMARY KEY, name TEXT)",
    "CREATE TABLE Person ("
    "username TEXT PRIMARY KEY, firstName TEXT, passwd TEXT, "
    "idJob INTEGER REFERENCES Job(id))",
)


@pytest.fixture
def sqlite_config() -> ConnectionConfig:
    """SQLite in-memory connection config."""
    return ConnectionConfig(driver="sqlite", database=":memory:")


@pytest.fixture
def connection(sqlite_config: ConnectionConfig) -> Iterator[Connection]:
    """Open in-memory SQLite connection, closed after the test."""
    with ConnectionManager(sqlite_config).get_connection() as conn:
        yield conn


@pytest.fixture
def person_db(connection: Connection) -> Connection:
    """Connection with the Job/Person schema and one row in each table."""
    for ddl in PERSON_SCHEMA:
        connection.execute(ddl)
    connection.execute("INSERT INTO Job (id, name) VALUES (?, ?)", (7, "Engineer"))
    connection.execute(
        "INSERT INTO Person (username, firstName, passwd, idJob) VALUES (?, ?, ?, ?)",
        ("juanf", "Juan", "secret", 7),
    )
    return connection
