"""Unit tests for the SQL statement builders."""

from __future__ import annotations

import pytest

from row_mapper.core import statements
from row_mapper.core.exceptions import EmptyAssignmentError, MissingPrimaryKeyError
from row_mapper.mapping.atomic import DEFAULT


class TestSelectByKey:
    def test_single_key(self) -> None:
        stmt = statements.select_by_key("Job", ["id"])
        assert stmt.sql == "SELECT * FROM Job WHERE id = ?"
        assert stmt.columns == ("id",)

    def test_composite_key(self) -> None:
        stmt = statements.select_by_key("Line", ["orderId", "lineNo"])
        assert stmt.sql == "SELECT * FROM Line WHERE orderId = ? AND lineNo = ?"

    def test_empty_key_raises(self) -> None:
        with pytest.raises(MissingPrimaryKeyError, match="SELECT"):
            statements.select_by_key("Job", [])


class TestInsert:
    def test_basic(self) -> None:
        values = {"id": 1, "name": "Engineer"}
        stmt = statements.insert("Job", values)
        assert stmt.sql == "INSERT INTO Job (id, name) VALUES (?, ?)"
        assert stmt.bind(values) == (1, "Engineer")

    def test_default_marker_takes_no_slot(self) -> None:
        values = {"a": 1, "b": DEFAULT, "c": 3}
        stmt = statements.insert("t", values)
        assert stmt.sql == "INSERT INTO t (a, b, c) VALUES (?, DEFAULT, ?)"
        assert stmt.columns == ("a", "c")
        assert stmt.bind(values) == (1, 3)

    def test_default_omitted_without_keyword(self) -> None:
        values = {"a": 1, "b": DEFAULT}
        stmt = statements.insert("t", values, default_keyword=False)
        assert stmt.sql == "INSERT INTO t (a) VALUES (?)"

    def test_all_default_without_keyword(self) -> None:
        stmt = statements.insert("t", {"a": DEFAULT}, default_keyword=False)
        assert stmt.sql == "INSERT INTO t DEFAULT VALUES"
        assert stmt.columns == ()

    def test_none_binds_null(self) -> None:
        values = {"a": None}
        stmt = statements.insert("t", values)
        assert stmt.bind(values) == (None,)


class TestUpdate:
    def test_set_then_where_order(self) -> None:
        values = {"firstName": "Juan", "passwd": "x", "username": "juanf"}
        stmt = statements.update("Person", {"firstName": "Juan", "passwd": "x"}, ["username"])
        assert stmt.sql == "UPDATE Person SET firstName = ?, passwd = ? WHERE username = ?"
        assert stmt.bind(values) == ("Juan", "x", "juanf")

    def test_where_count_matches_key_count(self) -> None:
        stmt = statements.update("t", {"v": 1}, ["k1", "k2"])
        where = stmt.sql.split(" WHERE ", 1)[1]
        assert where.count("?") == 2
        assert not where.rstrip().endswith("AND")

    def test_default_assignment(self) -> None:
        stmt = statements.update("t", {"a": DEFAULT, "b": 2}, ["id"])
        assert stmt.sql == "UPDATE t SET a = DEFAULT, b = ? WHERE id = ?"
        assert stmt.columns == ("b", "id")

    def test_missing_key_raises(self) -> None:
        with pytest.raises(MissingPrimaryKeyError):
            statements.update("t", {"a": 1}, [])

    def test_empty_set_raises(self) -> None:
        with pytest.raises(EmptyAssignmentError):
            statements.update("t", {}, ["id"])

    def test_only_default_without_keyword_raises(self) -> None:
        with pytest.raises(EmptyAssignmentError):
            statements.update("t", {"a": DEFAULT}, ["id"], default_keyword=False)


class TestDelete:
    def test_composite_key(self) -> None:
        stmt = statements.delete("t", ["k1", "k2"])
        assert stmt.sql == "DELETE FROM t WHERE k1 = ? AND k2 = ?"
        assert stmt.columns == ("k1", "k2")
        assert str(stmt) == stmt.sql

    def test_missing_key_raises(self) -> None:
        with pytest.raises(MissingPrimaryKeyError, match="DELETE"):
            statements.delete("t", [])
