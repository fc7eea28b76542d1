"""
Example 03: Transactions

Mappers run every statement in autocommit mode. This example groups a
pending pool into one transaction, so a failing insert undoes the whole
batch.
"""

from dataclasses import dataclass

from row_mapper import (
    ConnectionConfig,
    ConnectionManager,
    InsertionMapper,
    IsolationLevel,
    QueryMapper,
    StatementError,
    TransactionManager,
    column,
    table,
)


@table("Job")
@dataclass
class Job:
    id: int | None = column(pkey=True)
    name: str | None = column()


def count_jobs(conn):
    rows = QueryMapper(conn).create_query("SELECT COUNT(*) AS n FROM Job").fetch_mappings()
    return rows[0]["n"]


def main():
    config = ConnectionConfig(driver="sqlite", database=":memory:")
    with ConnectionManager(config).get_connection() as conn:
        conn.execute("CREATE TABLE Job (id INTEGER PRIMARY KEY, name TEXT)")

        print("=== Transactions ===\n")

        mapper = InsertionMapper(conn).define_class(Job)
        mapper.add_all([Job(id=1, name="Engineer"), Job(id=1, name="Duplicate")])

        try:
            with TransactionManager(conn):
                mapper.insert()
        except StatementError as e:
            print(f"Insert failed: {e.detail}")

        print(f"Jobs after rollback: {count_jobs(conn)}")
        print(f"Still pending: {mapper.pending}\n")

        mapper.clear()
        with TransactionManager(conn):
            mapper.add(Job(id=1, name="Engineer")).insert()
        print(f"Jobs after commit: {count_jobs(conn)}\n")

        # Isolation levels are best-effort: SQLite has no READ COMMITTED
        query = QueryMapper(conn).set_isolation_level(IsolationLevel.READ_COMMITTED)
        print(f"Requested READ COMMITTED, mapper keeps: {query.isolation_level}")
        query.set_isolation_level(IsolationLevel.READ_UNCOMMITTED)
        print(f"Requested READ UNCOMMITTED, mapper keeps: {query.isolation_level}")


if __name__ == "__main__":
    main()
