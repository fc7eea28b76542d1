"""
Example 01: Basic Query

This example maps rows of a Person table to a User dataclass and resolves
the referenced Job of each user through its foreign key.
"""

from dataclasses import dataclass
import logging

from row_mapper import ConnectionConfig, ConnectionManager, QueryMapper, column, table


@table("Job")
@dataclass
class Job:
    id: int | None = column(pkey=True)
    name: str | None = column()


@table("Person")
@dataclass
class User:
    username: str | None = column(pkey=True)
    name: str | None = column("firstName")
    password: str | None = column("passwd")
    job: Job | None = column(fkeys="idJob:id", target=Job)


def main():
    # Show every statement the mappers run
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    config = ConnectionConfig(driver="sqlite", database=":memory:")
    with ConnectionManager(config).get_connection() as conn:
        conn.execute("CREATE TABLE Job (id INTEGER PRIMARY KEY, name TEXT)")
        conn.execute("""
            CREATE TABLE Person (
                username TEXT PRIMARY KEY,
                firstName TEXT,
                passwd TEXT,
                idJob INTEGER REFERENCES Job(id)
            )
        """)
        conn.execute("INSERT INTO Job VALUES (1, 'Engineer')")
        conn.execute("INSERT INTO Person VALUES ('juanf', 'Juan', 'secret', 1)")

        print("=== Basic Query ===\n")

        user = (
            QueryMapper(conn)
            .define_class(User)
            .create_query("SELECT * FROM Person WHERE username = ?")
            .define_parameters("juanf")
            .find_first()
        )
        print(f"User: {user}")
        print(f"Job resolved through idJob: {user.job}\n")

        # Without dereferencing the job stays unset
        users = (
            QueryMapper(conn)
            .define_class(User)
            .create_query("SELECT * FROM Person")
            .fetch_all(use_foreign_keys=False)
        )
        print(f"Users without jobs: {users}\n")

        # Plain rows need no bound class
        rows = QueryMapper(conn).create_query("SELECT username, idJob FROM Person").fetch_mappings()
        print(f"Raw rows: {rows}")


if __name__ == "__main__":
    main()
