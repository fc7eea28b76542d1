"""
Example 02: Insert, Update and Delete

This example writes dataclass instances through the insertion, update and
delete mappers, including database defaults and composite keys.
"""

from dataclasses import dataclass

from row_mapper import (
    DEFAULT,
    ConnectionConfig,
    ConnectionManager,
    DeleteMapper,
    InsertionMapper,
    QueryMapper,
    UpdateMapper,
    column,
    table,
)


@table("Country")
@dataclass
class Country:
    code: str | None = column(pkey=True)
    name: str | None = column()


@table("City")
@dataclass
class City:
    country: Country | None = column("countryCode", pkey=True, target=Country)
    name: str | None = column(pkey=True)
    population: int | None = column()
    status: str | None = column(has_default=True)


def main():
    config = ConnectionConfig(driver="sqlite", database=":memory:")
    with ConnectionManager(config).get_connection() as conn:
        conn.execute("CREATE TABLE Country (code TEXT PRIMARY KEY, name TEXT)")
        conn.execute("""
            CREATE TABLE City (
                countryCode TEXT REFERENCES Country(code),
                name TEXT,
                population INTEGER,
                status TEXT DEFAULT 'active',
                PRIMARY KEY (countryCode, name)
            )
        """)

        print("=== Insert ===\n")
        spain = Country(code="ES", name="Spain")
        InsertionMapper(conn).define_class(Country).add(spain).insert()

        cities = [
            City(country=spain, name="Madrid", population=3_300_000),
            City(country=spain, name="Sevilla", population=680_000, status=DEFAULT),
        ]
        inserted = InsertionMapper(conn).define_class(City).add_all(cities).insert()
        print(f"Inserted {inserted} cities")

        # Hand-built column maps work without a bound class
        InsertionMapper(conn).custom_insertion(
            {"countryCode": "ES", "name": "Bilbao", "population": 345_000}, "City"
        )

        print("\n=== Update ===\n")
        madrid = cities[0]
        madrid.population = 3_400_000
        updated = UpdateMapper(conn).define_class(City).add(madrid).update()
        print(f"Updated {updated} city")

        loaded = QueryMapper(conn).define_class(City).get(City(country=spain, name="Madrid"))
        print(f"Reloaded: {loaded}")

        print("\n=== Delete ===\n")
        deleted = DeleteMapper(conn).define_class(City).add(cities[1]).delete()
        print(f"Deleted {deleted} city")

        rows = QueryMapper(conn).create_query("SELECT * FROM City ORDER BY name").fetch_mappings()
        for row in rows:
            print(f"  {row}")


if __name__ == "__main__":
    main()
