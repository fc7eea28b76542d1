"""Unit tests for primary key resolution."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

import pytest

from row_mapper.core.exceptions import (
    ConfigurationError,
    CyclicKeyError,
    ForeignKeySpecError,
    UnmappedEntityError,
)
from row_mapper.mapping.keys import (
    atomic_primary_key,
    clear_key_cache,
    key_columns,
    primary_key_fields,
)
from row_mapper.mapping.metadata import column, table


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


@table("Address")
@dataclass
class Address:
    city: City | None = column(pkey=True, target=City, fkeys="cc:countryCode cn:name")
    street: str | None = column(pkey=True)


@dataclass
class Ambiguous:
    city: City | None = column(pkey=True, target=City)


@dataclass
class Incomplete:
    city: City | None = column(pkey=True, target=City, fkeys="cc:countryCode")


@dataclass
class Egg:
    hen: Hen | None = column(pkey=True, target="Hen")


@dataclass
class Hen:
    egg: Egg | None = column(pkey=True, target=Egg)


@dataclass
class Keyless:
    value: str | None = column()


class TestPrimaryKeyFields:
    def test_keyed_by_column(self) -> None:
        fields = primary_key_fields(City)
        assert list(fields) == ["countryCode", "name"]
        assert fields["countryCode"].field == "country"

    def test_no_key(self) -> None:
        assert primary_key_fields(Keyless) == {}


class TestKeyColumns:
    def test_atomic_key(self) -> None:
        assert key_columns(Country) == ("code",)

    def test_single_leaf_under_outer_column(self) -> None:
        assert key_columns(City) == ("countryCode", "name")

    def test_composite_through_fkeys(self) -> None:
        assert key_columns(Address) == ("cc", "cn", "street")

    def test_composite_without_fkeys_raises(self) -> None:
        with pytest.raises(ForeignKeySpecError, match="2-column key"):
            key_columns(Ambiguous)

    def test_fkeys_missing_a_column_raises(self) -> None:
        with pytest.raises(ForeignKeySpecError, match="name"):
            key_columns(Incomplete)

    def test_cycle_detected(self) -> None:
        with pytest.raises(CyclicKeyError) as exc_info:
            key_columns(Egg)
        assert exc_info.value.path == ["Egg", "Hen", "Egg"]

    def test_cache_clear(self) -> None:
        first = key_columns(City)
        clear_key_cache()
        assert key_columns(City) == first


class TestAtomicPrimaryKey:
    def test_atomic(self) -> None:
        assert atomic_primary_key(Country(code="ES", name="Spain")) == {"code": "ES"}

    def test_nested_key_flattened_under_outer_column(self) -> None:
        city = City(country=Country(code="ES"), name="Madrid")
        assert atomic_primary_key(city) == {"countryCode": "ES", "name": "Madrid"}

    def test_leaf_count_matches_referenced_key(self) -> None:
        city = City(country=Country(code="ES"), name="Madrid")
        key = atomic_primary_key(city)
        nested = [c for c in key if c not in ("name",)]
        assert len(nested) == len(primary_key_fields(Country))

    def test_two_levels(self) -> None:
        address = Address(city=City(country=Country(code="ES"), name="Madrid"), street="Sol")
        assert atomic_primary_key(address) == {"cc": "ES", "cn": "Madrid", "street": "Sol"}

    def test_raw_value_in_reference_field(self) -> None:
        city = City(country="ES", name="Madrid")  # type: ignore[arg-type]
        assert atomic_primary_key(city) == {"countryCode": "ES", "name": "Madrid"}

    def test_none_reference(self) -> None:
        assert atomic_primary_key(City(name="Madrid")) == {"countryCode": None, "name": "Madrid"}

    def test_runtime_cycle_detected(self) -> None:
        egg = Egg()
        hen = Hen(egg=egg)
        egg.hen = hen
        with pytest.raises(CyclicKeyError):
            atomic_primary_key(egg)

    def test_non_atomic_value_names_field(self) -> None:
        country = Country(code=Decimal(7))  # type: ignore[arg-type]
        with pytest.raises(ConfigurationError, match=r"Country\.code holds a Decimal") as exc_info:
            atomic_primary_key(country)
        assert not isinstance(exc_info.value, UnmappedEntityError)

    def test_bool_is_not_atomic(self) -> None:
        with pytest.raises(ConfigurationError, match="holds a bool"):
            atomic_primary_key(Country(code=True))  # type: ignore[arg-type]
