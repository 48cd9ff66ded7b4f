"""Tests for route and name lookups."""

from __future__ import annotations

from datetime import date

import pytest

pytestmark = pytest.mark.django_db


@pytest.fixture
def routes(engine, train):
    def add(name, origin, destination, **extra):
        return engine.create_child(train.pk, {"name": name, "origin": origin, "destination": destination, **extra})

    return {
        "ab": add("A-B", "CityA", "CityB", departs_on="2024-12-01"),
        "ab_late": add("A-B late", "CityA", "CityB", departs_on="2024-12-02"),
        "ba": add("B-A", "CityB", "CityA"),
        "ab_lower": add("a-b", "citya", "cityb"),
        "abc": add("A-BC", "CityA", "CityBC"),
    }


def test_route_query_is_exact(engine, routes):
    found = engine.query_by_route("CityA", "CityB")

    assert [o.pk for o in found] == [routes["ab"].pk, routes["ab_late"].pk]
    assert all(o.origin == "CityA" and o.destination == "CityB" for o in found)


def test_swapped_and_partial_routes_are_excluded(engine, routes):
    assert [o.pk for o in engine.query_by_route("CityB", "CityA")] == [routes["ba"].pk]
    assert engine.query_by_route("City", "CityB") == []
    assert engine.query_by_route("CityA", "City") == []


def test_route_query_on_departure_date(engine, routes):
    assert [o.pk for o in engine.query_by_route("CityA", "CityB", on="2024-12-02")] == [routes["ab_late"].pk]
    assert [o.pk for o in engine.query_by_route("CityA", "CityB", on=date(2024, 12, 1))] == [routes["ab"].pk]


def test_empty_route_query_is_not_an_error(engine, routes):
    assert engine.query_by_route("Nowhere", "Elsewhere") == []
    assert engine.query_by_route("", "CityB") == []


def test_rooms_are_not_routes(engine, hotel, routes):
    odd_room = engine.create_child(hotel.pk, {"name": "Odd room", "origin": "CityA", "destination": "CityB"})

    assert odd_room.pk not in [o.pk for o in engine.query_by_route("CityA", "CityB")]


def test_name_lookup_exact_and_prefix(engine, hotel):
    grand_plaza = engine.create_parent({"name": "Grand Plaza", "registration_no": "HTL-0002"})

    assert engine.query_by_name("Grand Almaty") == [hotel]
    assert engine.query_by_name("Grand") == []
    assert engine.query_by_name("Grand", prefix=True) == [hotel, grand_plaza]
    assert engine.query_by_name("grand", prefix=True) == []
    assert engine.query_by_name("Grand", prefix=True, kind="train") == []
    assert engine.query_by_name("") == []


def test_registration_lookup(engine, hotel):
    assert engine.router.find_by_registration_no("HTL-0001") == hotel
    assert engine.router.find_by_registration_no("HTL-9999") is None
