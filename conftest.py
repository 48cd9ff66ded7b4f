"""Shared pytest fixtures for the inventory engine tests."""

import pytest


@pytest.fixture
def engine():
    """A private engine on the default database (not the process-wide one)."""
    from apps.availability.engine import InventoryEngine

    return InventoryEngine(using="default", max_nights=60, default_list_limit=2)


@pytest.fixture
def hotel(engine):
    return engine.create_parent({
        "kind": "hotel",
        "name": "Grand Almaty",
        "registration_no": "HTL-0001",
        "city": "Almaty",
    })


@pytest.fixture
def room(engine, hotel):
    return engine.create_child(hotel.pk, {
        "name": "Deluxe double",
        "service_class": "deluxe",
        "price": "45000.00",
        "units": ["101", "102"],
    })


@pytest.fixture
def room_unit(room):
    return room.units.order_by("id").first()


@pytest.fixture
def train(engine):
    return engine.create_parent({
        "kind": "train",
        "name": "Talgo 001",
        "registration_no": "TRN-001",
    })
