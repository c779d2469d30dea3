"""Shared fixtures for recipe mix tests."""

import pytest

from recipe_mix.models import AllocationSet, Source


@pytest.fixture()
def sample_tanks():
    """Tank records as returned by the device API."""
    return [
        {"uid": "A", "name": "Kibble", "slot": 1, "capacity": 2.0, "density": 0.45},
        {"uid": "B", "name": "Senior", "slot": 2, "capacity": 1.5, "density": 0.5},
        {"uid": "C", "name": "Treats", "slot": 3, "capacity": 1.0, "density": 0.6},
        {"uid": "D", "name": "New tank", "slot": 4, "capacity": 0, "density": 0.5},
    ]


@pytest.fixture()
def sample_sources(sample_tanks):
    """Roster with three usable sources and one unconfigured tank."""
    return [Source.from_tank(t) for t in sample_tanks]


@pytest.fixture()
def by_id(sample_sources):
    return {s.id: s for s in sample_sources}


@pytest.fixture()
def three_way_mix():
    return AllocationSet.of(("A", 50), ("B", 30), ("C", 20))


@pytest.fixture()
def saved_recipe():
    """Saved recipe in its device JSON shape."""
    return {
        "id": 7,
        "name": "Morning",
        "is_enabled": True,
        "daily_weight": 120,
        "servings": 3,
        "ingredients": [
            {"tank_uid": "X", "percentage": 20},
            {"tank_uid": "B", "percentage": 80},
        ],
    }
