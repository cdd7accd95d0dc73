"""
Pytest configuration for boat-similarity tests.
"""

import pytest

from boat_similarity.core import BoatRecord, get_settings
from boat_similarity.similarity import WeightProfile


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Isolate tests from BOAT_SIMILARITY_* variables and the settings cache."""
    import os

    for key in list(os.environ):
        if key.startswith("BOAT_SIMILARITY_"):
            monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def make_boat(boat_id, **attributes):
    """Build an Entity through BoatRecord, as upstream data arrives."""
    return BoatRecord.model_validate({"id": boat_id, **attributes}).to_entity()


@pytest.fixture
def yacht_42():
    return make_boat("boat-1", type="Yacht", length=42, features=["GPS", "Radar"])


@pytest.fixture
def yacht_40():
    return make_boat("boat-2", type="Yacht", length=40, features=["GPS", "Sonar"])


@pytest.fixture
def three_field_profile():
    """type 0.35, length 0.25 (tolerance 100), features 0.15."""
    return WeightProfile.from_weights("three-field", {"type": 0.35, "length": 0.25, "features": 0.15})


@pytest.fixture
def full_sailboat():
    """Boat with every legacy-a field present."""
    return make_boat(
        "sail-1",
        name="Beneteau Oceanis 40",
        type="Sailboat",
        length=40,
        features=["GPS", "Autopilot"],
        engineType="Inboard",
        hullMaterial="Fiberglass",
    )
