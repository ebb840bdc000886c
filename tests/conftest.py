"""Shared fixtures for world map tests."""

import json

import pytest

from py_realmgen.core.world_builder import generate_world_map_data
from py_realmgen.core.world_map import MapVariant


@pytest.fixture(scope="session")
def default_world():
    """Default map (seed 9527, 320/52/7), generated once per test session."""
    return generate_world_map_data()


@pytest.fixture(scope="session")
def minimal_world():
    """Default map without titles or characters."""
    return generate_world_map_data(variant=MapVariant.MINIMAL)


@pytest.fixture
def payload(default_world):
    """A fresh, independently mutable copy of the default payload."""
    return json.loads(default_world.to_json())
