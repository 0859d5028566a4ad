"""Pytest global fixtures for navigation tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from campusnav.data_provider import InMemoryDataProvider
from campusnav.models import Edge
from campusnav.pathfinding import PathFinder
from tests.factories import make_node

DATA_FILE = Path(__file__).resolve().parent.parent / "data" / "campus.json"


@pytest.fixture()
def scenario_provider() -> InMemoryDataProvider:
    """A(0) -> B(0) level hop, B -> C(1) by stairs, D isolated."""
    nodes = [
        make_node(1, "A", 0),
        make_node(2, "B", 0),
        make_node(3, "C", 1),
        make_node(4, "D", 0),
    ]
    edges = [
        Edge(edge_id=1, from_node_id=1, to_node_id=2, distance=10.0, compass_angle=90.0),
        Edge(edge_id=2, from_node_id=2, to_node_id=3, distance=5.0, compass_angle=0.0, is_staircase=True),
    ]
    return InMemoryDataProvider(nodes, edges)


@pytest.fixture()
def scenario_finder(scenario_provider: InMemoryDataProvider) -> PathFinder:
    """Path finder over the A/B/C/D scenario."""
    return PathFinder(scenario_provider)


@pytest.fixture()
def campus_data_file() -> Path:
    """Bundled sample dataset."""
    return DATA_FILE
