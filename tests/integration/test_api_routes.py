"""Integration tests for the FastAPI route endpoints."""

from __future__ import annotations

from pathlib import Path

from fastapi.testclient import TestClient

from campusnav.api import create_app
from campusnav.config import Settings
from campusnav.data_provider import InMemoryDataProvider
from campusnav.models import Edge
from campusnav.pathfinding import PathFinder


def _client(finder: PathFinder) -> TestClient:
    return TestClient(create_app(pathfinder=finder, settings=Settings()))


def test_health_reports_graph_state(scenario_finder: PathFinder) -> None:
    """Health reports whether the graph has been built yet."""
    client = _client(scenario_finder)

    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok", "graph_built": False}


def test_find_path_returns_directions(scenario_finder: PathFinder) -> None:
    """POST /find-path returns the route with directions."""
    client = _client(scenario_finder)

    res = client.post("/find-path", json={"start": "A", "goal": "C"})

    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["total_distance"] == 15
    assert body["num_nodes"] == 3
    assert [step["node_code"] for step in body["path"]] == ["A", "B", "C"]
    assert body["path"][0]["compass_angle"] is None
    assert body["directions"][2] == "Go North (0°) for 5.0m via stairs to Room C"


def test_path_endpoint_omits_directions(scenario_finder: PathFinder) -> None:
    """POST /path returns the route without narration."""
    res = _client(scenario_finder).post("/path", json={"start": "A", "goal": "B"})

    assert res.status_code == 200
    assert "directions" not in res.json()


def test_route_errors_map_to_404(scenario_finder: PathFinder) -> None:
    """Unknown codes and missing routes are 404 responses."""
    client = _client(scenario_finder)

    missing = client.post("/find-path", json={"start": "ZZZ", "goal": "A"})
    assert missing.status_code == 404
    assert missing.json()["detail"] == "Start node not found: ZZZ"

    no_route = client.post("/find-path", json={"start": "A", "goal": "C", "avoid_stairs": True})
    assert no_route.status_code == 404
    assert no_route.json()["detail"] == "No path found between the specified nodes"


def test_empty_code_is_rejected(scenario_finder: PathFinder) -> None:
    """Empty node codes fail request validation."""
    res = _client(scenario_finder).post("/find-path", json={"start": "", "goal": "A"})
    assert res.status_code == 422


def test_invalidate_endpoint_reloads_graph(scenario_provider: InMemoryDataProvider) -> None:
    """POST /graph/invalidate makes new edges visible."""
    finder = PathFinder(scenario_provider)
    client = _client(finder)

    assert client.post("/path", json={"start": "A", "goal": "D"}).status_code == 404
    scenario_provider.add_edge(Edge(edge_id=3, from_node_id=1, to_node_id=4, distance=1.5, compass_angle=0.0))

    res = client.post("/graph/invalidate")
    assert res.json() == {"status": "invalidated"}
    assert client.post("/path", json={"start": "A", "goal": "D"}).json()["total_distance"] == 1.5


def test_unavailable_dataset_maps_to_503(tmp_path: Path) -> None:
    """A missing dataset is reported as service unavailable."""
    settings = Settings(data_file=tmp_path / "missing.json")
    client = TestClient(create_app(settings=settings))

    res = client.post("/find-path", json={"start": "A", "goal": "B"})
    assert res.status_code == 503
    assert "Navigation data unavailable" in res.json()["detail"]


def test_default_app_serves_bundled_dataset(campus_data_file: Path) -> None:
    """The default app reads routes from the configured dataset file."""
    client = TestClient(create_app(settings=Settings(data_file=campus_data_file)))

    res = client.post("/find-path", json={"start": "MAIN-ENT", "goal": "LIB-201", "avoid_stairs": True})
    assert res.status_code == 200
    assert res.json()["total_distance"] == 33.5
