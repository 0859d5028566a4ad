"""Unit tests for graph snapshot construction and lifecycle."""

from __future__ import annotations

from types import MappingProxyType

import pytest

from campusnav.data_provider import InMemoryDataProvider
from campusnav.errors import DataProviderError
from campusnav.graph_store import GraphSnapshot, GraphStore, reverse_angle
from campusnav.models import Edge
from tests.factories import make_node


def test_reverse_angle_wraps_around_north() -> None:
    """Turning around adds 180 degrees modulo a full turn."""
    assert reverse_angle(0) == 180.0
    assert reverse_angle(90) == 270.0
    assert reverse_angle(270) == 90.0
    assert reverse_angle(359.5) == pytest.approx(179.5)


def test_every_edge_yields_forward_and_reverse_option(scenario_provider: InMemoryDataProvider) -> None:
    """Each stored edge is walkable both ways with the same cost and stairs flag."""
    snapshot = GraphStore(scenario_provider).build()

    for edge in scenario_provider.list_active_edges():
        forward = [o for o in snapshot.neighbors(edge.from_node_id) if o.edge_id == edge.edge_id]
        backward = [o for o in snapshot.neighbors(edge.to_node_id) if o.edge_id == edge.edge_id]

        assert len(forward) == 1 and len(backward) == 1
        assert forward[0].to == edge.to_node_id
        assert backward[0].to == edge.from_node_id
        assert forward[0].distance == backward[0].distance == edge.distance
        assert forward[0].compass_angle == edge.compass_angle
        assert backward[0].compass_angle == (edge.compass_angle + 180) % 360
        assert forward[0].is_staircase == backward[0].is_staircase == edge.is_staircase


def test_inactive_edges_are_excluded() -> None:
    """Inactive edges add no traversal options in either direction."""
    provider = InMemoryDataProvider(
        [make_node(1, "A"), make_node(2, "B")],
        [Edge(edge_id=1, from_node_id=1, to_node_id=2, distance=3.0, compass_angle=10.0, is_active=False)],
    )
    snapshot = GraphStore(provider).build()

    assert snapshot.neighbors(1) == ()
    assert snapshot.neighbors(2) == ()


def test_empty_dataset_builds_empty_snapshot() -> None:
    """No nodes and no edges still count as a built graph."""
    store = GraphStore(InMemoryDataProvider())
    snapshot = store.build()

    assert store.is_built()
    assert len(snapshot.nodes) == 0
    assert snapshot.option_count() == 0


def test_snapshot_is_read_only() -> None:
    """Adjacency cannot be mutated through the published snapshot."""
    snapshot = GraphSnapshot.empty()
    assert isinstance(snapshot.adjacency, MappingProxyType)
    with pytest.raises(TypeError):
        snapshot.adjacency[1] = ()  # type: ignore[index]


def test_snapshot_builds_lazily_and_invalidate_discards_it(scenario_provider: InMemoryDataProvider) -> None:
    """First access builds, later accesses reuse, invalidate forces a rebuild."""
    store = GraphStore(scenario_provider)
    assert not store.is_built()

    first = store.snapshot()
    assert store.is_built()
    assert store.snapshot() is first

    store.invalidate()
    assert not store.is_built()
    second = store.snapshot()
    assert second is not first


class _FailingProvider:
    def __init__(self) -> None:
        self.fail = False
        self.inner = InMemoryDataProvider([make_node(1, "A")])

    def list_nodes(self):
        return self.inner.list_nodes()

    def list_active_edges(self, with_endpoints: bool = False):
        if self.fail:
            raise ConnectionError("database unreachable")
        return self.inner.list_active_edges(with_endpoints)

    def find_node_by_code(self, code: str):
        return self.inner.find_node_by_code(code)


class _InvalidatingProvider(_FailingProvider):
    """Invalidates the store once while its edges are being read."""

    def __init__(self) -> None:
        super().__init__()
        self.store: GraphStore | None = None
        self.pending = True

    def list_active_edges(self, with_endpoints: bool = False):
        if self.pending and self.store is not None:
            self.pending = False
            self.store.invalidate()
        return super().list_active_edges(with_endpoints)


def test_provider_failure_raises_and_keeps_previous_snapshot() -> None:
    """A failed rebuild leaves the last good snapshot published."""
    provider = _FailingProvider()
    store = GraphStore(provider)
    good = store.build()

    provider.fail = True
    with pytest.raises(DataProviderError, match="database unreachable"):
        store.build()

    assert store.snapshot() is good


def test_provider_failure_on_first_build_leaves_store_unbuilt() -> None:
    """Nothing is published when the very first build fails."""
    provider = _FailingProvider()
    provider.fail = True
    store = GraphStore(provider)

    with pytest.raises(DataProviderError):
        store.snapshot()
    assert not store.is_built()


def test_invalidate_during_build_is_not_overwritten() -> None:
    """A build that overlaps invalidate() returns its snapshot but does not publish it."""
    provider = _InvalidatingProvider()
    store = GraphStore(provider)
    provider.store = store

    stale = store.build()

    assert len(stale.nodes) == 1
    assert not store.is_built()

    fresh = store.snapshot()
    assert fresh is not stale
    assert store.is_built()
    assert store.snapshot() is fresh
