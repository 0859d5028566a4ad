"""Immutable adjacency snapshot built from a data provider.

Every active stored edge yields two traversal options: the stored direction
and a synthetic reverse with the compass heading rotated by 180 degrees.
A rebuild produces a brand-new snapshot and publishes it with one reference
assignment, so searches already running keep reading the old one.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from campusnav.data_provider import DataProvider
from campusnav.errors import DataProviderError
from campusnav.models import Edge, Node, TraversalOption

logger = logging.getLogger(__name__)


def reverse_angle(angle: float) -> float:
    """Return the opposite compass heading in ``[0, 360)``."""
    return (float(angle) + 180.0) % 360.0


@dataclass(frozen=True, slots=True)
class GraphSnapshot:
    """Read-only node cache and adjacency map."""

    nodes: Mapping[int, Node]
    nodes_by_code: Mapping[str, Node]
    adjacency: Mapping[int, tuple[TraversalOption, ...]]

    @classmethod
    def from_records(cls, nodes: list[Node], edges: list[Edge]) -> "GraphSnapshot":
        """Materialize forward and reverse options for every active edge."""
        node_map: dict[int, Node] = {}
        code_map: dict[str, Node] = {}
        adjacency: dict[int, list[TraversalOption]] = {}
        for node in nodes:
            node_map[node.node_id] = node
            code_map[node.node_code] = node
            adjacency[node.node_id] = []

        for edge in edges:
            if not edge.is_active:
                continue
            # Edges pointing at unknown nodes are skipped on that side only.
            if edge.from_node_id in adjacency:
                adjacency[edge.from_node_id].append(
                    TraversalOption(
                        to=edge.to_node_id,
                        distance=edge.distance,
                        compass_angle=edge.compass_angle,
                        is_staircase=edge.is_staircase,
                        edge_id=edge.edge_id,
                    )
                )
            if edge.to_node_id in adjacency:
                adjacency[edge.to_node_id].append(
                    TraversalOption(
                        to=edge.from_node_id,
                        distance=edge.distance,
                        compass_angle=reverse_angle(edge.compass_angle),
                        is_staircase=edge.is_staircase,
                        edge_id=edge.edge_id,
                    )
                )

        return cls(
            nodes=MappingProxyType(node_map),
            nodes_by_code=MappingProxyType(code_map),
            adjacency=MappingProxyType({node_id: tuple(opts) for node_id, opts in adjacency.items()}),
        )

    @classmethod
    def empty(cls) -> "GraphSnapshot":
        return cls.from_records([], [])

    def neighbors(self, node_id: int) -> tuple[TraversalOption, ...]:
        return self.adjacency.get(node_id, ())

    def option_count(self) -> int:
        return sum(len(opts) for opts in self.adjacency.values())


class GraphStore:
    """Owns the current snapshot for one data provider."""

    def __init__(self, provider: DataProvider) -> None:
        self.provider = provider
        self._snapshot: GraphSnapshot | None = None
        self._generation = 0
        self._build_lock = threading.Lock()
        # Guards _generation and _snapshot; never held across provider I/O.
        self._state_lock = threading.Lock()

    def _load(self) -> GraphSnapshot:
        started = time.perf_counter()
        with self._state_lock:
            generation = self._generation
        try:
            nodes = self.provider.list_nodes()
            edges = self.provider.list_active_edges(with_endpoints=True)
        except DataProviderError:
            logger.exception("Graph build failed while reading the data provider")
            raise
        except Exception as exc:
            logger.exception("Graph build failed while reading the data provider")
            raise DataProviderError(f"Failed to load graph data: {exc}") from exc

        snapshot = GraphSnapshot.from_records(list(nodes), list(edges))
        # An invalidate() that lands mid-build means the data moved on; the
        # caller still gets this snapshot but it is not published.
        with self._state_lock:
            if generation == self._generation:
                self._snapshot = snapshot

        logger.info(
            "Built navigation graph: %d nodes, %d edges, %d traversal options in %.1f ms",
            len(snapshot.nodes),
            len(edges),
            snapshot.option_count(),
            (time.perf_counter() - started) * 1000.0,
        )
        return snapshot

    def build(self) -> GraphSnapshot:
        """Fetch all nodes and active edges and publish a fresh snapshot.

        Raises:
            DataProviderError: If the provider fails. The previously published
                snapshot, if any, stays in place.
        """
        with self._build_lock:
            return self._load()

    def snapshot(self) -> GraphSnapshot:
        """Return the current snapshot, building it first when needed."""
        current = self._snapshot
        if current is not None:
            return current
        with self._build_lock:
            current = self._snapshot
            if current is not None:
                return current
            return self._load()

    def is_built(self) -> bool:
        return self._snapshot is not None

    def invalidate(self) -> None:
        """Drop the snapshot; the next query rebuilds from the provider."""
        with self._state_lock:
            self._generation += 1
            self._snapshot = None
        logger.info("Navigation graph invalidated")
