"""Data-layer interfaces consumed by the graph store.

The routing engine only reads from a provider. Two implementations ship here:

- ``InMemoryDataProvider``: mutable store that notifies listeners after every
  node/edge change, so a path finder can invalidate its snapshot.
- ``JsonFileDataProvider``: read-only seed-data file, re-read on every call.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Iterable, Protocol

from campusnav.errors import DataProviderError
from campusnav.models import Edge, Node

logger = logging.getLogger(__name__)

ChangeListener = Callable[[], None]


class DataProvider(Protocol):
    """Read-only view of nodes and edges polled at graph build time."""

    def list_nodes(self) -> list[Node]:
        """Return every node."""

    def list_active_edges(self, with_endpoints: bool = False) -> list[Edge]:
        """Return edges with ``is_active`` set, optionally joined with endpoints."""

    def find_node_by_code(self, code: str) -> Node | None:
        """Return the node with ``node_code == code`` or ``None``."""


def _join_endpoints(edges: Iterable[Edge], nodes_by_id: dict[int, Node]) -> list[Edge]:
    joined: list[Edge] = []
    for edge in edges:
        joined.append(
            Edge(
                edge_id=edge.edge_id,
                from_node_id=edge.from_node_id,
                to_node_id=edge.to_node_id,
                distance=edge.distance,
                compass_angle=edge.compass_angle,
                is_staircase=edge.is_staircase,
                is_active=edge.is_active,
                from_node=nodes_by_id.get(edge.from_node_id),
                to_node=nodes_by_id.get(edge.to_node_id),
            )
        )
    return joined


class InMemoryDataProvider:
    """Mutable node/edge store with change notification."""

    def __init__(self, nodes: Iterable[Node] = (), edges: Iterable[Edge] = ()) -> None:
        self._lock = threading.RLock()
        self._nodes: dict[int, Node] = {}
        self._edges: dict[int, Edge] = {}
        self._listeners: list[ChangeListener] = []
        for node in nodes:
            self._insert_node(node)
        for edge in edges:
            self._insert_edge(edge)

    # Listeners --------------------------------------------------------------

    def subscribe(self, listener: ChangeListener) -> None:
        """Register a callback invoked after every node/edge mutation."""
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def unsubscribe(self, listener: ChangeListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener()

    # Reads ------------------------------------------------------------------

    def list_nodes(self) -> list[Node]:
        with self._lock:
            return list(self._nodes.values())

    def list_active_edges(self, with_endpoints: bool = False) -> list[Edge]:
        with self._lock:
            active = [edge for edge in self._edges.values() if edge.is_active]
            if with_endpoints:
                return _join_endpoints(active, self._nodes)
            return active

    def find_node_by_code(self, code: str) -> Node | None:
        with self._lock:
            for node in self._nodes.values():
                if node.node_code == code:
                    return node
        return None

    def get_node(self, node_id: int) -> Node | None:
        with self._lock:
            return self._nodes.get(node_id)

    def get_edge(self, edge_id: int) -> Edge | None:
        with self._lock:
            return self._edges.get(edge_id)

    # Mutations --------------------------------------------------------------

    def _insert_node(self, node: Node) -> None:
        if node.node_id in self._nodes:
            raise ValueError(f"node_id {node.node_id} already exists")
        if any(existing.node_code == node.node_code for existing in self._nodes.values()):
            raise ValueError(f"node_code '{node.node_code}' already exists")
        self._nodes[node.node_id] = node

    def _insert_edge(self, edge: Edge) -> None:
        if edge.edge_id in self._edges:
            raise ValueError(f"edge_id {edge.edge_id} already exists")
        self._check_endpoints(edge)
        self._edges[edge.edge_id] = edge

    def _check_endpoints(self, edge: Edge) -> None:
        for label, node_id in (("from_node_id", edge.from_node_id), ("to_node_id", edge.to_node_id)):
            if node_id not in self._nodes:
                raise ValueError(f"{label} {node_id} does not reference an existing node")

    def add_node(self, node: Node) -> Node:
        with self._lock:
            self._insert_node(node)
        self._notify()
        return node

    def update_node(self, node: Node) -> Node:
        """Replace the node sharing ``node.node_id``."""
        with self._lock:
            if node.node_id not in self._nodes:
                raise KeyError(f"node_id {node.node_id} not found")
            for existing in self._nodes.values():
                if existing.node_code == node.node_code and existing.node_id != node.node_id:
                    raise ValueError(f"node_code '{node.node_code}' already exists")
            self._nodes[node.node_id] = node
        self._notify()
        return node

    def remove_node(self, node_id: int) -> Node:
        """Delete a node together with every edge touching it."""
        with self._lock:
            if node_id not in self._nodes:
                raise KeyError(f"node_id {node_id} not found")
            node = self._nodes.pop(node_id)
            incident = [
                edge_id
                for edge_id, edge in self._edges.items()
                if node_id in (edge.from_node_id, edge.to_node_id)
            ]
            for edge_id in incident:
                del self._edges[edge_id]
        self._notify()
        return node

    def add_edge(self, edge: Edge) -> Edge:
        with self._lock:
            self._insert_edge(edge)
        self._notify()
        return edge

    def update_edge(self, edge: Edge) -> Edge:
        """Replace the edge sharing ``edge.edge_id``."""
        with self._lock:
            if edge.edge_id not in self._edges:
                raise KeyError(f"edge_id {edge.edge_id} not found")
            self._check_endpoints(edge)
            self._edges[edge.edge_id] = edge
        self._notify()
        return edge

    def remove_edge(self, edge_id: int) -> Edge:
        with self._lock:
            if edge_id not in self._edges:
                raise KeyError(f"edge_id {edge_id} not found")
            edge = self._edges.pop(edge_id)
        self._notify()
        return edge


class JsonFileDataProvider:
    """Read nodes and edges from a ``{"nodes": [...], "edges": [...]}`` file.

    The file is parsed on every call so edits show up after the next
    invalidation without restarting the process.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self) -> tuple[list[Node], list[Edge]]:
        try:
            payload: dict[str, Any] = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise DataProviderError(f"Dataset file not found: {self.path}") from exc
        except json.JSONDecodeError as exc:
            raise DataProviderError(f"Dataset file is not valid JSON: {self.path}") from exc

        if not isinstance(payload, dict):
            raise DataProviderError("Dataset must be a JSON object with 'nodes' and 'edges'")

        try:
            nodes = [Node.from_dict(raw) for raw in payload.get("nodes", [])]
            edges = [Edge.from_dict(raw) for raw in payload.get("edges", [])]
        except (KeyError, TypeError, ValueError) as exc:
            raise DataProviderError(f"Dataset record is invalid: {exc}") from exc

        logger.debug("Loaded %d nodes and %d edges from %s", len(nodes), len(edges), self.path)
        return nodes, edges

    def list_nodes(self) -> list[Node]:
        nodes, _ = self._load()
        return nodes

    def list_active_edges(self, with_endpoints: bool = False) -> list[Edge]:
        nodes, edges = self._load()
        active = [edge for edge in edges if edge.is_active]
        if with_endpoints:
            return _join_endpoints(active, {node.node_id: node for node in nodes})
        return active

    def find_node_by_code(self, code: str) -> Node | None:
        nodes, _ = self._load()
        for node in nodes:
            if node.node_code == code:
                return node
        return None
