"""A* route search over the building graph snapshot.

Purpose:
- Resolve human-readable node codes to graph nodes.
- Compute the shortest walkable route, optionally avoiding staircases.
- Produce turn-by-turn directions with compass headings.

Usage example:
    >>> from campusnav.data_provider import JsonFileDataProvider
    >>> from campusnav.pathfinding import PathFinder
    >>> finder = PathFinder(JsonFileDataProvider("data/campus.json"))
    >>> finder.get_directions("MAIN-ENT", "LIB-201").directions

Heuristic note: the estimate only counts the floor difference times
``meters_per_floor``. Horizontal distance is ignored, so on a single floor the
heuristic is always zero and the search behaves like Dijkstra. The estimate is
admissible only while every floor change really costs at least
``meters_per_floor`` along stored edges.
"""

from __future__ import annotations

import logging
from collections import ChainMap
from typing import Mapping

from campusnav.config import DEFAULT_METERS_PER_FLOOR
from campusnav.data_provider import DataProvider
from campusnav.errors import DataProviderError, NodeNotFound, NoPathFound
from campusnav.graph_store import GraphSnapshot, GraphStore
from campusnav.models import Node, PathResult, TraversalOption
from campusnav.narration import narrate, reconstruct_path
from campusnav.priority_queue import MinHeap

logger = logging.getLogger(__name__)


def floor_heuristic(a: Node | None, b: Node | None, meters_per_floor: float = DEFAULT_METERS_PER_FLOOR) -> float:
    """Lower-bound estimate of remaining cost from floor difference alone."""
    if a is None or b is None:
        return 0.0
    return abs(a.floor_level - b.floor_level) * meters_per_floor


def astar(
    snapshot: GraphSnapshot,
    nodes: Mapping[int, Node],
    start_id: int,
    goal_id: int,
    avoid_stairs: bool = False,
    meters_per_floor: float = DEFAULT_METERS_PER_FLOOR,
) -> tuple[dict[int, tuple[int, TraversalOption]], float] | None:
    """Run A* from ``start_id`` to ``goal_id``.

    Args:
        snapshot: Immutable adjacency to search.
        nodes: Node lookup used by the heuristic.
        start_id: Start node id.
        goal_id: Goal node id.
        avoid_stairs: Treat staircase options as untraversable.
        meters_per_floor: Heuristic cost per floor of difference.

    Returns:
        ``(predecessors, goal_cost)`` when the goal is reached, else ``None``.
    """
    goal_node = nodes.get(goal_id)

    open_heap: MinHeap[int] = MinHeap()
    open_heap.push(floor_heuristic(nodes.get(start_id), goal_node, meters_per_floor), start_id)

    came_from: dict[int, tuple[int, TraversalOption]] = {}
    g_score: dict[int, float] = {start_id: 0.0}
    visited: set[int] = set()

    while not open_heap.is_empty():
        _, current = open_heap.pop_min()

        # Stale copy left behind by a cheaper re-push.
        if current in visited:
            continue
        visited.add(current)

        if current == goal_id:
            return came_from, g_score[current]

        for option in snapshot.neighbors(current):
            if avoid_stairs and option.is_staircase:
                continue

            tentative_g = g_score[current] + option.distance
            if option.to not in g_score or tentative_g < g_score[option.to]:
                came_from[option.to] = (current, option)
                g_score[option.to] = tentative_g
                f = tentative_g + floor_heuristic(nodes.get(option.to), goal_node, meters_per_floor)
                open_heap.push(f, option.to)

    return None


class PathFinder:
    """Route-finding service bound to one data provider.

    The graph snapshot is built lazily on the first query and reused until
    ``invalidate()`` is called.
    """

    def __init__(self, provider: DataProvider, meters_per_floor: float = DEFAULT_METERS_PER_FLOOR) -> None:
        if meters_per_floor <= 0:
            raise ValueError("meters_per_floor must be > 0")
        self.store = GraphStore(provider)
        self.meters_per_floor = float(meters_per_floor)

    @property
    def provider(self) -> DataProvider:
        return self.store.provider

    def attach(self, provider: DataProvider | None = None) -> None:
        """Invalidate the snapshot whenever ``provider`` reports a change."""
        source = provider if provider is not None else self.provider
        subscribe = getattr(source, "subscribe", None)
        if subscribe is None:
            raise ValueError(f"{type(source).__name__} does not publish change notifications")
        subscribe(self.invalidate)

    def build(self) -> GraphSnapshot:
        return self.store.build()

    def is_built(self) -> bool:
        return self.store.is_built()

    def invalidate(self) -> None:
        self.store.invalidate()

    reset = invalidate

    def heuristic(self, a: Node | None, b: Node | None) -> float:
        return floor_heuristic(a, b, self.meters_per_floor)

    def _resolve(self, snapshot: GraphSnapshot, code: str, role: str) -> Node:
        node = snapshot.nodes_by_code.get(code)
        if node is not None:
            return node
        try:
            node = self.provider.find_node_by_code(code)
        except DataProviderError:
            raise
        except Exception as exc:
            raise DataProviderError(f"Failed to look up node '{code}': {exc}") from exc
        if node is None:
            logger.info("%s node not found: %s", role.capitalize(), code)
            raise NodeNotFound(code, role)
        return node

    def find_path(self, start_code: str, goal_code: str, avoid_stairs: bool = False) -> PathResult:
        """Compute the shortest route between two node codes.

        Raises:
            NodeNotFound: If either code does not resolve.
            NoPathFound: If no active-edge route honors ``avoid_stairs``.
            DataProviderError: If building the graph or a lookup fails.
        """
        snapshot = self.store.snapshot()
        start = self._resolve(snapshot, start_code, "start")
        goal = self._resolve(snapshot, goal_code, "goal")

        # Nodes found only through the provider are not in the snapshot yet.
        extra = {n.node_id: n for n in (start, goal) if n.node_id not in snapshot.nodes}
        nodes: Mapping[int, Node] = ChainMap(extra, snapshot.nodes) if extra else snapshot.nodes

        found = astar(
            snapshot,
            nodes,
            start.node_id,
            goal.node_id,
            avoid_stairs=avoid_stairs,
            meters_per_floor=self.meters_per_floor,
        )
        if found is None:
            logger.info(
                "No path found from %s to %s (avoid_stairs=%s)", start_code, goal_code, avoid_stairs
            )
            raise NoPathFound(start_code, goal_code)

        came_from, cost = found
        result = reconstruct_path(came_from, nodes, start.node_id, goal.node_id, cost)
        logger.debug(
            "Path %s -> %s: %d nodes, %.2f m", start_code, goal_code, result.num_nodes, result.total_distance
        )
        return result

    def get_directions(self, start_code: str, goal_code: str, avoid_stairs: bool = False) -> PathResult:
        """Like ``find_path`` but with ``directions`` filled in."""
        result = self.find_path(start_code, goal_code, avoid_stairs=avoid_stairs)
        result.directions = narrate(result)
        return result
