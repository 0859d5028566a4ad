"""Typed records for building nodes, stored edges and computed routes.

Nodes and edges are snapshots handed over by a data provider; the engine never
mutates them. Path records are created per query and discarded afterwards.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field
from typing import Any

MAP_COORD_MIN = 0.0
MAP_COORD_MAX = 100.0


def _optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


@dataclass(frozen=True, slots=True)
class Node:
    """Named, floor-located point in the building graph."""

    node_id: int
    node_code: str
    name: str
    building: str
    floor_level: int
    type: str = "room"
    image360: str | None = None
    qrcode: str | None = None
    description: str | None = None
    map_x: float | None = None
    map_y: float | None = None

    def __post_init__(self) -> None:
        if not str(self.node_code).strip():
            raise ValueError("node_code must be a non-empty string")
        for label, coord in (("map_x", self.map_x), ("map_y", self.map_y)):
            if coord is not None and not (MAP_COORD_MIN <= coord <= MAP_COORD_MAX):
                raise ValueError(f"{label} must be within [{MAP_COORD_MIN}, {MAP_COORD_MAX}]")

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Node":
        """Build a node from a seed-data style mapping."""
        return cls(
            node_id=int(raw["node_id"]),
            node_code=str(raw["node_code"]),
            name=str(raw["name"]),
            building=str(raw["building"]),
            floor_level=int(raw["floor_level"]),
            type=str(raw.get("type") or raw.get("type_of_node") or "room"),
            image360=raw.get("image360") or None,
            qrcode=raw.get("qrcode") or None,
            description=raw.get("description"),
            map_x=_optional_float(raw.get("map_x")),
            map_y=_optional_float(raw.get("map_y")),
        )


@dataclass(frozen=True, slots=True)
class Edge:
    """Stored directed connection between two nodes.

    ``compass_angle`` is the heading in degrees clockwise from North when
    walking from ``from_node_id`` to ``to_node_id``.
    """

    edge_id: int
    from_node_id: int
    to_node_id: int
    distance: float
    compass_angle: float
    is_staircase: bool = False
    is_active: bool = True
    from_node: Node | None = field(default=None, compare=False)
    to_node: Node | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not math.isfinite(self.distance) or self.distance < 0:
            raise ValueError("distance must be a finite number >= 0")
        if not math.isfinite(self.compass_angle) or self.compass_angle < 0:
            raise ValueError("compass_angle must be a finite number >= 0")
        # Stored angles above 360 describe the same heading.
        object.__setattr__(self, "compass_angle", float(self.compass_angle) % 360.0)
        object.__setattr__(self, "distance", float(self.distance))

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "Edge":
        """Build an edge from a seed-data style mapping."""
        return cls(
            edge_id=int(raw["edge_id"]),
            from_node_id=int(raw["from_node_id"]),
            to_node_id=int(raw["to_node_id"]),
            distance=float(raw["distance"]),
            compass_angle=float(raw["compass_angle"]),
            is_staircase=bool(raw.get("is_staircase", False)),
            is_active=bool(raw.get("is_active", True)),
        )


@dataclass(frozen=True, slots=True)
class TraversalOption:
    """One outgoing adjacency entry of the graph snapshot."""

    to: int
    distance: float
    compass_angle: float
    is_staircase: bool
    edge_id: int


@dataclass(slots=True)
class PathStep:
    """One node along a computed route plus the hop that reached it."""

    node_id: int
    node_code: str
    name: str
    building: str
    floor_level: int
    type: str
    image360: str | None
    map_x: float | None
    map_y: float | None
    distance_from_prev: float = 0.0
    compass_angle: float | None = None
    is_staircase: bool = False

    @classmethod
    def from_node(cls, node: Node, option: TraversalOption | None = None) -> "PathStep":
        """Create a step for ``node``; ``option`` is the incoming hop, if any."""
        step = cls(
            node_id=node.node_id,
            node_code=node.node_code,
            name=node.name,
            building=node.building,
            floor_level=node.floor_level,
            type=node.type,
            image360=node.image360,
            map_x=node.map_x,
            map_y=node.map_y,
        )
        if option is not None:
            step.distance_from_prev = option.distance
            step.compass_angle = option.compass_angle
            step.is_staircase = option.is_staircase
        return step

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(slots=True)
class PathResult:
    """Ordered route from start to goal with summary fields."""

    path: list[PathStep]
    total_distance: float
    directions: list[str] | None = None

    @property
    def num_nodes(self) -> int:
        return len(self.path)

    @property
    def start(self) -> PathStep:
        return self.path[0]

    @property
    def goal(self) -> PathStep:
        return self.path[-1]

    @property
    def node_codes(self) -> list[str]:
        return [step.node_code for step in self.path]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON shape returned by adapters."""
        steps = [step.to_dict() for step in self.path]
        payload: dict[str, Any] = {
            "success": True,
            "path": steps,
            "total_distance": self.total_distance,
            "num_nodes": self.num_nodes,
            "start": steps[0],
            "goal": steps[-1],
        }
        if self.directions is not None:
            payload["directions"] = list(self.directions)
        return payload
