"""Path reconstruction and turn-by-turn narration."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping

from campusnav.models import Node, PathResult, PathStep, TraversalOption

COMPASS_POINTS: tuple[str, ...] = (
    "North",
    "North-Northeast",
    "Northeast",
    "East-Northeast",
    "East",
    "East-Southeast",
    "Southeast",
    "South-Southeast",
    "South",
    "South-Southwest",
    "Southwest",
    "West-Southwest",
    "West",
    "West-Northwest",
    "Northwest",
    "North-Northwest",
)

Predecessors = Mapping[int, tuple[int, TraversalOption]]


def round_half_up(value: float, digits: int = 0) -> Decimal:
    """Round to ``digits`` decimals with ties going up (22.5 -> 23, 0.125 -> 0.13)."""
    return Decimal(repr(float(value))).quantize(Decimal(1).scaleb(-digits), rounding=ROUND_HALF_UP)


def compass_to_direction(angle: float) -> str:
    """Map a heading in degrees to one of the 16 compass point names."""
    normalized = float(angle) % 360.0
    index = int(math.floor((normalized + 11.25) / 22.5)) % 16
    return COMPASS_POINTS[index]


def reconstruct_path(
    predecessors: Predecessors,
    nodes: Mapping[int, Node],
    start_id: int,
    goal_id: int,
    total_cost: float,
) -> PathResult:
    """Walk predecessor links back from ``goal_id`` and return the route in order.

    Args:
        predecessors: ``node_id -> (previous_node_id, incoming option)``.
        nodes: Node cache used for public step attributes.
        start_id: First node of the route.
        goal_id: Last node of the route.
        total_cost: Accumulated g-score of the goal.

    Returns:
        PathResult whose first step has zero distance and no compass angle.
    """
    steps: list[PathStep] = []
    current = goal_id
    while current != start_id:
        link = predecessors.get(current)
        if link is None:
            raise ValueError(f"Predecessor chain is broken at node {current}")
        prev, option = link
        steps.append(PathStep.from_node(nodes[current], option))
        current = prev

    steps.append(PathStep.from_node(nodes[start_id]))
    steps.reverse()

    return PathResult(path=steps, total_distance=float(round_half_up(total_cost, 2)))


def narrate(result: PathResult) -> list[str]:
    """Return one human-readable instruction per path step."""
    directions: list[str] = []
    for idx, step in enumerate(result.path):
        if idx == 0:
            directions.append(f"Start at {step.name} ({step.building}, Floor {step.floor_level})")
            continue

        if step.compass_angle is None:
            word, angle = "forward", "0"
        else:
            word, angle = compass_to_direction(step.compass_angle), str(round_half_up(step.compass_angle))
        stairs = " via stairs" if step.is_staircase else ""
        distance = round_half_up(step.distance_from_prev, 1)
        directions.append(f"Go {word} ({angle}°) for {distance}m{stairs} to {step.name}")
    return directions
