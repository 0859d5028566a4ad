"""Route error taxonomy shared by the graph store, search engine and adapters."""

from __future__ import annotations


class RouteError(Exception):
    """Base class for recoverable routing failures."""


class NodeNotFound(RouteError):
    """Raised when a start or goal code does not resolve to a node."""

    def __init__(self, code: str, role: str = "start") -> None:
        self.code = code
        self.role = role
        super().__init__(f"{role.capitalize()} node not found: {code}")


class NoPathFound(RouteError):
    """Raised when no active-edge route connects the requested nodes."""

    def __init__(self, start_code: str, goal_code: str) -> None:
        self.start_code = start_code
        self.goal_code = goal_code
        super().__init__("No path found between the specified nodes")


class DataProviderError(Exception):
    """Raised when the backing data provider fails; the query cannot proceed."""
