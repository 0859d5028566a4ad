"""FastAPI routes exposing route search and turn-by-turn directions.

Endpoints:
- `GET /health`
- `POST /find-path` (narrated route)
- `POST /path` (route without narration)
- `POST /graph/invalidate` (drop cached graph after data changes)
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from campusnav.config import Settings
from campusnav.data_provider import JsonFileDataProvider
from campusnav.errors import DataProviderError, NodeNotFound, NoPathFound
from campusnav.models import PathResult
from campusnav.pathfinding import PathFinder

logger = logging.getLogger(__name__)


class PathRequest(BaseModel):
    """Request payload for node-code route queries."""

    start: str = Field(..., min_length=1)
    goal: str = Field(..., min_length=1)
    avoid_stairs: bool = False


class PathStepModel(BaseModel):
    """One node along a route and the hop that reached it."""

    node_id: int
    node_code: str
    name: str
    building: str
    floor_level: int
    type: str
    image360: str | None = None
    map_x: float | None = None
    map_y: float | None = None
    distance_from_prev: float
    compass_angle: float | None = None
    is_staircase: bool


class PathResponse(BaseModel):
    """Response payload for route queries."""

    success: bool = True
    path: list[PathStepModel]
    total_distance: float
    num_nodes: int
    start: PathStepModel
    goal: PathStepModel


class DirectionsResponse(PathResponse):
    """Route payload with one instruction per step."""

    directions: list[str]


def _to_response(result: PathResult, model: type[PathResponse] = PathResponse) -> PathResponse:
    return model.model_validate(result.to_dict())


def _pathfinder(request: Request) -> PathFinder:
    return request.app.state.pathfinder


def _run_query(finder: PathFinder, payload: PathRequest, narrated: bool) -> PathResult:
    """Run a route query and translate route errors into HTTP errors."""
    try:
        if narrated:
            return finder.get_directions(payload.start, payload.goal, avoid_stairs=payload.avoid_stairs)
        return finder.find_path(payload.start, payload.goal, avoid_stairs=payload.avoid_stairs)
    except NodeNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except NoPathFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except DataProviderError as exc:
        raise HTTPException(status_code=503, detail=f"Navigation data unavailable: {exc}") from exc
    except Exception as exc:  # pragma: no cover - safety net
        logger.exception("Unexpected pathfinding error")
        raise HTTPException(status_code=500, detail=f"Unexpected pathfinding error: {exc}") from exc


def create_app(pathfinder: PathFinder | None = None, settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        pathfinder: Route service to serve. Built from ``settings`` when omitted.
        settings: Runtime settings. Read from the environment when omitted.
    """
    settings = settings or Settings.from_env()
    if pathfinder is None:
        pathfinder = PathFinder(
            JsonFileDataProvider(settings.data_file),
            meters_per_floor=settings.meters_per_floor,
        )

    app = FastAPI(title="Campus Navigator API", version="1.0.0")
    app.state.pathfinder = pathfinder
    app.state.settings = settings

    cors_origins, allow_credentials = settings.cors_origin_list()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health(request: Request) -> dict[str, Any]:
        """Health endpoint with graph cache status."""
        return {"status": "ok", "graph_built": _pathfinder(request).is_built()}

    @app.post("/find-path", response_model=DirectionsResponse)
    def find_path(payload: PathRequest, request: Request) -> PathResponse:
        """Compute a route between two node codes with turn-by-turn directions."""
        return _to_response(_run_query(_pathfinder(request), payload, narrated=True), DirectionsResponse)

    @app.post("/path", response_model=PathResponse)
    def path(payload: PathRequest, request: Request) -> PathResponse:
        """Compute a route between two node codes without narration."""
        return _to_response(_run_query(_pathfinder(request), payload, narrated=False))

    @app.post("/graph/invalidate")
    def invalidate_graph(request: Request) -> dict[str, str]:
        """Drop the cached graph so the next query reloads node/edge data."""
        _pathfinder(request).invalidate()
        return {"status": "invalidated"}

    return app
