"""Command-line route lookup against a JSON dataset.

Example:
    python -m campusnav.cli --data data/campus.json --start MAIN-ENT --goal LIB-201
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from campusnav.config import DEFAULT_DATA_FILE, DEFAULT_METERS_PER_FLOOR
from campusnav.data_provider import JsonFileDataProvider
from campusnav.errors import DataProviderError, RouteError
from campusnav.models import PathResult
from campusnav.pathfinding import PathFinder


def _print_result(result: PathResult) -> None:
    print(f"Route {result.start.node_code} -> {result.goal.node_code}")
    print(f"Total distance: {result.total_distance:.2f}m over {result.num_nodes} nodes")
    print("")
    for index, line in enumerate(result.directions or [], start=1):
        print(f"  {index}. {line}")


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Indoor route finder")
    parser.add_argument("--data", "-d", default=DEFAULT_DATA_FILE, help="JSON dataset with nodes and edges")
    parser.add_argument("--start", "-s", required=True, help="Start node code")
    parser.add_argument("--goal", "-g", required=True, help="Goal node code")
    parser.add_argument("--avoid-stairs", action="store_true", help="Never route over staircase edges")
    parser.add_argument(
        "--meters-per-floor",
        type=float,
        default=DEFAULT_METERS_PER_FLOOR,
        help="Heuristic cost per floor of difference",
    )
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    finder = PathFinder(JsonFileDataProvider(args.data), meters_per_floor=args.meters_per_floor)
    try:
        result = finder.get_directions(args.start, args.goal, avoid_stairs=args.avoid_stairs)
    except (RouteError, ValueError) as exc:
        print(f"Route lookup failed: {exc}", file=sys.stderr)
        return 1
    except DataProviderError as exc:
        print(f"Navigation data unavailable: {exc}", file=sys.stderr)
        return 2

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        _print_result(result)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
