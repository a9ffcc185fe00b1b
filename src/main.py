"""
Transit Route Finder - Main entry point.

Usage:
    cat trips.csv | python -m src.main
    python -m src.main trips.csv
    python -m src.main --help

Input rows are `id,from,to`; one line of output is printed per row.
Stations missing from the network are reported as UNKNOWN_STATION,
known stations with no route between them as NO_PATH.
"""

import argparse
import csv
import sys
from pathlib import Path

import structlog

from src.config import settings
from src.logging_config import configure_logging
from src.pathfinding import RouteFinder, RouteSearchResult, TransitGraph
from src.pathfinding.graph import normalize_station_id
from src.pathfinding.routes import format_route

logger = structlog.get_logger(__name__)


def format_result(trip_id: str, result: RouteSearchResult) -> str:
    """
    Format a route search result as a CSV line.

    Returns:
        `id,FROM,TO,numPaths,distance,"route|route"` or `id,FROM,TO,NO_PATH`
    """
    if not result.found:
        return f"{trip_id},{result.departure},{result.destination},NO_PATH"

    routes = "|".join(format_route(path) for path in result.paths)
    return (
        f"{trip_id},{result.departure},{result.destination},"
        f'{result.num_paths},{result.distance},"{routes}"'
    )


def process_rows(rows, route_finder: RouteFinder):
    """Yield one output line per valid `id,from,to` row."""
    for row in rows:
        if len(row) < 3:
            continue

        trip_id = row[0].strip()
        # Skip header
        if trip_id.lower() == "id":
            continue

        departure = normalize_station_id(row[1])
        destination = normalize_station_id(row[2])
        if not departure or not destination:
            logger.warning("trip_missing_station", trip_id=trip_id)
            continue

        graph = route_finder.transit_graph
        if not graph.has_station(departure) or not graph.has_station(destination):
            yield f"{trip_id},{departure},{destination},UNKNOWN_STATION"
            continue

        yield format_result(trip_id, route_finder.find_routes(departure, destination))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Transit Route Finder - Shortest routes between stations"
    )
    parser.add_argument(
        "input",
        nargs="?",
        help="Input CSV file of id,from,to rows (default: stdin)",
    )
    parser.add_argument(
        "--connections",
        type=Path,
        default=settings.CONNECTIONS_FILE,
        help="Path to connections CSV",
    )
    parser.add_argument(
        "-k",
        type=int,
        default=settings.ROUTE_K,
        help=f"Number of routes per trip (default: {settings.ROUTE_K})",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=settings.ROUTE_MAX_DEPTH,
        help=f"Maximum stations per route (default: {settings.ROUTE_MAX_DEPTH})",
    )

    args = parser.parse_args(argv)
    configure_logging(log_level=settings.LOG_LEVEL)

    if not args.connections.exists():
        print(f"Error: Connections file not found: {args.connections}", file=sys.stderr)
        return 1

    graph = TransitGraph()
    graph.load_connections(args.connections)
    route_finder = RouteFinder(graph, k=args.k, max_depth=args.max_depth)

    if args.input:
        with open(args.input, encoding="utf-8") as input_file:
            for line in process_rows(csv.reader(input_file), route_finder):
                print(line)
    else:
        for line in process_rows(csv.reader(sys.stdin), route_finder):
            print(line)

    return 0


if __name__ == "__main__":
    sys.exit(main())
