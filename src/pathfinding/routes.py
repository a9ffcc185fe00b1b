"""Route search over the transit graph, annotated with line metadata."""

from dataclasses import dataclass, field

import structlog

from .bfs import DEFAULT_K, DEFAULT_MAX_DEPTH, find_k_shortest_routes
from .graph import DEFAULT_LINE_COLOUR, INTERCHANGE, TransitGraph, normalize_station_id

logger = structlog.get_logger(__name__)


@dataclass
class RouteStop:
    """A station on a route and the connection used to reach it."""

    station_id: str
    line_id: str | None = None
    line_colour_hex: str | None = None
    connection_type: str | None = None  # None for the departure stop


@dataclass
class RouteSearchResult:
    """Result of a route search."""

    departure: str
    destination: str
    paths: list[list[RouteStop]] = field(default_factory=list)
    distance: int | None = None  # Hops in the first (shortest) path

    @property
    def num_paths(self) -> int:
        return len(self.paths)

    @property
    def found(self) -> bool:
        return bool(self.paths)


class RouteFinder:
    """
    Find the shortest routes between two stations of a transit network.

    Runs the K-shortest BFS over the graph and attaches, to every stop after
    the first, the line and colour of the connection leading to it.

    Searches run on an adjacency snapshot taken when the finder is built;
    connections added to the graph afterwards are not seen.
    """

    def __init__(
        self,
        graph: TransitGraph,
        k: int = DEFAULT_K,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        """
        Initialize route finder with a transit graph.

        Args:
            graph: TransitGraph instance
            k: Maximum number of routes per search
            max_depth: Maximum number of stations in a route
        """
        self.graph = graph.graph
        self.transit_graph = graph
        self.adjacency = graph.adjacency()
        self.k = k
        self.max_depth = max_depth

    def find_routes(self, departure: str, destination: str) -> RouteSearchResult:
        """
        Find up to k equally short routes between two stations.

        Args:
            departure: Starting station id (any case, surrounding spaces ignored)
            destination: Ending station id

        Returns:
            RouteSearchResult; empty paths if no route or unknown station
        """
        departure = normalize_station_id(departure)
        destination = normalize_station_id(destination)

        routes = find_k_shortest_routes(
            self.adjacency, departure, destination, k=self.k, max_depth=self.max_depth
        )
        if not routes:
            logger.info("no_route_found", departure=departure, destination=destination)
            return RouteSearchResult(departure=departure, destination=destination)

        paths = [self.annotate(route) for route in routes]
        logger.info(
            "routes_found",
            departure=departure,
            destination=destination,
            num_paths=len(paths),
            distance=len(routes[0]) - 1,
        )
        return RouteSearchResult(
            departure=departure,
            destination=destination,
            paths=paths,
            distance=len(routes[0]) - 1,
        )

    def annotate(self, route: list[str]) -> list[RouteStop]:
        """Attach line metadata to each stop of a route."""
        stops = []
        for i, station_id in enumerate(route):
            if i == 0:
                stops.append(RouteStop(station_id=station_id))
                continue

            info = self.transit_graph.get_edge_info(route[i - 1], station_id)
            if info is None:
                stops.append(RouteStop(
                    station_id=station_id,
                    line_id=None,
                    line_colour_hex=DEFAULT_LINE_COLOUR,
                    connection_type=INTERCHANGE,
                ))
                continue

            stops.append(RouteStop(
                station_id=station_id,
                line_id=info.line_id,
                line_colour_hex=info.line_colour_hex,
                connection_type=info.connection_type,
            ))
        return stops


def count_interchanges(path: list[RouteStop]) -> int:
    """Count walking transfers along an annotated route."""
    return sum(1 for stop in path if stop.connection_type == INTERCHANGE)


def format_route(path: list[RouteStop] | list[str]) -> str:
    """Format a route as a human readable string."""
    return " → ".join(
        stop.station_id if isinstance(stop, RouteStop) else stop for stop in path
    )
