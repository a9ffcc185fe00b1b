"""Breadth-first search for the K shortest routes between two stations."""

from collections import deque
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_K = 3
DEFAULT_MAX_DEPTH = 50

# Anything with `station in graph` and `graph[station]` yielding neighbour ids:
# a plain dict of lists, or a networkx.Graph.
Adjacency = Mapping[str, Iterable[str]]


@dataclass(frozen=True)
class _PathNode:
    """Frontier station of a partial path, linked back to its predecessor."""

    station: str
    parent: "_PathNode | None"
    length: int  # Number of stations, not edges

    def extend(self, station: str) -> "_PathNode":
        return _PathNode(station=station, parent=self, length=self.length + 1)

    def visits(self, station: str) -> bool:
        node = self
        while node is not None:
            if node.station == station:
                return True
            node = node.parent
        return False

    def stations(self) -> list[str]:
        path = []
        node = self
        while node is not None:
            path.append(node.station)
            node = node.parent
        path.reverse()
        return path


def _neighbors(graph: Adjacency, station: str) -> Iterable[str]:
    if station not in graph:
        return ()
    return graph[station]


def find_k_shortest_routes(
    graph: Adjacency,
    start: str,
    goal: str,
    k: int = DEFAULT_K,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[list[str]]:
    """
    Find up to k shortest simple routes between two stations.

    Plain BFS over a FIFO queue of partial paths. The first path that reaches
    the goal fixes the shortest length; later candidates longer than that are
    dropped, so every returned route has the same number of hops as the first.

    Ties are returned in discovery order, which follows the iteration order of
    each station's neighbours. Sort the neighbour lists beforehand if a stable
    order across graph sources matters.

    Args:
        graph: Adjacency of station id -> neighbour ids (never mutated)
        start: Departure station id
        goal: Arrival station id
        k: Maximum number of routes to return (<= 0 returns none)
        max_depth: Maximum number of stations in a candidate route

    Returns:
        List of routes, each a list of station ids from start to goal.
        Empty if either station is unknown or no route fits in max_depth.
    """
    if k <= 0 or start not in graph or goal not in graph:
        return []

    logger.debug("route_search_started", start=start, goal=goal, k=k, max_depth=max_depth)

    queue = deque([_PathNode(station=start, parent=None, length=1)])
    results: list[list[str]] = []
    seen_routes: set[tuple[str, ...]] = set()
    shortest_len: int | None = None

    while queue and len(results) < k:
        path = queue.popleft()

        # Once the shortest length is known, longer detours are not explored
        if shortest_len is not None and path.length > shortest_len:
            continue

        if path.station == goal:
            route = path.stations()
            key = tuple(route)
            if key not in seen_routes:
                seen_routes.add(key)
                results.append(route)
                if shortest_len is None:
                    shortest_len = path.length
            continue

        if path.length >= max_depth:
            continue

        for neighbor in _neighbors(graph, path.station):
            if not path.visits(neighbor):
                queue.append(path.extend(neighbor))

    logger.debug("route_search_finished", start=start, goal=goal, routes=len(results))
    return results
