"""Pathfinding module for finding transit routes."""

from .bfs import find_k_shortest_routes
from .graph import TransitGraph
from .routes import RouteFinder, RouteSearchResult, RouteStop

__all__ = [
    "TransitGraph",
    "RouteFinder",
    "RouteSearchResult",
    "RouteStop",
    "find_k_shortest_routes",
]
