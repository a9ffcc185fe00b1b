"""
FastAPI web interface for the transit route finder.

Loads the connection graph once on startup and serves shortest-route
queries as JSON for the journey planner map.
"""

import threading
from pathlib import Path

import anyio
from anyio import to_thread
import structlog
from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, ConfigDict, Field

from src.config import settings
from src.logging_config import configure_logging
from src.pathfinding import RouteFinder, RouteSearchResult, TransitGraph
from src.pathfinding.graph import normalize_station_id

configure_logging(log_level=settings.LOG_LEVEL)
logger = structlog.get_logger(__name__)

# Initialize FastAPI
app = FastAPI(
    title="Transit Route Finder",
    description="Shortest routes across a rail transit network",
    version="0.1.0",
)

# Global instance (loaded on startup)
route_finder: RouteFinder | None = None

# Held by a search thread for as long as it runs, including after its
# request has timed out and the thread was abandoned
search_slots = threading.BoundedSemaphore(settings.MAX_CONCURRENT_SEARCHES)


class SearchCapacityError(RuntimeError):
    """Raised when every search slot is held by a running search."""


def run_search(finder: RouteFinder, departure: str, destination: str) -> RouteSearchResult:
    """Run a route search in the calling thread, holding a search slot."""
    if not search_slots.acquire(blocking=False):
        raise SearchCapacityError
    try:
        return finder.find_routes(departure, destination)
    finally:
        search_slots.release()


def build_route_finder(connections_file: Path) -> RouteFinder:
    """Build a route finder from a connections CSV (empty graph if missing)."""
    graph = TransitGraph()
    if connections_file.exists():
        graph.load_connections(connections_file)
    else:
        logger.warning("connections_file_not_found", path=str(connections_file))
    return RouteFinder(graph, k=settings.ROUTE_K, max_depth=settings.ROUTE_MAX_DEPTH)


@app.on_event("startup")
async def startup_event():
    """Load the transit graph on startup."""
    global route_finder
    route_finder = build_route_finder(settings.CONNECTIONS_FILE)
    logger.info("startup_complete", stations=len(route_finder.graph))


class RouteStopResponse(BaseModel):
    """A stop on a route with the line used to reach it."""

    stationID: str
    lineID: str | None = None
    lineColourHex: str | None = None
    connectionType: str | None = None


class ShortestPathResponse(BaseModel):
    """Response model for shortest path queries."""

    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias="from")
    to: str
    numPaths: int
    distance: int | None = None  # Number of hops in the first path
    paths: list[list[RouteStopResponse]]


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    graph_loaded: bool
    stations: int


def to_response(result: RouteSearchResult) -> ShortestPathResponse:
    """Convert a route search result to the API response shape."""
    return ShortestPathResponse(
        from_=result.departure,
        to=result.destination,
        numPaths=result.num_paths,
        distance=result.distance,
        paths=[
            [
                RouteStopResponse(
                    stationID=stop.station_id,
                    lineID=stop.line_id,
                    lineColourHex=stop.line_colour_hex,
                    connectionType=stop.connection_type,
                )
                for stop in path
            ]
            for path in result.paths
        ],
    )


@app.get("/shortest-path", response_model=ShortestPathResponse)
async def shortest_path(
    from_station: str = Query(default="", alias="from"),
    to_station: str = Query(default="", alias="to"),
) -> ShortestPathResponse:
    """Find up to k equally short routes between two stations."""
    departure = normalize_station_id(from_station)
    destination = normalize_station_id(to_station)

    if not departure or not destination:
        raise HTTPException(status_code=400, detail="Missing 'from' or 'to' query params.")

    if route_finder is None:
        raise HTTPException(status_code=503, detail="Route finder is not loaded yet.")

    try:
        # The worker thread is abandoned, not stopped, when the deadline passes
        with anyio.fail_after(settings.SEARCH_TIMEOUT_SECONDS):
            result = await to_thread.run_sync(
                run_search, route_finder, departure, destination,
                abandon_on_cancel=True,
            )
    except SearchCapacityError:
        logger.warning("route_search_rejected", departure=departure, destination=destination)
        raise HTTPException(status_code=503, detail="Too many route searches in progress")
    except TimeoutError:
        logger.warning(
            "route_search_timeout",
            departure=departure,
            destination=destination,
            timeout=settings.SEARCH_TIMEOUT_SECONDS,
        )
        raise HTTPException(status_code=504, detail="Route search timed out")
    except Exception:
        logger.exception("route_search_failed", departure=departure, destination=destination)
        raise HTTPException(status_code=500, detail="Server error processing route")

    return to_response(result)


@app.get("/stations", response_model=list[str])
async def stations() -> list[str]:
    """List station ids known to the route finder."""
    if route_finder is None:
        return []
    return route_finder.transit_graph.get_stations()


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="ok",
        graph_loaded=route_finder is not None,
        stations=len(route_finder.graph) if route_finder else 0,
    )
