"""Transit network graph built from station connection data."""

import csv
from dataclasses import dataclass
from pathlib import Path

import networkx as nx
import structlog

logger = structlog.get_logger(__name__)

RIDE = "ride"
INTERCHANGE = "interchange"
CONNECTION_TYPES = (RIDE, INTERCHANGE)

# Colour used for walking transfers and rides with no known line
DEFAULT_LINE_COLOUR = "#999999"


@dataclass(frozen=True)
class EdgeInfo:
    """Line metadata carried by a connection between two stations."""

    line_id: str | None
    line_colour_hex: str
    connection_type: str


def normalize_station_id(raw: object) -> str:
    """Normalize a station identifier (trimmed, uppercase)."""
    if raw is None:
        return ""
    return str(raw).strip().upper()


class TransitGraph:
    """
    Graph representation of a rail transit network.

    Nodes are normalized station ids, edges are undirected connections.
    Each edge keeps the line it belongs to and the colour used to draw it;
    interchange edges are walking transfers with no line.
    """

    def __init__(self):
        """Initialize empty graph."""
        self.graph = nx.Graph()

    def add_connection(
        self,
        from_station: str,
        to_station: str,
        connection_type: str,
        line_id: str | None = None,
        line_colour_hex: str | None = None,
    ) -> bool:
        """
        Add a bidirectional connection between two stations.

        Only ride and interchange connections are kept. If the pair is
        already connected, the existing metadata is left untouched.

        Returns:
            True if a new connection was added
        """
        a = normalize_station_id(from_station)
        b = normalize_station_id(to_station)
        connection_type = (connection_type or "").strip().lower()

        if connection_type not in CONNECTION_TYPES:
            return False
        if not a or not b or a == b:
            return False

        if self.graph.has_edge(a, b):
            return False

        if connection_type == INTERCHANGE:
            line_id = None
            line_colour_hex = DEFAULT_LINE_COLOUR
        else:
            line_id = (line_id or "").strip() or None
            line_colour_hex = (line_colour_hex or "").strip() or DEFAULT_LINE_COLOUR

        self.graph.add_edge(
            a,
            b,
            line_id=line_id,
            line_colour_hex=line_colour_hex,
            connection_type=connection_type,
        )
        return True

    def load_connections(self, filepath: str | Path) -> int:
        """
        Load connections as edges from CSV.

        Expected columns: fromstationid, tostationid, connectiontype
        Optional columns: lineid, linecolourhex

        Rows are added sorted by (from, to) station id so that neighbour
        order, and therefore route order, does not depend on file order.

        Returns:
            Number of connections added
        """
        filepath = Path(filepath)
        rows = []
        skipped = 0

        with open(filepath, encoding="utf-8") as f:
            reader = csv.DictReader(f)
            for row in reader:
                try:
                    rows.append((
                        normalize_station_id(row["fromstationid"]),
                        normalize_station_id(row["tostationid"]),
                        row["connectiontype"],
                        row.get("lineid"),
                        row.get("linecolourhex"),
                    ))
                except KeyError:
                    skipped += 1
                    continue

        added = 0
        duplicates = 0
        for from_station, to_station, connection_type, line_id, colour in sorted(
            rows, key=lambda r: (r[0], r[1])
        ):
            if self.graph.has_edge(from_station, to_station):
                duplicates += 1
            elif self.add_connection(from_station, to_station, connection_type, line_id, colour):
                added += 1
            else:
                skipped += 1

        logger.info(
            "connections_loaded",
            path=str(filepath),
            added=added,
            duplicates=duplicates,
            skipped=skipped,
            stations=len(self.graph),
        )
        return added

    def adjacency(self) -> dict[str, list[str]]:
        """Snapshot of the graph as station id -> neighbour ids."""
        return {station: list(self.graph.neighbors(station)) for station in self.graph.nodes()}

    def get_stations(self) -> list[str]:
        """Get sorted list of all station ids."""
        return sorted(self.graph.nodes())

    def has_station(self, station: str) -> bool:
        """Check if a station exists in the graph."""
        return normalize_station_id(station) in self.graph

    def get_edge_info(self, station1: str, station2: str) -> EdgeInfo | None:
        """Get line metadata for a connection, or None if not connected."""
        a = normalize_station_id(station1)
        b = normalize_station_id(station2)
        if not self.graph.has_edge(a, b):
            return None
        data = self.graph[a][b]
        return EdgeInfo(
            line_id=data.get("line_id"),
            line_colour_hex=data.get("line_colour_hex", DEFAULT_LINE_COLOUR),
            connection_type=data.get("connection_type", INTERCHANGE),
        )

    def __contains__(self, station: object) -> bool:
        return normalize_station_id(station) in self.graph

    def __len__(self) -> int:
        """Return number of stations."""
        return len(self.graph)
