"""Tests for the FastAPI web interface."""

import threading
import time

import pytest
from fastapi.testclient import TestClient

from src.pathfinding import RouteFinder, TransitGraph
from src.web import app as app_module


@pytest.fixture
def route_finder(monkeypatch):
    g = TransitGraph()
    g.add_connection("AG10", "AG11", "ride", "AG", "#E57200")
    g.add_connection("AG11", "SP11", "interchange")
    g.add_connection("AG10", "SP10", "ride", "SP", "#721422")
    g.add_connection("SP10", "SP11", "ride", "SP", "#721422")
    finder = RouteFinder(g)
    monkeypatch.setattr(app_module, "route_finder", finder)
    return finder


@pytest.fixture
def client():
    return TestClient(app_module.app)


class TestShortestPath:
    """Tests for GET /shortest-path."""

    def test_routes_found(self, client, route_finder):
        response = client.get("/shortest-path", params={"from": "ag10", "to": " sp11 "})
        assert response.status_code == 200
        body = response.json()
        assert body["from"] == "AG10"
        assert body["to"] == "SP11"
        assert body["numPaths"] == 2
        assert body["distance"] == 2
        assert [[s["stationID"] for s in path] for path in body["paths"]] == [
            ["AG10", "AG11", "SP11"],
            ["AG10", "SP10", "SP11"],
        ]

    def test_stop_metadata(self, client, route_finder):
        body = client.get("/shortest-path", params={"from": "AG10", "to": "SP11"}).json()
        first, second, third = body["paths"][0]
        assert first == {
            "stationID": "AG10",
            "lineID": None,
            "lineColourHex": None,
            "connectionType": None,
        }
        assert second == {
            "stationID": "AG11",
            "lineID": "AG",
            "lineColourHex": "#E57200",
            "connectionType": "ride",
        }
        assert third["connectionType"] == "interchange"
        assert third["lineColourHex"] == "#999999"

    def test_no_route(self, client, route_finder):
        response = client.get("/shortest-path", params={"from": "AG10", "to": "KJ1"})
        assert response.status_code == 200
        assert response.json() == {
            "from": "AG10",
            "to": "KJ1",
            "numPaths": 0,
            "distance": None,
            "paths": [],
        }

    @pytest.mark.parametrize(
        "params",
        [{}, {"from": "AG10"}, {"to": "AG10"}, {"from": "  ", "to": "AG10"}],
    )
    def test_missing_params(self, client, route_finder, params):
        response = client.get("/shortest-path", params=params)
        assert response.status_code == 400
        assert response.json() == {"detail": "Missing 'from' or 'to' query params."}

    def test_not_loaded(self, client, monkeypatch):
        monkeypatch.setattr(app_module, "route_finder", None)
        response = client.get("/shortest-path", params={"from": "A", "to": "B"})
        assert response.status_code == 503

    def test_internal_error(self, client, route_finder, monkeypatch):
        def explode(departure, destination):
            raise RuntimeError("boom")

        monkeypatch.setattr(route_finder, "find_routes", explode)
        response = client.get("/shortest-path", params={"from": "AG10", "to": "SP11"})
        assert response.status_code == 500
        assert response.json() == {"detail": "Server error processing route"}

    def test_timeout(self, client, route_finder, monkeypatch):
        def slow(departure, destination):
            time.sleep(0.5)

        monkeypatch.setattr(route_finder, "find_routes", slow)
        monkeypatch.setattr(app_module.settings, "SEARCH_TIMEOUT_SECONDS", 0.05)
        response = client.get("/shortest-path", params={"from": "AG10", "to": "SP11"})
        assert response.status_code == 504

    def test_rejected_when_all_slots_busy(self, client, route_finder, monkeypatch):
        slots = threading.BoundedSemaphore(1)
        monkeypatch.setattr(app_module, "search_slots", slots)
        slots.acquire()
        try:
            response = client.get("/shortest-path", params={"from": "AG10", "to": "SP11"})
        finally:
            slots.release()
        assert response.status_code == 503
        assert response.json() == {"detail": "Too many route searches in progress"}

    def test_timed_out_search_holds_slot_until_done(self, client, route_finder, monkeypatch):
        slots = threading.BoundedSemaphore(1)
        finish = threading.Event()

        def stuck(departure, destination):
            finish.wait(5)

        monkeypatch.setattr(app_module, "search_slots", slots)
        monkeypatch.setattr(route_finder, "find_routes", stuck)
        monkeypatch.setattr(app_module.settings, "SEARCH_TIMEOUT_SECONDS", 0.05)
        params = {"from": "AG10", "to": "SP11"}

        assert client.get("/shortest-path", params=params).status_code == 504
        # The abandoned search is still running and keeps its slot
        assert client.get("/shortest-path", params=params).status_code == 503

        finish.set()
        deadline = time.monotonic() + 2
        while not slots.acquire(blocking=False):
            assert time.monotonic() < deadline
            time.sleep(0.01)
        slots.release()


class TestStationsAndHealth:
    """Tests for GET /stations and GET /health."""

    def test_stations(self, client, route_finder):
        response = client.get("/stations")
        assert response.status_code == 200
        assert response.json() == ["AG10", "AG11", "SP10", "SP11"]

    def test_stations_not_loaded(self, client, monkeypatch):
        monkeypatch.setattr(app_module, "route_finder", None)
        assert client.get("/stations").json() == []

    def test_health(self, client, route_finder):
        assert client.get("/health").json() == {
            "status": "ok",
            "graph_loaded": True,
            "stations": 4,
        }

    def test_startup_loads_sample_network(self, monkeypatch):
        monkeypatch.setattr(app_module, "route_finder", None)
        with TestClient(app_module.app) as client:
            body = client.get("/health").json()
        assert body["graph_loaded"]
        assert body["stations"] > 0


def test_build_route_finder_missing_file(tmp_path):
    finder = app_module.build_route_finder(tmp_path / "missing.csv")
    assert len(finder.graph) == 0
    assert finder.find_routes("A", "B").paths == []
