"""
Tests for the feed HTTP API.
"""

import pytest
from fastapi.testclient import TestClient

from api.main import app
from feed.errors import NetworkError
from feed.session import FeedSession

from helpers import ScriptedSource, make_record


@pytest.fixture
def use_source(monkeypatch):
    """Mount the API on a scripted source instead of the configured one."""
    def install(source):
        monkeypatch.setattr(
            FeedSession, "from_settings",
            classmethod(lambda cls, settings: cls(source, interval=3600)),
        )
        return source

    return install


@pytest.fixture
def demo_client(monkeypatch):
    monkeypatch.delenv("FEED_SOURCE_URL", raising=False)
    monkeypatch.setenv("FEED_REFRESH_INTERVAL", "3600")
    with TestClient(app) as client:
        yield client


class TestReads:

    def test_root_lists_endpoints(self, demo_client):
        data = demo_client.get("/").json()
        assert "/feed" in data["endpoints"]

    def test_feed_after_startup(self, demo_client):
        response = demo_client.get("/feed")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "success"
        assert data["error"] is None
        assert data["total"] == 3
        assert data["last_updated"] is not None
        assert [c["count"] for c in data["counts"]] == [1, 1, 1]
        assert [i["category"] for i in data["incidents"]] == ["Theft", "Assault", "Burglary"]

    def test_filters(self, demo_client):
        data = demo_client.get("/filters").json()

        assert data["categories"] == ["Theft", "Assault", "Burglary"]
        assert data["enabled"] == {"Theft": True, "Assault": True, "Burglary": True}

    def test_incidents_and_counts(self, demo_client):
        incidents = demo_client.get("/incidents").json()
        counts = demo_client.get("/counts").json()

        assert incidents[0]["description"] == "Stolen bicycle reported"
        assert incidents[0]["lat"] == 30.2672
        assert counts[0] == {"category": "Theft", "count": 1, "enabled": True}


class TestCommands:

    def test_toggle_hides_category(self, demo_client):
        data = demo_client.post("/filters/Theft/toggle").json()

        assert data["total"] == 2
        assert data["filters"]["enabled"]["Theft"] is False
        theft = next(c for c in data["counts"] if c["category"] == "Theft")
        assert theft == {"category": "Theft", "count": 0, "enabled": False}

        again = demo_client.post("/filters/Theft/toggle").json()
        assert again["total"] == 3

    def test_toggle_unknown_category(self, demo_client):
        response = demo_client.post("/filters/Arson/toggle")
        assert response.status_code == 404

    def test_refresh(self, demo_client):
        data = demo_client.post("/refresh").json()
        assert data["status"] == "success"
        assert data["total"] == 3


class TestFailures:

    def test_error_is_reported_next_to_previous_data(self, use_source):
        use_source(ScriptedSource(
            [make_record("1", "Theft"), make_record("2", "Burglary")],
            NetworkError("Could not reach incident source"),
        ))

        with TestClient(app) as client:
            data = client.post("/refresh").json()

        assert data["status"] == "error"
        assert data["error"] == "Could not reach incident source"
        assert data["consecutive_failures"] == 1
        assert data["total"] == 2
        assert [i["id"] for i in data["incidents"]] == ["1", "2"]

    def test_startup_failure_still_serves(self, use_source):
        use_source(ScriptedSource(NetworkError("offline")))

        with TestClient(app) as client:
            data = client.get("/feed").json()

        assert data["status"] == "error"
        assert data["incidents"] == []
        assert [c["count"] for c in data["counts"]] == [0, 0, 0]

    def test_shutdown_closes_source(self, use_source):
        source = use_source(ScriptedSource([]))

        with TestClient(app):
            pass

        assert source.closed
