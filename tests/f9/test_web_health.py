"""Tests for health endpoint (F9)."""

import pytest
from fastapi.testclient import TestClient

from journey.web.api import create_app


@pytest.fixture
def client():
    return TestClient(create_app())


class TestHealthEndpoint:
    """Tests for GET /health."""

    def test_health_returns_ok(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    def test_health_returns_version(self, client):
        data = client.get("/health").json()
        assert data["version"] == "0.1.0"

    def test_health_returns_iso_timestamp(self, client):
        data = client.get("/health").json()
        assert "T" in data["timestamp"]

    def test_lifespan_runs_on_startup(self):
        """Startup loads config and templates without failing."""
        with TestClient(create_app()) as client:
            assert client.get("/health").status_code == 200
