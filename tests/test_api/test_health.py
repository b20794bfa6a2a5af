"""Tests for the health endpoint."""

from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

from src.api import dependencies
from src.storage.database import StorageUnavailableError


class TestHealthEndpoint:
    def test_healthy(self, client: TestClient) -> None:
        resp = client.get("/health")

        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "healthy"
        assert data["version"] == "0.1.0"
        assert data["components"]["database"]["status"] == "healthy"
        assert data["components"]["database"]["latency_ms"] >= 0

    def test_query_fails(self, client: TestClient, mock_db) -> None:
        mock_db.health_check = AsyncMock(return_value=False)

        resp = client.get("/health")

        assert resp.status_code == 503
        assert resp.json()["status"] == "unhealthy"

    def test_cannot_connect(self, client: TestClient, monkeypatch) -> None:
        async def _unreachable():
            raise StorageUnavailableError("connection refused")

        monkeypatch.setattr(dependencies, "get_database", _unreachable)

        resp = client.get("/health")

        assert resp.status_code == 503
        database = resp.json()["components"]["database"]
        assert database["status"] == "unhealthy"
        assert "connection refused" in database["details"]["error"]
