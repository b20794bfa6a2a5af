"""Tests for X-API-KEY authentication on read endpoints."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from src.api.auth import configured_api_keys, verify_api_key
from src.config.settings import Settings


@pytest.fixture
def keyed_client(app):
    """Client with real API key verification and two configured keys."""
    app.dependency_overrides.pop(verify_api_key, None)
    settings = Settings(api_keys="key-one, key-two")
    with patch("src.api.auth.get_settings", return_value=settings):
        with TestClient(app) as client:
            yield client


class TestApiKey:
    def test_missing_key(self, keyed_client: TestClient) -> None:
        resp = keyed_client.get("/news/stats")

        assert resp.status_code == 401
        assert resp.json()["success"] is False
        assert "X-API-KEY" in resp.json()["error"]

    def test_invalid_key(self, keyed_client: TestClient) -> None:
        resp = keyed_client.get("/news/stats", headers={"X-API-KEY": "wrong"})

        assert resp.status_code == 401
        assert resp.json()["error"] == "Invalid API key"

    def test_valid_key(self, keyed_client: TestClient) -> None:
        resp = keyed_client.get("/news/stats", headers={"X-API-KEY": "key-two"})

        assert resp.status_code == 200

    def test_health_is_open(self, keyed_client: TestClient) -> None:
        assert keyed_client.get("/health").status_code == 200

    def test_dev_mode(self, app) -> None:
        app.dependency_overrides.pop(verify_api_key, None)
        with patch("src.api.auth.get_settings", return_value=Settings(api_keys=None)):
            with TestClient(app) as client:
                assert client.get("/news/stats").status_code == 200


class TestConfiguredApiKeys:
    def test_blank_entries_dropped(self) -> None:
        settings = Settings(api_keys=" a , ,b,")
        with patch("src.api.auth.get_settings", return_value=settings):
            assert configured_api_keys() == {"a", "b"}

    def test_unset(self) -> None:
        with patch("src.api.auth.get_settings", return_value=Settings(api_keys=None)):
            assert configured_api_keys() == set()
