"""Tests for health check endpoints."""

import pytest
from fastapi.testclient import TestClient

from shoptagger.infrastructure.config import settings
from shoptagger.main import app


@pytest.fixture
def client() -> TestClient:
    """Create test client."""
    return TestClient(app)


def test_health_check(client: TestClient) -> None:
    """Test health endpoint returns healthy status."""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "shoptagger"
    assert "version" in data


def test_readiness_check(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    """Test readiness endpoint reports ready when credentials are set."""
    monkeypatch.setattr(settings, "shopify_shop_domain", "demo.myshopify.com")
    monkeypatch.setattr(settings, "shopify_access_token", "token")

    response = client.get("/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ready", "store_configured": True}


def test_readiness_without_credentials(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Test readiness endpoint reports missing credentials."""
    monkeypatch.setattr(settings, "shopify_access_token", "")

    response = client.get("/ready")
    assert response.status_code == 200
    assert response.json()["store_configured"] is False
