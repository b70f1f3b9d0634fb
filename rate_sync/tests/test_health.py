"""API-level tests for health endpoints."""

from fastapi.testclient import TestClient

from rate_sync.core.config import SyncSettings, get_settings
from rate_sync.main import app

client = TestClient(app)


def test_root_returns_banner():
    """GET / returns the service banner."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Crypto rate sync OK. Use /run to trigger."
    assert data["service"] == "rate-sync"
    assert "version" in data


def test_health_check():
    """GET /health returns healthy status."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_liveness():
    """GET /health/live returns alive status."""
    response = client.get("/health/live")
    assert response.status_code == 200
    assert response.json() == {"status": "alive"}


def test_readiness_when_configured(settings):
    """GET /health/ready reports ready when all credentials are set."""
    app.dependency_overrides[get_settings] = lambda: settings
    try:
        response = client.get("/health/ready")
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"] == {
        "shop_configured": True,
        "pricing_configured": True,
        "run_in_progress": False,
    }
    assert data["missing"] == []


def test_readiness_lists_missing_configuration():
    """GET /health/ready reports not_ready with the missing variables."""
    app.dependency_overrides[get_settings] = lambda: SyncSettings(shop_url="x.myshopify.com")
    try:
        response = client.get("/health/ready")
    finally:
        app.dependency_overrides.clear()

    data = response.json()
    assert data["status"] == "not_ready"
    assert data["checks"]["shop_configured"] is False
    assert data["missing"] == ["SHOP_TOKEN", "CMC_API_KEY"]
