import pytest
from fastapi import status
from slowapi.middleware import SlowAPIMiddleware

from hr_portal.core.config import settings
from hr_portal.core.limiter import limiter
from hr_portal.main import app

def test_health_check(client):
    """Test the /health endpoint returns 200 and up status."""
    response = client.get("/health")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "up"
    assert "version" in data
    assert "timestamp" in data

def test_liveness_check(client):
    response = client.get("/liveness")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == "up"

def test_readiness_check(client):
    """Test the /readiness endpoint returns 200 and database status."""
    response = client.get("/readiness")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "ready"
    assert data["components"]["database"] == "connected"

def test_root_endpoint(client):
    """Test the API root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    assert "HR Portal API" in response.json()["message"]

def test_request_id_is_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "trace-123"})
    assert response.headers["X-Request-ID"] == "trace-123"
    assert "X-Process-Time" in response.headers

def test_unknown_route_uses_error_envelope(client):
    response = client.get("/api/does-not-exist")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["success"] is False

def test_rate_limit_middleware_is_installed():
    assert any(m.cls is SlowAPIMiddleware for m in app.user_middleware)

@pytest.fixture
def live_limiter(monkeypatch):
    monkeypatch.setattr(limiter, "enabled", True)
    limiter.reset()
    yield limiter
    limiter.reset()

def test_default_rate_limit_applies_to_every_route(client, live_limiter):
    for _ in range(settings.rate_limit_per_minute):
        assert client.get("/health").status_code == status.HTTP_200_OK
    response = client.get("/health")
    assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
