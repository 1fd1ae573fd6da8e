"""
Tests for health check endpoints.
"""
from fakes import FakeNotifier
from tripmate.main import app
from tripmate.services.messaging import get_notifier


async def test_health_endpoint_returns_ok(client):
    """The /health endpoint reports the database and messaging state."""
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["database"] == "healthy"
    assert data["messaging"] == "configured"


async def test_health_reports_unconfigured_messaging(client):
    app.dependency_overrides[get_notifier] = lambda: FakeNotifier(configured=False)
    response = await client.get("/health")

    assert response.json()["messaging"] == "not configured"


async def test_health_needs_no_identity(client):
    response = await client.get("/health", headers={"X-User-Id": ""})
    assert response.status_code == 200


async def test_ping(client):
    response = await client.get("/ping")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    assert response.json() == {"status": "ok"}
