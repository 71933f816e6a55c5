"""Tests for the health endpoint and the health checker."""

from datetime import datetime

from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from main import create_app
from hitlog_app.services.health_checker import HealthChecker
from hitlog_app.storage.strategies import InMemoryHitStorage
from conftest import FakeMetricsProbe


class UnreachableStorage(InMemoryHitStorage):
    """Storage whose connectivity probe always fails"""

    def ping(self) -> None:
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))


def test_health_check_storage_connected(client: TestClient):
    """Health check returns 200 when storage is reachable."""
    response = client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"] == "connected"
    assert data["version"] == "1.0.0"
    assert datetime.fromisoformat(data["timestamp"]).tzinfo is not None


def test_health_check_storage_down(settings):
    """Health check returns 503 when storage is unreachable."""
    app = create_app(settings, storage=UnreachableStorage(), metrics_probe=FakeMetricsProbe())

    with TestClient(app) as client:
        response = client.get("/health")

    assert response.status_code == 503
    data = response.json()
    assert data["status"] == "unhealthy"
    assert data["database"] == "disconnected"
    assert data["timestamp"]


def test_health_checker_converts_errors():
    assert HealthChecker(InMemoryHitStorage()).check().status == "ok"

    result = HealthChecker(UnreachableStorage()).check()
    assert result.status == "error"
    assert result.storage == "disconnected"
    assert not result.ok
