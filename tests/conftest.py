"""
Test configuration and fixtures for the hit logger.
This centralizes all test setup, making individual tests clean.
"""

from datetime import datetime, timezone
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from main import create_app
from hitlog_app.config import Settings
from hitlog_app.schemas.hit import HitCreate
from hitlog_app.services.metrics_probe import MetricsProbe
from hitlog_app.storage.factory import HitStorageFactory, HitStorageBackend

ALLOWED_HOST = "allowed.test"
REDIRECT_URL = "https://example.com/landing"
ADMIN_AUTH = ("admin", "s3cret")


class FakeMetricsProbe(MetricsProbe):
    """Deterministic process metrics"""

    def memory_usage_kb(self) -> Optional[int]:
        return 2048

    def os_version(self) -> str:
        return "TestOS 1.0 x86_64"


def make_hit(storage, ip="10.0.0.1", host=ALLOWED_HOST, created_at=None, **fields) -> int:
    """Insert a hit directly through the storage gateway"""
    hit = HitCreate(
        ip=ip,
        host=host,
        created_at=created_at or datetime.now(timezone.utc),
        **fields,
    )
    return storage.insert_hit(hit)


@pytest.fixture(scope="function")
def settings():
    """Settings isolated from the environment and any .env file"""
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        allowed_hosts=f"{ALLOWED_HOST}, other.test",
        redirect_url=REDIRECT_URL,
        admin_user=ADMIN_AUTH[0],
        admin_password=ADMIN_AUTH[1],
        log_level="DEBUG",
    )


@pytest.fixture(scope="function")
def storage(settings):
    """
    Fresh in-memory SQLite storage for each test.
    This ensures tests are isolated and don't affect each other.
    """
    storage = HitStorageFactory.create(HitStorageBackend.SQL, settings)
    storage.initialize()
    try:
        yield storage
    finally:
        storage.close()


@pytest.fixture(scope="function")
def app(settings, storage):
    return create_app(settings, storage=storage, metrics_probe=FakeMetricsProbe())


@pytest.fixture(scope="function")
def client(app):
    """
    Test client whose requests carry an allowed Host header.
    This is the main fixture that tests will use.
    """
    with TestClient(app, base_url=f"http://{ALLOWED_HOST}") as test_client:
        yield test_client
    
    # Clean up overrides
    app.dependency_overrides.clear()
