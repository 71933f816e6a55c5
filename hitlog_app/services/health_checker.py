import structlog

from hitlog_app.schemas.hit import HealthStatus
from hitlog_app.storage.strategies import HitStorageStrategy

log = structlog.get_logger(__name__)


class HealthChecker:
    """Synchronous storage connectivity probe"""

    def __init__(self, storage: HitStorageStrategy):
        self.storage = storage

    def check(self) -> HealthStatus:
        try:
            self.storage.ping()
            return HealthStatus(status="ok", storage="connected")
        except Exception as e:
            log.error("health_check_failed", error=str(e))
            return HealthStatus(status="error", storage="disconnected")
