from datetime import datetime, timezone
from typing import Optional
import platform

import fastapi
import structlog

from hitlog_app.config import Settings
from hitlog_app.schemas.hit import SystemInfo
from hitlog_app.services.health_checker import HealthChecker
from hitlog_app.services.metrics_probe import MetricsProbe
from hitlog_app.storage.strategies import HitStorageStrategy

log = structlog.get_logger(__name__)


def format_uptime(seconds) -> str:
    """Format seconds as "1d 2h 3m"; minutes are shown when nothing larger is"""
    if not isinstance(seconds, (int, float)) or seconds < 0:
        return "N/A"

    days = int(seconds // 86400)
    hours = int((seconds % 86400) // 3600)
    minutes = int((seconds % 3600) // 60)

    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0 or not parts:
        parts.append(f"{minutes}m")
    return " ".join(parts)


class SystemInfoCollector:
    """
    Builds the system-info record shown on the admin panel.
    
    Database status comes from the HealthChecker; memory and OS come from
    the injected MetricsProbe; nothing here shells out.
    """

    def __init__(
        self,
        settings: Settings,
        health_checker: HealthChecker,
        probe: MetricsProbe,
        storage: HitStorageStrategy,
        started_at: datetime,
    ):
        self.settings = settings
        self.health_checker = health_checker
        self.probe = probe
        self.storage = storage
        self.started_at = started_at

    def _memory_usage(self):
        try:
            memory = self.probe.memory_usage_kb()
        except Exception as e:
            log.warning("memory_usage_unavailable", error=str(e))
            return "N/A"
        return memory if memory is not None else "N/A"

    def _os_version(self) -> str:
        try:
            return self.probe.os_version()
        except Exception as e:
            log.warning("os_version_unavailable", error=str(e))
            return "N/A"

    def _database_version(self) -> str:
        try:
            return self.storage.server_version()
        except Exception as e:
            log.warning("database_version_unavailable", error=str(e))
            return "n/a"

    def collect(self, now: Optional[datetime] = None) -> SystemInfo:
        now = now or datetime.now(timezone.utc)
        return SystemInfo(
            version=self.settings.app_version,
            python_version=platform.python_version(),
            fastapi_version=fastapi.__version__,
            environment=self.settings.environment,
            database_status=self.health_checker.check().storage,
            uptime=format_uptime((now - self.started_at).total_seconds()),
            memory_usage=self._memory_usage(),
            os_version=self._os_version(),
            database_version=self._database_version(),
        )
