"""
FastAPI dependencies for dependency injection.

create_app() puts the long-lived objects (settings, storage gateway,
metrics probe, renderer) on ``app.state``; the services below are cheap,
stateless, and built per request from those.

Pattern: Dependency Injection
- Services receive storage and settings through their constructor
- Tests swap implementations via create_app() arguments
"""

from datetime import datetime

from fastapi import Depends, Request

from hitlog_app.config import Settings
from hitlog_app.rendering.admin_renderer import AdminRenderer
from hitlog_app.services.admin_service import AdminService
from hitlog_app.services.health_checker import HealthChecker
from hitlog_app.services.hit_recorder import HitRecorder
from hitlog_app.services.metrics_probe import MetricsProbe
from hitlog_app.services.stats_aggregator import StatsAggregator
from hitlog_app.services.system_info import SystemInfoCollector
from hitlog_app.storage.strategies import HitStorageStrategy


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> HitStorageStrategy:
    return request.app.state.storage


def get_metrics_probe(request: Request) -> MetricsProbe:
    return request.app.state.metrics_probe


def get_started_at(request: Request) -> datetime:
    return request.app.state.started_at


def get_admin_renderer(request: Request) -> AdminRenderer:
    return request.app.state.admin_renderer


def get_hit_recorder(storage: HitStorageStrategy = Depends(get_storage)) -> HitRecorder:
    return HitRecorder(storage)


def get_health_checker(storage: HitStorageStrategy = Depends(get_storage)) -> HealthChecker:
    return HealthChecker(storage)


def get_stats_aggregator(
    storage: HitStorageStrategy = Depends(get_storage),
    settings: Settings = Depends(get_settings),
) -> StatsAggregator:
    return StatsAggregator(storage, settings.stats_timezone)


def get_system_info_collector(
    settings: Settings = Depends(get_settings),
    health_checker: HealthChecker = Depends(get_health_checker),
    probe: MetricsProbe = Depends(get_metrics_probe),
    storage: HitStorageStrategy = Depends(get_storage),
    started_at: datetime = Depends(get_started_at),
) -> SystemInfoCollector:
    return SystemInfoCollector(settings, health_checker, probe, storage, started_at)


def get_admin_service(
    storage: HitStorageStrategy = Depends(get_storage),
    stats: StatsAggregator = Depends(get_stats_aggregator),
    system_info: SystemInfoCollector = Depends(get_system_info_collector),
) -> AdminService:
    """
    Get AdminService with all dependencies injected.
    
    Controller depends on service; service depends on the storage gateway.
    """
    return AdminService(storage=storage, stats=stats, system_info=system_info)
