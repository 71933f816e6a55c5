from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import structlog
from fastapi import FastAPI

from hitlog_app.config import Settings
from hitlog_app.logging_config import configure_logging
from hitlog_app.middleware import ErrorBoundaryMiddleware, HostAllowListMiddleware
from hitlog_app.rendering.admin_renderer import AdminRenderer
from hitlog_app.services.metrics_probe import MetricsProbe, ProcessMetricsProbe
from hitlog_app.storage.factory import HitStorageFactory, HitStorageBackend
from hitlog_app.storage.strategies import HitStorageStrategy
from hitlog_app.api import admin, health, tracking

log = structlog.get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[HitStorageStrategy] = None,
    metrics_probe: Optional[MetricsProbe] = None,
) -> FastAPI:
    """
    Build the application.
    
    Settings are loaded once here and handed to every component through
    app.state; nothing reads configuration from globals afterwards.
    """
    settings = settings or Settings()
    configure_logging(settings.log_level, settings.log_format)
    log.info(
        "configuration_loaded",
        app=settings.app_name,
        version=settings.app_version,
        allowed_hosts=settings.hostnames,
    )

    if storage is None:
        storage = HitStorageFactory.create(HitStorageBackend(settings.storage_backend), settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Schema must exist before the first request is served
        app.state.storage.initialize()
        try:
            yield
        finally:
            app.state.storage.close()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Visit-tracking redirector with an admin reporting panel",
        debug=settings.debug,
        lifespan=lifespan,
        # Every unknown path redirects, so the generated docs stay off
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    app.state.settings = settings
    app.state.storage = storage
    app.state.metrics_probe = metrics_probe or ProcessMetricsProbe()
    app.state.admin_renderer = AdminRenderer()
    app.state.started_at = datetime.now(timezone.utc)

    # Last added runs first: the error boundary wraps the host check
    app.add_middleware(HostAllowListMiddleware, allowed_hosts=settings.hostnames)
    app.add_middleware(ErrorBoundaryMiddleware)

    ######## Include routers (catch-all redirect must stay last)
    app.include_router(health.router)
    app.include_router(admin.router)
    app.include_router(tracking.router)

    return app


app = create_app()
