from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Response, status

from hitlog_app.config import Settings
from hitlog_app.dependencies import get_health_checker, get_settings
from hitlog_app.schemas.hit import HealthResponse
from hitlog_app.services.health_checker import HealthChecker

router = APIRouter(tags=["health"])

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE", "CONNECT"]


@router.api_route("/health", methods=ALL_METHODS, response_model=HealthResponse)
def health_check(
    response: Response,
    checker: HealthChecker = Depends(get_health_checker),
    settings: Settings = Depends(get_settings),
):
    """
    Health check endpoint.
    
    Returns 200 when storage is reachable, 503 otherwise.
    Not subject to the host allow-list.
    """
    result = checker.check()
    response.status_code = status.HTTP_200_OK if result.ok else status.HTTP_503_SERVICE_UNAVAILABLE
    return HealthResponse(
        status="healthy" if result.ok else "unhealthy",
        version=settings.app_version,
        database=result.storage,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
