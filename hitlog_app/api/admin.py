import secrets
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import PlainTextResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from hitlog_app.api.health import ALL_METHODS
from hitlog_app.config import Settings
from hitlog_app.dependencies import get_admin_renderer, get_admin_service, get_settings
from hitlog_app.rendering.admin_renderer import AdminRenderer
from hitlog_app.services.admin_service import AdminService

log = structlog.get_logger(__name__)

router = APIRouter(tags=["admin"])

REALM = "Admin Panel"
security = HTTPBasic(realm=REALM, auto_error=False)


def require_admin(
    credentials: Optional[HTTPBasicCredentials] = Depends(security),
    settings: Settings = Depends(get_settings),
) -> str:
    """HTTP Basic Auth against the configured admin credentials"""
    if credentials is not None:
        user_ok = secrets.compare_digest(
            credentials.username.encode("utf-8"), settings.admin_user.encode("utf-8")
        )
        password_ok = secrets.compare_digest(
            credentials.password.encode("utf-8"), settings.admin_password.encode("utf-8")
        )
        if user_ok and password_ok:
            return credentials.username

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized",
        headers={"WWW-Authenticate": f'Basic realm="{REALM}"'},
    )


@router.api_route("/admin{suffix:path}", methods=ALL_METHODS)
def admin_panel(
    request: Request,
    page: Optional[str] = None,
    ip: Optional[str] = None,
    host: Optional[str] = None,
    _user: str = Depends(require_admin),
    admin_service: AdminService = Depends(get_admin_service),
    renderer: AdminRenderer = Depends(get_admin_renderer),
):
    """
    Admin panel: paginated, filterable hit list with stats and system info.
    
    Query params: page (>= 1), ip (substring), host (exact).
    """
    try:
        report = admin_service.build_report(page=page, ip_filter=ip, host_filter=host)
        return renderer.render(request, report)
    except Exception:
        log.exception("admin_panel_error")
        return PlainTextResponse("Internal Server Error\n", status_code=500)
