"""
Request dispatch middleware.

Order (outermost first):
1. ErrorBoundaryMiddleware - anything unhandled becomes a bare 500
2. HostAllowListMiddleware - unknown Host headers get an empty 444
"""

from typing import Iterable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

log = structlog.get_logger(__name__)

HEALTH_PATH = "/health"
ADMIN_PREFIX = "/admin"
CONNECTION_CLOSED_WITHOUT_RESPONSE = 444


def bypasses_host_check(path: str) -> bool:
    return path == HEALTH_PATH or path.startswith(ADMIN_PREFIX)


class HostAllowListMiddleware(BaseHTTPMiddleware):
    """Only hosts from the allow-list reach the tracking routes"""

    def __init__(self, app, allowed_hosts: Iterable[str]):
        super().__init__(app)
        self.allowed_hosts = frozenset(allowed_hosts)

    async def dispatch(self, request: Request, call_next):
        if bypasses_host_check(request.url.path):
            return await call_next(request)

        host = request.headers.get("host")
        if host not in self.allowed_hosts:
            log.warning("blocked_host", host=host, path=request.url.path)
            return Response(status_code=CONNECTION_CLOSED_WITHOUT_RESPONSE)

        return await call_next(request)


class ErrorBoundaryMiddleware(BaseHTTPMiddleware):
    """Last line of defence: log with traceback, answer a generic 500"""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception:
            log.exception("unhandled_error", method=request.method, path=request.url.path)
            return PlainTextResponse("Internal Server Error\n", status_code=500)
