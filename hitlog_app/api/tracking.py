from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse, RedirectResponse

from hitlog_app.config import Settings
from hitlog_app.dependencies import get_hit_recorder, get_settings
from hitlog_app.services.hit_recorder import HitRecorder

router = APIRouter(tags=["tracking"])


def _client_host(request: Request):
    return request.client.host if request.client else None


@router.get("/y")
@router.get("/youtube")
def track_and_redirect(
    request: Request,
    recorder: HitRecorder = Depends(get_hit_recorder),
    settings: Settings = Depends(get_settings),
):
    """
    Record the visit, then redirect.
    
    The redirect happens whether or not the hit was stored.
    """
    recorder.record(request.headers, _client_host(request))
    return RedirectResponse(url=settings.redirect_url, status_code=status.HTTP_302_FOUND)


@router.get("/test", response_class=PlainTextResponse)
def echo_client(request: Request):
    """Diagnostic: user agent and remote address, nothing stored"""
    user_agent = request.headers.get("user-agent", "")
    return f"{user_agent}\n{_client_host(request) or ''}"


def default_redirect(request: Request):
    return RedirectResponse(url=get_settings(request).redirect_url, status_code=status.HTTP_302_FOUND)


# Plain Starlette route: methods=None matches every method, including
# ones FastAPI routes cannot list (PROPFIND, custom verbs)
router.add_route("/{path:path}", default_redirect, methods=None, include_in_schema=False)
