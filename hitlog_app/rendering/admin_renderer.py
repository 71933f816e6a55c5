"""
HTML rendering for the admin panel.

Pure formatting: receives a finished AdminReport and fills the Jinja2
template. Autoescaping is on for .html templates, so every stored field
(IP text, user agent, referer, host) is escaped on output.
"""

from pathlib import Path

from fastapi import Request
from fastapi.templating import Jinja2Templates
from starlette.responses import HTMLResponse

from hitlog_app.schemas.hit import AdminReport

TEMPLATES_DIR = Path(__file__).parent / "templates"


class AdminRenderer:
    def __init__(self, templates: Jinja2Templates = None):
        self.templates = templates or Jinja2Templates(directory=str(TEMPLATES_DIR))

    def render(self, request: Request, report: AdminReport) -> HTMLResponse:
        return self.templates.TemplateResponse(
            request,
            "admin/index.html",
            {"report": report, "stats": report.stats, "system_info": report.system_info},
            media_type="text/html; charset=utf-8",
        )
