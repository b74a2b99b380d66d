from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from app.web.templates import DASHBOARD_HTML

router = APIRouter(include_in_schema=False)


@router.get("/", response_class=HTMLResponse)
async def dashboard_page() -> HTMLResponse:
    """Serve the single-page dashboard; it talks to the /v1 API from the browser."""
    return HTMLResponse(DASHBOARD_HTML)
