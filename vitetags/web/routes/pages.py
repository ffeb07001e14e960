from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from vitetags.application.vite import Vite
from vitetags.infrastructure.config import get_settings
from vitetags.infrastructure.exceptions import (
    ViteError,
    create_user_friendly_error_message,
    log_error_details,
)
from vitetags.infrastructure.logging import get_logger, set_context
from vitetags.web.dependencies import get_templates, get_vite

router = APIRouter(tags=["pages"])
logger = get_logger(__name__)


def _render_index(
    request: Request, templates: Jinja2Templates, vite: Vite, spa_path: str = ""
) -> HTMLResponse:
    set_context(operation="render_page")
    # Each page is an independent render pass.
    vite.flush()
    context = {
        "request": request,
        "app_title": get_settings().app.title,
        "spa_path": spa_path,
    }
    try:
        return templates.TemplateResponse(request, "index.html", context)
    except ViteError as exc:
        error_details = log_error_details(exc, {"path": request.url.path})
        logger.error("Unable to render frontend assets", extra=error_details)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=create_user_friendly_error_message(exc),
        ) from exc


@router.get("/", response_class=HTMLResponse)
async def spa_root(
    request: Request,
    templates: Jinja2Templates = Depends(get_templates),
    vite: Vite = Depends(get_vite),
) -> HTMLResponse:
    return _render_index(request, templates, vite)


@router.get("/{path:path}", response_class=HTMLResponse)
async def spa_catch_all(
    path: str,
    request: Request,
    templates: Jinja2Templates = Depends(get_templates),
    vite: Vite = Depends(get_vite),
) -> HTMLResponse:
    return _render_index(request, templates, vite, spa_path=path)
