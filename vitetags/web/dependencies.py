from __future__ import annotations

from fastapi import Request
from fastapi.templating import Jinja2Templates

from vitetags.application.vite import Vite
from vitetags.infrastructure.config import get_settings


def get_vite(request: Request) -> Vite:
    vite = getattr(request.app.state, "vite", None)
    if vite is None:
        vite = Vite.from_config(get_settings().vite)
        request.app.state.vite = vite
    return vite


def get_templates(request: Request) -> Jinja2Templates:
    return request.app.state.templates
