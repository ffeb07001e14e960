from __future__ import annotations

from collections.abc import Callable
from typing import Any

from fastapi.templating import Jinja2Templates
from markupsafe import Markup

from vitetags.application.vite import Vite


def vite_context(vite: Vite) -> dict[str, Any]:
    """Template helpers bound to one Vite instance."""

    def vite_tags(*entry_points: str, build_directory: str | None = None) -> Markup:
        if entry_points:
            return Markup(vite(entry_points, build_directory))
        return Markup(vite.to_html())

    def vite_asset(asset: str, build_directory: str | None = None) -> str:
        return vite.asset(asset, build_directory)

    def vite_react_refresh() -> Markup:
        return Markup(vite.react_refresh())

    def csp_nonce() -> str:
        return vite.csp_nonce or ""

    helpers: dict[str, Callable[..., Any]] = {
        "vite_tags": vite_tags,
        "vite_asset": vite_asset,
        "vite_react_refresh": vite_react_refresh,
        "csp_nonce": csp_nonce,
    }
    return {"vite": vite, **helpers}


def register_vite(templates: Jinja2Templates, vite: Vite) -> Jinja2Templates:
    templates.env.globals.update(vite_context(vite))
    return templates
