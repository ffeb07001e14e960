from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates

from vitetags.application.vite import Vite
from vitetags.infrastructure.config import Settings, get_settings
from vitetags.infrastructure.logging import get_logger, setup_logging
from vitetags.web.routes import api, pages
from vitetags.web.templating import register_vite

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"

logger = get_logger(__name__)


def create_application(settings: Settings | None = None, vite: Vite | None = None) -> FastAPI:
    settings = settings or get_settings()

    setup_logging(
        level=settings.logging.level,
        log_file=settings.logging.file_path,
        structured=settings.logging.structured,
        enable_console=settings.logging.console_enabled,
    )

    vite = vite or Vite.from_config(settings.vite)
    template_dir = settings.app.template_directory or str(TEMPLATE_DIR)
    templates = register_vite(Jinja2Templates(directory=template_dir), vite)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        vite.clear_manifest_cache()
        logger.info(
            "Serving frontend from %s (hot=%s)", vite.build_directory, vite.is_running_hot()
        )
        yield

    app = FastAPI(
        title=settings.app.title,
        version=settings.app.version,
        debug=settings.app.debug,
        lifespan=lifespan,
    )
    app.state.vite = vite
    app.state.templates = templates

    build_url = "/" + vite.build_directory.strip("/")
    app.mount(
        build_url,
        StaticFiles(directory=vite.build_directory, check_dir=False),
        name="build",
    )

    app.include_router(api.router)
    app.include_router(pages.router)

    return app


def get_app() -> FastAPI:
    return create_application()
