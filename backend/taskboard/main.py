"""Taskboard backend: FastAPI application entry point."""

from contextlib import asynccontextmanager

# configure_structlog must run before other taskboard imports (structlog caches
# the processor chain on first use)
from taskboard.core.config import get_settings
from taskboard.core.logging import configure_structlog

configure_structlog(get_settings())

import structlog

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskboard.api.errors import register_exception_handlers
from taskboard.api.routes import api_router
from taskboard.core.config import Settings
from taskboard.db import close_db, init_db
from taskboard.middleware.correlation import setup_correlation_middleware

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info("taskboard_starting", app_name=settings.app_name, debug=settings.debug)

    await init_db(settings.database_url)
    logger.info("database_ready", backend=settings.database_url.split(":", 1)[0])

    try:
        yield
    finally:
        await close_db()
        logger.info("taskboard_stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the API application.

    Routes live under ``/api``. The interactive docs are only served in debug mode.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Projects and tasks, each visible only to its owner",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_correlation_middleware(app)
    register_exception_handlers(app)
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("taskboard.main:app", host="0.0.0.0", port=8000, reload=get_settings().debug)
