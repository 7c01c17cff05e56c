"""FastAPI application factory with lifespan management."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from hookrelay.api.dependencies import Services, build_services, get_app_settings
from hookrelay.api.middleware import setup_exception_handlers, setup_middleware
from hookrelay.api.routers import health, replay, webhooks
from hookrelay.core.config import Settings
from hookrelay.core.constants import APP_VERSION
from hookrelay.core.logging import get_logger, setup_logging

logger = get_logger(__name__)


def create_app(settings: Settings | None = None, services: Services | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    This is the factory function used by uvicorn:
        uvicorn hookrelay.api.app:create_app --factory --reload
    """
    if services is not None:
        settings = services.settings
    settings = settings or get_app_settings()
    setup_logging(settings.log_level)
    services = services or build_services(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        await services.aclose()
        logger.info("app_shutdown")

    app = FastAPI(
        title="HookRelay",
        description="GitHub webhook relay — verified, filtered notifications to Discord channels",
        version=APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.services = services

    # Middleware
    setup_middleware(app)
    setup_exception_handlers(app)

    # API Routes (prefixed with /api/v1)
    app.include_router(health.router, prefix="/api/v1")
    app.include_router(webhooks.router, prefix="/api/v1")
    app.include_router(replay.router, prefix="/api/v1")

    @app.get("/", include_in_schema=False)
    async def root():
        """Root redirect to docs."""
        return RedirectResponse(url="/docs")

    logger.info("app_created", version=APP_VERSION)
    return app
