"""job-board FastAPI application entry point."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from .api.routers import api_router
from .common.errors import register_exception_handlers
from .common.lifecycles import create_application_lifespan
from .common.logging import setup_logging
from .common.middleware import register_middleware
from .core.auth import Authenticator
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Return a configured FastAPI application."""

    settings = settings or get_settings()
    setup_logging(settings)

    docs_enabled = settings.api_docs_enabled
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=create_application_lifespan(settings=settings),
    )

    app.state.settings = settings
    app.state.authenticator = Authenticator(settings)
    app.state.cache = None
    app.state.build_api = None
    if not settings.auth_tokens.get_secret_value():
        logger.warning("auth.tokens.unconfigured", extra={"detail": "only guest and bearer auth will succeed"})

    register_middleware(app)
    register_exception_handlers(app)
    app.include_router(api_router)
    return app


__all__ = ["create_app"]

app = create_app()
