"""FastAPI lifespan helpers for the job-board application."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.routing import Lifespan

from job_board.db import DatabaseConfig, db
from job_board.features.scripts.registry import BuildApiRegistry
from job_board.infra.cache import create_cache_client
from job_board.settings import Settings

logger = logging.getLogger(__name__)


def create_application_lifespan(*, settings: Settings) -> Lifespan[FastAPI]:
    """Return the lifespan that owns the DB engine, redis pool and build API clients.

    Collaborators already present on ``app.state`` are left in place and not
    closed on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        db.init(DatabaseConfig.from_settings(settings))

        owned_cache = getattr(app.state, "cache", None) is None
        if owned_cache:
            app.state.cache = create_cache_client(settings)

        owned_registry = getattr(app.state, "build_api", None) is None
        if owned_registry:
            app.state.build_api = BuildApiRegistry.from_settings(settings)

        logger.info(
            "app.startup",
            extra={
                "version": settings.app_version,
                "sites": ",".join(sorted(settings.build_api_urls)) or "-",
            },
        )
        try:
            yield
        finally:
            if owned_registry:
                await app.state.build_api.aclose()
                app.state.build_api = None
            if owned_cache:
                await app.state.cache.aclose()
                app.state.cache = None
            await db.dispose()
            logger.info("app.shutdown")

    return lifespan


__all__ = ["create_application_lifespan"]
