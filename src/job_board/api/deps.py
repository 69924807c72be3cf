"""Service factories used by API routers.

This module should be the single place routers import per-request service
constructors from. Process-wide collaborators (settings, redis client, build
API registry) live on ``app.state`` and are created by the app lifespan.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from job_board.db import get_db_session
from job_board.features.health.service import HealthService
from job_board.features.images.service import ImagesService
from job_board.features.jobs.service import JobsService
from job_board.features.scripts import BuildApiRegistry, BuildScriptService
from job_board.infra.cache import CacheClient
from job_board.settings import Settings

SessionDep = Annotated[AsyncSession, Depends(get_db_session)]


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


SettingsDep = Annotated[Settings, Depends(get_app_settings)]


def get_cache(request: Request) -> CacheClient:
    return request.app.state.cache


CacheDep = Annotated[CacheClient, Depends(get_cache)]


def get_build_api_registry(request: Request) -> BuildApiRegistry:
    return request.app.state.build_api


def get_images_service(session: SessionDep) -> ImagesService:
    return ImagesService(session=session)


def get_build_script_service(request: Request, cache: CacheDep, settings: SettingsDep) -> BuildScriptService:
    return BuildScriptService(
        cache=cache,
        registry=get_build_api_registry(request),
        settings=settings,
    )


def get_jobs_service(request: Request, session: SessionDep, settings: SettingsDep) -> JobsService:
    return JobsService(
        session=session,
        settings=settings,
        scripts=get_build_script_service(request, get_cache(request), settings),
    )


def get_health_service(cache: CacheDep, settings: SettingsDep) -> HealthService:
    return HealthService(cache=cache, settings=settings)


__all__ = [
    "CacheDep",
    "SessionDep",
    "SettingsDep",
    "get_app_settings",
    "get_build_api_registry",
    "get_build_script_service",
    "get_cache",
    "get_health_service",
    "get_images_service",
    "get_jobs_service",
]
