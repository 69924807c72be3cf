"""Unauthenticated liveness and stats endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from job_board.api.deps import get_health_service

from .schemas import HealthResponse
from .service import HealthService

router = APIRouter(tags=["health"])

HealthServiceDep = Annotated[HealthService, Depends(get_health_service)]


@router.get(
    "/",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Service liveness greeting",
)
async def read_health(service: HealthServiceDep) -> HealthResponse:
    return await service.status()


@router.get(
    "/latest-stats",
    status_code=status.HTTP_200_OK,
    response_class=Response,
    summary="Most recent cached service stats",
)
async def read_latest_stats(service: HealthServiceDep) -> Response:
    blob = await service.latest_stats()
    return Response(content=blob or b"", media_type="application/json")


__all__ = ["router"]
