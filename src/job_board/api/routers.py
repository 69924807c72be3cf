"""API router composition for the job-board application."""

from __future__ import annotations

from fastapi import APIRouter

from job_board.features.health.router import router as health_router
from job_board.features.images.router import router as images_router
from job_board.features.jobs.router import router as jobs_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(jobs_router)
api_router.include_router(images_router)

__all__ = ["api_router"]
