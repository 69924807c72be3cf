"""HTTP routes for job allocation and delivery."""

from __future__ import annotations

import json
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Header, Query, Request, Response, status
from fastapi.responses import JSONResponse

from job_board.api.deps import get_jobs_service
from job_board.common.errors import ApiError
from job_board.common.logging import log_context
from job_board.core.auth.dependencies import MemberContextDep

from .exceptions import JobNotFoundError, JobPersistenceError, JobScriptFetchError
from .schemas import AllocationRequest, AllocationResponse
from .service import JobsService, normalize_queue

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["jobs"])

JobsServiceDep = Annotated[JobsService, Depends(get_jobs_service)]


@router.post(
    "",
    response_model=AllocationResponse,
    summary="Allocate a job to a queue",
)
async def allocate_jobs(
    context: MemberContextDep,
    service: JobsServiceDep,
    payload: Annotated[AllocationRequest, Body()],
    queue: Annotated[str | None, Query()] = None,
    origin: Annotated[str | None, Header(alias="From")] = None,
) -> AllocationResponse:
    if queue is None:
        raise ApiError(status_code=status.HTTP_400_BAD_REQUEST, error="missing queue param")
    if origin is None:
        raise ApiError(status_code=status.HTTP_412_PRECONDITION_FAILED, error="missing from header")

    queue_name = normalize_queue(queue)
    allocated: list[str] = []
    if payload.jobs:
        result = await service.allocate(
            job_id=str(payload.jobs[0]),
            queue=queue_name,
            site=context.site,
            processor=origin,
        )
        if result is not None:
            allocated.append(result)

    logger.info(
        "jobs.allocate",
        extra=log_context(site=context.site, queue=queue_name, processor=origin, allocated=len(allocated)),
    )
    return AllocationResponse(jobs=allocated, queue=queue_name)


@router.post(
    "/add",
    status_code=status.HTTP_201_CREATED,
    response_class=Response,
    summary="Create or update a job record",
)
async def add_job(
    request: Request,
    context: MemberContextDep,
    service: JobsServiceDep,
) -> Response:
    try:
        document: Any = json.loads(await request.body())
    except ValueError as exc:
        raise ApiError(status_code=status.HTTP_400_BAD_REQUEST, error="invalid job document") from exc
    if not isinstance(document, dict):
        raise ApiError(status_code=status.HTTP_400_BAD_REQUEST, error="invalid job document")

    try:
        await service.create_or_update(document, site=context.site)
    except JobPersistenceError as exc:
        logger.error(
            "jobs.add.rejected",
            extra=log_context(job_id=str(document.get("id", "<unknown>")), site=context.site, error=str(exc)),
        )
        raise ApiError(status_code=status.HTTP_400_BAD_REQUEST, error=str(exc)) from exc

    logger.info("jobs.add", extra=log_context(job_id=str(document["id"]), site=context.site))
    return Response(status_code=status.HTTP_201_CREATED)


@router.get(
    "/{job_id}",
    summary="Fetch a job for delivery to a worker",
)
async def fetch_job(
    job_id: str,
    context: MemberContextDep,
    service: JobsServiceDep,
) -> JSONResponse:
    try:
        job = await service.fetch(job_id=job_id, site=context.site, infra=context.infra)
    except JobNotFoundError as exc:
        raise ApiError(status_code=status.HTTP_404_NOT_FOUND, error="no such job") from exc
    except JobScriptFetchError as exc:
        raise ApiError(
            status_code=status.HTTP_424_FAILED_DEPENDENCY,
            error=str(exc),
            extra={"upstream_error": exc.upstream_error},
        ) from exc
    return JSONResponse(content=job)


@router.delete(
    "/{job_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Remove a job record",
)
async def delete_job(
    job_id: str,
    context: MemberContextDep,
    service: JobsServiceDep,
) -> Response:
    await service.delete(job_id=job_id, site=context.site)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
