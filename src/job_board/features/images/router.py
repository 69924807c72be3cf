"""HTTP routes for the image catalog."""

from __future__ import annotations

import json
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from job_board.api.deps import get_images_service
from job_board.common.errors import ApiError
from job_board.core.auth.dependencies import ContextDep, MemberContextDep

from .filters import ImagesQuery, parse_bool, parse_tags, query_from_params, query_from_string
from .schemas import ImageCreate, ImageOut, ImagesEnvelope, ImagesMeta
from .service import ImagesService

router = APIRouter(prefix="/images", tags=["images"])

ImagesServiceDep = Annotated[ImagesService, Depends(get_images_service)]


def _bad_request(message: str) -> ApiError:
    return ApiError(status_code=status.HTTP_400_BAD_REQUEST, error=message)


@router.get(
    "",
    response_model=ImagesEnvelope,
    response_model_exclude_none=True,
    summary="List images for an infrastructure",
)
async def list_images(
    _context: ContextDep,
    service: ImagesServiceDep,
    infra: Annotated[str | None, Query()] = None,
    name: Annotated[str | None, Query()] = None,
    tags: Annotated[str | None, Query()] = None,
    is_default: Annotated[str | None, Query()] = None,
    limit: Annotated[str | None, Query()] = None,
) -> ImagesEnvelope:
    try:
        query = query_from_params(
            {"infra": infra, "name": name, "tags": tags, "is_default": is_default, "limit": limit}
        )
    except ValueError as exc:
        raise _bad_request(str(exc)) from exc
    if query is None:
        raise _bad_request("missing infra param")

    images = await service.list_images(query)
    return ImagesEnvelope(data=[ImageOut.model_validate(image) for image in images])


@router.post(
    "/search",
    response_model=ImagesEnvelope,
    response_model_exclude_none=True,
    summary="Return the images of the first matching query",
)
async def search_images(
    request: Request,
    _context: ContextDep,
    service: ImagesServiceDep,
) -> ImagesEnvelope:
    body = (await request.body()).decode("utf-8", errors="replace")

    queries: list[ImagesQuery] = []
    for line in body.splitlines():
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        try:
            query = query_from_string(line)
        except ValueError as exc:
            raise _bad_request(str(exc)) from exc
        if query is not None:
            queries.append(query)

    images, matched = await service.search(queries)
    meta = ImagesMeta(matching_query=matched.to_query_string() if matched else None)
    return ImagesEnvelope(data=[ImageOut.model_validate(image) for image in images], meta=meta)


async def _registration_payload(request: Request, params: dict[str, str | None]) -> ImageCreate:
    """Read an image registration from query params, or from a JSON body when none are given."""

    if any(value is not None for value in params.values()):
        try:
            data: Any = {
                "infra": params["infra"] or "",
                "name": params["name"] or "",
                "is_default": bool(parse_bool(params["is_default"])),
                "tags": parse_tags(params["tags"]),
            }
        except ValueError as exc:
            raise _bad_request(str(exc)) from exc
    else:
        raw = await request.body()
        try:
            data = json.loads(raw) if raw.strip() else {}
        except ValueError as exc:
            raise _bad_request("invalid image payload") from exc
        if not isinstance(data, dict):
            raise _bad_request("invalid image payload")

    try:
        return ImageCreate.model_validate(data)
    except ValidationError as exc:
        raise RequestValidationError(exc.errors()) from exc


@router.post(
    "",
    response_model=ImagesEnvelope,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    summary="Register an image",
)
async def create_image(
    request: Request,
    _context: MemberContextDep,
    service: ImagesServiceDep,
    infra: Annotated[str | None, Query()] = None,
    name: Annotated[str | None, Query()] = None,
    tags: Annotated[str | None, Query()] = None,
    is_default: Annotated[str | None, Query()] = None,
) -> ImagesEnvelope:
    payload = await _registration_payload(
        request,
        {"infra": infra, "name": name, "tags": tags, "is_default": is_default},
    )
    image = await service.create_image(payload)
    return ImagesEnvelope(data=[ImageOut.model_validate(image)])


@router.delete(
    "/{image_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Remove an image",
)
async def delete_image(
    image_id: int,
    _context: MemberContextDep,
    service: ImagesServiceDep,
) -> Response:
    await service.delete_image(image_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


__all__ = ["router"]
