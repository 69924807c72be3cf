"""Service layer for the image catalog."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from job_board.common.logging import log_context

from .filters import ImagesQuery
from .models import Image
from .repository import ImagesRepository
from .schemas import ImageCreate

logger = logging.getLogger(__name__)


def default_query(query: ImagesQuery) -> ImagesQuery:
    """The lookup used when ``query`` matches nothing: the infra's default images."""

    return ImagesQuery(infra=query.infra, is_default=True, limit=query.limit)


class ImagesService:
    """List, search, register and remove images.

    Listing and search fall back to the infra's default images when nothing
    matches, so a worker asking for an unknown image still gets one to boot.
    """

    def __init__(self, *, session: AsyncSession) -> None:
        self._session = session
        self._repository = ImagesRepository(session)

    async def list_images(self, query: ImagesQuery) -> list[Image]:
        images = await self._repository.query(query)
        if images:
            return images
        return await self._repository.query(default_query(query))

    async def search(self, queries: Sequence[ImagesQuery]) -> tuple[list[Image], ImagesQuery | None]:
        """Return the images of the first query with results, and that query.

        When no query matches, the default images of the first query's infra
        are returned together with the lookup that found them.
        """

        for query in queries:
            images = await self._repository.query(query)
            if images:
                return images, query
        if not queries:
            return [], None

        fallback = default_query(queries[0])
        images = await self._repository.query(fallback)
        return images, (fallback if images else None)

    async def create_image(self, payload: ImageCreate) -> Image:
        image = await self._repository.add(
            infra=payload.infra,
            name=payload.name,
            is_default=payload.is_default,
            tags=payload.tags,
        )
        await self._session.commit()
        logger.info(
            "images.create",
            extra=log_context(infra=image.infra, image_id=image.id, image_name=image.name),
        )
        return image

    async def delete_image(self, image_id: int) -> None:
        deleted = await self._repository.delete(image_id)
        await self._session.commit()
        if deleted:
            logger.info("images.delete", extra=log_context(image_id=image_id))


__all__ = ["ImagesService", "default_query"]
