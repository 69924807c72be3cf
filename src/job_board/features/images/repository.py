"""Data access helpers for image catalog records."""

from __future__ import annotations

from typing import Any

from sqlalchemy import Select, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from .filters import ImagesQuery, tag_value
from .models import Image


class ImagesRepository:
    """Encapsulate database access for the image catalog."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def base_query(self, query: ImagesQuery) -> Select[tuple[Image]]:
        """Return the SQL filter for ``query``; name patterns are matched in :meth:`query`."""

        stmt = select(Image).where(Image.infra == query.infra)
        if query.is_default is not None:
            stmt = stmt.where(Image.is_default == query.is_default)
        for key, value in query.tags.items():
            stmt = stmt.where(Image.tags[key].as_string() == tag_value(value))
        stmt = stmt.order_by(Image.id)
        if not query.name:
            stmt = stmt.limit(query.limit)
        return stmt

    async def query(self, query: ImagesQuery) -> list[Image]:
        """Return up to ``query.limit`` images matching ``query`` in id order."""

        result = await self._session.execute(self.base_query(query))
        matches: list[Image] = []
        for image in result.scalars():
            if not query.matches_name(image.name):
                continue
            matches.append(image)
            if len(matches) >= query.limit:
                break
        return matches

    async def get(self, image_id: int) -> Image | None:
        return await self._session.get(Image, image_id)

    async def add(
        self,
        *,
        infra: str,
        name: str,
        is_default: bool = False,
        tags: dict[str, Any] | None = None,
    ) -> Image:
        stored_tags = {str(key): tag_value(value) for key, value in (tags or {}).items()}
        image = Image(infra=infra, name=name, is_default=is_default, tags=stored_tags)
        self._session.add(image)
        await self._session.flush()
        return image

    async def delete(self, image_id: int) -> bool:
        result = await self._session.execute(delete(Image).where(Image.id == image_id))
        return bool(result.rowcount)


__all__ = ["ImagesRepository"]
