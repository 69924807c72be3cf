"""Data access helpers for job records."""

from __future__ import annotations

from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Job


class JobsRepository:
    """Encapsulate database access for job records."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, *, job_id: str, site: str) -> Job | None:
        stmt = select(Job).where(Job.job_id == job_id, Job.site == site)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert(
        self,
        *,
        job_id: str,
        site: str,
        data: dict[str, Any],
        queue: str | None = None,
    ) -> Job:
        """Insert or replace the document stored for ``(job_id, site)``."""

        job = await self.get(job_id=job_id, site=site)
        if job is None:
            job = Job(job_id=job_id, site=site, data=data, queue=queue)
            self._session.add(job)
        else:
            job.data = data
            if queue is not None:
                job.queue = queue
        await self._session.flush()
        return job

    async def delete(self, *, job_id: str, site: str) -> bool:
        stmt = delete(Job).where(Job.job_id == job_id, Job.site == site)
        result = await self._session.execute(stmt)
        return bool(result.rowcount)


__all__ = ["JobsRepository"]
