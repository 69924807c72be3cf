"""Job allocation, registration and delivery."""

from __future__ import annotations

import base64
import copy
import logging
import re
from collections.abc import Mapping
from typing import Any

from sqlalchemy.exc import DataError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from job_board.common.logging import log_context
from job_board.core.security.tokens import JobTokenIssuer
from job_board.features.images.repository import ImagesRepository
from job_board.features.images.resolution import ImageResolver
from job_board.features.scripts.service import BuildScriptError, BuildScriptService
from job_board.settings import Settings

from .exceptions import JobNotFoundError, JobPersistenceError, JobScriptFetchError
from .models import JOB_ID_MAX_LENGTH, Job
from .redaction import redact_job
from .repository import JobsRepository

logger = logging.getLogger(__name__)

_QUEUE_PREFIX = re.compile(r"^builds\.")

JOB_TYPE = "job_board_job"


def normalize_queue(name: str) -> str:
    return _QUEUE_PREFIX.sub("", name, count=1)


def expand_job_url(template: str | None, job_id: str) -> str | None:
    """Expand ``{job_id}`` in a per-site URL template, leaving other text alone."""

    if template is None:
        return None
    return template.replace("{job_id}", job_id)


class JobsService:
    """Coordinate the job store, image resolution and build script retrieval."""

    def __init__(
        self,
        *,
        session: AsyncSession,
        settings: Settings,
        scripts: BuildScriptService,
        token_issuer: JobTokenIssuer | None = None,
    ) -> None:
        self._session = session
        self._settings = settings
        self._scripts = scripts
        self._jobs = JobsRepository(session)
        self._resolver = ImageResolver(ImagesRepository(session))
        self._token_issuer = token_issuer or JobTokenIssuer(
            key=settings.jwt_signing_key,
            algorithm=settings.jwt_algorithm,
            ttl=settings.jwt_ttl,
        )

    # ---- Allocation ----

    async def allocate(
        self,
        *,
        job_id: str,
        queue: str,
        site: str,
        processor: str,
    ) -> str | None:
        """Record ``queue``/``processor`` on a known job; ``None`` when unknown."""

        job = await self._jobs.get(job_id=job_id, site=site)
        if job is None:
            logger.info(
                "jobs.allocate.unknown",
                extra=log_context(job_id=job_id, site=site, queue=queue, processor=processor),
            )
            return None

        job.queue = queue
        job.processor = processor
        await self._session.commit()
        return job.job_id

    # ---- Registration ----

    async def create_or_update(self, document: Mapping[str, Any], *, site: str) -> Job:
        """Upsert the document under ``(id, site)`` and return the stored record."""

        raw_id = document.get("id")
        if raw_id is None or str(raw_id).strip() == "":
            raise JobPersistenceError("job document has no id")

        job_id = str(raw_id).strip()
        if len(job_id) > JOB_ID_MAX_LENGTH:
            raise JobPersistenceError(f"job id longer than {JOB_ID_MAX_LENGTH} characters")
        queue = document.get("queue")
        try:
            job = await self._jobs.upsert(
                job_id=job_id,
                site=site,
                data=copy.deepcopy(dict(document)),
                queue=str(queue) if queue is not None else None,
            )
            await self._session.commit()
        except (IntegrityError, DataError) as exc:
            await self._session.rollback()
            logger.error(
                "jobs.add.failed",
                extra=log_context(job_id=job_id, site=site, error=str(exc.orig)),
            )
            raise JobPersistenceError("job could not be stored") from exc
        return job

    # ---- Delivery ----

    async def fetch(self, *, job_id: str, site: str, infra: str = "") -> dict[str, Any]:
        """Assemble the redacted delivery document for one job."""

        ctx = log_context(job_id=job_id, site=site, infra=infra)
        logger.info("jobs.fetch.start", extra=ctx)

        record = await self._jobs.get(job_id=job_id, site=site)
        if record is None:
            raise JobNotFoundError(job_id)

        job: dict[str, Any] = copy.deepcopy(dict(record.data or {}))
        data = job.get("data") if isinstance(job.get("data"), dict) else {}

        script_payload = {
            **data,
            **self._settings.build_config,
            "paranoid": record.queue in self._settings.paranoid_queue_names,
        }
        script = await self._scripts.get_script(job_id=job_id, site=site, job_data=script_payload)
        if isinstance(script, BuildScriptError):
            raise JobScriptFetchError(script.detail)

        job.update(
            {
                "job_script": {
                    "name": "main",
                    "encoding": "base64",
                    "content": base64.b64encode(script.encode("utf-8")).decode("ascii"),
                },
                "job_state_url": self._site_url(self._settings.job_state_urls, site, job_id),
                "log_parts_url": self._site_url(self._settings.log_parts_urls, site, job_id),
                "jwt": self._token_issuer.issue(job_id=job_id, site=site),
                "image_name": await self._resolver.resolve(data.get("config"), infra),
                "@type": JOB_TYPE,
            }
        )
        logger.info("jobs.fetch.success", extra=log_context(**ctx, image_name=job["image_name"]))
        return redact_job(job)

    def _site_url(self, templates: Mapping[str, str], site: str, job_id: str) -> str | None:
        template = templates.get(site)
        if template is None:
            logger.warning("jobs.fetch.url_unconfigured", extra=log_context(job_id=job_id, site=site))
        return expand_job_url(template, job_id)

    # ---- Removal ----

    async def delete(self, *, job_id: str, site: str) -> None:
        deleted = await self._jobs.delete(job_id=job_id, site=site)
        await self._session.commit()
        logger.info("jobs.delete", extra=log_context(job_id=job_id, site=site, deleted=deleted))


__all__ = ["JOB_TYPE", "JobsService", "expand_job_url", "normalize_queue"]
