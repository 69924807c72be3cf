"""Service layer for the health module."""

from __future__ import annotations

import logging

from redis.exceptions import RedisError

from job_board.common.logging import log_context
from job_board.db.base import utc_now
from job_board.infra.cache import LATEST_STATS_KEY, CacheClient
from job_board.settings import Settings

from .schemas import HealthResponse

logger = logging.getLogger(__name__)

GREETING = "hello, human 👋!"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class HealthService:
    """Answer the root liveness check and expose the cached stats blob."""

    def __init__(self, *, cache: CacheClient, settings: Settings) -> None:
        self._cache = cache
        self._settings = settings

    async def status(self) -> HealthResponse:
        return HealthResponse(
            greeting=GREETING,
            pong=await self._ping(),
            now=utc_now().strftime(TIMESTAMP_FORMAT),
            version=self._settings.app_version,
        )

    async def latest_stats(self) -> bytes | None:
        """Return the ``latest-stats`` blob exactly as cached, or ``None`` when absent."""

        try:
            raw = await self._cache.get(LATEST_STATS_KEY)
        except RedisError as exc:
            logger.warning("health.stats.unavailable", extra=log_context(error=str(exc)))
            return None
        if raw is None:
            return None
        return raw if isinstance(raw, bytes) else str(raw).encode("utf-8")

    async def _ping(self) -> str | None:
        try:
            reply = await self._cache.ping()
        except RedisError as exc:
            logger.warning("health.ping.failed", extra=log_context(error=str(exc)))
            return None
        if reply is True:
            return "PONG"
        if isinstance(reply, bytes):
            return reply.decode("utf-8", errors="replace")
        return str(reply)


__all__ = ["GREETING", "HealthService"]
