"""Process-wide redis client used for script caching and service stats."""

from __future__ import annotations

from typing import Any, Protocol

from redis.asyncio import BlockingConnectionPool, Redis

from job_board.settings import Settings

LATEST_STATS_KEY = "latest-stats"


class CacheClient(Protocol):
    """The subset of the redis client API the service relies on."""

    async def get(self, name: str) -> Any: ...

    async def setex(self, name: str, time: int, value: Any) -> Any: ...

    async def ping(self) -> Any: ...


def create_cache_client(settings: Settings) -> Redis:
    """Return a redis client backed by a bounded, fail-fast connection pool.

    The client owns the pool, so ``aclose()`` also disconnects it. When every
    connection is checked out a caller waits at most
    ``redis_pool_timeout`` seconds before ``redis.ConnectionError`` is raised.
    """

    pool = BlockingConnectionPool.from_url(
        settings.redis_url,
        max_connections=settings.redis_max_connections,
        timeout=settings.redis_pool_timeout,
        socket_timeout=settings.redis_socket_timeout,
        socket_connect_timeout=settings.redis_socket_timeout,
    )
    return Redis.from_pool(pool)


__all__ = ["CacheClient", "LATEST_STATS_KEY", "create_cache_client"]
