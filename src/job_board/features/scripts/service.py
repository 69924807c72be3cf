"""Build script retrieval fronted by a content-addressed redis cache."""

from __future__ import annotations

import base64
import binascii
import hashlib
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx
from redis.exceptions import RedisError

from job_board.common.logging import log_context
from job_board.infra.cache import CacheClient
from job_board.settings import Settings

from .registry import BuildApiRegistry, UnknownSiteError

logger = logging.getLogger(__name__)

CACHE_NAMESPACE = "job_scripts"


@dataclass(frozen=True, slots=True)
class BuildScriptError:
    """Upstream failure generating a script; carried back to the caller, not raised."""

    detail: str
    status_code: int | None = None


def serialize_job_data(job_data: Mapping[str, Any]) -> str:
    return json.dumps(job_data, sort_keys=True, separators=(",", ":"), default=str)


def script_cache_key(job_data: Mapping[str, Any]) -> str:
    digest = hashlib.sha256(serialize_job_data(job_data).encode("utf-8")).hexdigest()
    return f"{CACHE_NAMESPACE}:{digest}"


class BuildScriptService:
    """Return the build script for a job payload, from cache or the site's build API."""

    def __init__(
        self,
        *,
        cache: CacheClient,
        registry: BuildApiRegistry,
        settings: Settings,
    ) -> None:
        self._cache = cache
        self._registry = registry
        self._caching_enabled = settings.job_script_caching_enabled
        self._ttl = settings.job_script_cache_ttl_seconds
        self._user_agent = f"{settings.app_name}/{settings.app_version}"

    async def get_script(
        self,
        *,
        job_id: str,
        site: str,
        job_data: Mapping[str, Any],
    ) -> str | BuildScriptError:
        key = script_cache_key(job_data)

        if self._caching_enabled:
            cached = await self._read_cache(key)
            if cached is not None:
                logger.debug("scripts.cache.hit", extra=log_context(job_id=job_id, site=site))
                return cached

        result = await self._fetch_upstream(job_id=job_id, site=site, job_data=job_data)
        if isinstance(result, BuildScriptError):
            return result

        await self._write_cache(key, result, job_id=job_id)
        return result

    async def _read_cache(self, key: str) -> str | None:
        try:
            raw = await self._cache.get(key)
        except RedisError as exc:
            logger.warning("scripts.cache.read_failed", extra=log_context(key=key, error=str(exc)))
            return None
        if raw is None:
            return None
        try:
            return base64.b64decode(raw).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as exc:
            logger.warning("scripts.cache.corrupt", extra=log_context(key=key, error=str(exc)))
            return None

    async def _write_cache(self, key: str, script: str, *, job_id: str) -> None:
        encoded = base64.b64encode(script.encode("utf-8")).decode("ascii")
        try:
            await self._cache.setex(key, self._ttl, encoded)
        except RedisError as exc:
            logger.warning(
                "scripts.cache.write_failed",
                extra=log_context(job_id=job_id, key=key, error=str(exc)),
            )

    async def _fetch_upstream(
        self,
        *,
        job_id: str,
        site: str,
        job_data: Mapping[str, Any],
    ) -> str | BuildScriptError:
        try:
            endpoint = self._registry.endpoint(site)
            client = self._registry.client(site)
        except (UnknownSiteError, ValueError) as exc:
            logger.error("scripts.upstream.unconfigured", extra=log_context(job_id=job_id, site=site, error=str(exc)))
            return BuildScriptError(detail=str(exc))

        body = serialize_job_data(job_data)
        try:
            response = await client.post(
                "/script",
                params={"source": "job-board", "job_id": job_id},
                headers={
                    "User-Agent": self._user_agent,
                    "Authorization": endpoint.authorization,
                    "Content-Type": "application/json",
                },
                content=body,
            )
        except httpx.HTTPError as exc:
            logger.error(
                "scripts.upstream.unreachable",
                extra=log_context(
                    job_id=job_id,
                    site=site,
                    error_type=type(exc).__name__,
                    job_data_length=len(body),
                ),
            )
            return BuildScriptError(detail=f"{type(exc).__name__}: {exc}")

        if response.status_code > 299:
            logger.error(
                "scripts.upstream.error",
                extra=log_context(
                    job_id=job_id,
                    site=site,
                    status=response.status_code,
                    job_data_length=len(body),
                ),
            )
            return BuildScriptError(detail=response.text, status_code=response.status_code)

        return response.text


__all__ = [
    "BuildScriptError",
    "BuildScriptService",
    "CACHE_NAMESPACE",
    "script_cache_key",
    "serialize_job_data",
]
