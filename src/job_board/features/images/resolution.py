"""Pick the image a job runs on from its ``config`` descriptor.

A job's config is turned into an ordered list of candidate tag sets, most
specific first. Each candidate becomes an :class:`ImagesQuery` scoped to the
requested infra and the name of the first image found wins.

Order:

* the cumulative tag set of every default-tier candidate (default images only)
* cascade tiers, any image::

    osx_image + os=osx        (Apple os only)
    dist + group + language
    dist + language           (non-Apple os only)
    group + language
    os + language
    os + dist

* default tier, default images only: language, osx_image (Apple os only),
  dist, group, os
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from job_board.common.logging import log_context

from .filters import ImagesQuery
from .repository import ImagesRepository

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_NAME = "default"
APPLE_OSES = frozenset({"osx", "macos"})


class JobConfig:
    """Read-only view over a job's loosely-typed ``config`` document."""

    def __init__(self, raw: Mapping[str, Any] | None) -> None:
        self._raw: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}

    def value(self, key: str) -> str:
        raw = self._raw.get(key)
        return "" if raw is None else str(raw).strip()

    def has(self, *keys: str) -> bool:
        return all(self.value(key) for key in keys)

    @property
    def is_apple(self) -> bool:
        return self.value("os") in APPLE_OSES

    @property
    def language_key(self) -> str:
        return f"language_{self.value('language')}"


TagBuilder = Callable[[JobConfig], dict[str, str] | None]


def _apple_image(config: JobConfig) -> dict[str, str] | None:
    if config.is_apple and config.has("osx_image"):
        return {"osx_image": config.value("osx_image"), "os": "osx"}
    return None


def _dist_group_language(config: JobConfig) -> dict[str, str] | None:
    if config.has("dist", "group", "language"):
        return {
            "dist": config.value("dist"),
            "group": config.value("group"),
            config.language_key: "true",
        }
    return None


def _dist_language(config: JobConfig) -> dict[str, str] | None:
    if config.has("dist", "language") and not config.is_apple:
        return {"dist": config.value("dist"), config.language_key: "true"}
    return None


def _group_language(config: JobConfig) -> dict[str, str] | None:
    if config.has("group", "language"):
        return {"group": config.value("group"), config.language_key: "true"}
    return None


def _os_language(config: JobConfig) -> dict[str, str] | None:
    if config.has("os", "language"):
        return {"os": config.value("os"), config.language_key: "true"}
    return None


def _os_dist(config: JobConfig) -> dict[str, str] | None:
    if config.has("os", "dist"):
        return {"os": config.value("os"), "dist": config.value("dist")}
    return None


def _language_only(config: JobConfig) -> dict[str, str] | None:
    return {config.language_key: "true"} if config.has("language") else None


def _apple_image_only(config: JobConfig) -> dict[str, str] | None:
    if config.is_apple and config.has("osx_image"):
        return {"osx_image": config.value("osx_image")}
    return None


def _single(key: str) -> TagBuilder:
    def build(config: JobConfig) -> dict[str, str] | None:
        return {key: config.value(key)} if config.has(key) else None

    build.__name__ = f"_{key}_only"
    return build


CASCADE_TIERS: tuple[TagBuilder, ...] = (
    _apple_image,
    _dist_group_language,
    _dist_language,
    _group_language,
    _os_language,
    _os_dist,
)

DEFAULT_TIERS: tuple[TagBuilder, ...] = (
    _language_only,
    _apple_image_only,
    _single("dist"),
    _single("group"),
    _single("os"),
)


@dataclass(frozen=True, slots=True)
class CandidateTags:
    tags: dict[str, str]
    is_default: bool


def candidate_tag_sets(config: Mapping[str, Any] | None) -> list[CandidateTags]:
    view = JobConfig(config)

    cascade = [
        CandidateTags(tags=tags, is_default=False)
        for tags in (builder(view) for builder in CASCADE_TIERS)
        if tags
    ]

    full_tag_set: dict[str, str] = {}
    defaults: list[CandidateTags] = []
    for builder in DEFAULT_TIERS:
        tags = builder(view)
        if not tags:
            continue
        full_tag_set.update(tags)
        defaults.append(CandidateTags(tags=tags, is_default=True))

    head = [CandidateTags(tags=full_tag_set, is_default=True)] if full_tag_set else []
    return head + cascade + defaults


def build_queries(config: Mapping[str, Any] | None, infra: str, *, limit: int = 1) -> list[ImagesQuery]:
    return [
        ImagesQuery(
            infra=infra,
            tags=candidate.tags,
            is_default=True if candidate.is_default else None,
            limit=limit,
        )
        for candidate in candidate_tag_sets(config)
    ]


class ImageResolver:
    """Evaluate the candidate queries in order against the image catalog."""

    def __init__(self, repository: ImagesRepository) -> None:
        self._repository = repository

    async def resolve(self, config: Mapping[str, Any] | None, infra: str) -> str:
        for query in build_queries(config, infra):
            images = await self._repository.query(query)
            if images:
                logger.debug(
                    "images.resolve.match",
                    extra=log_context(infra=infra, image=images[0].name, query=query.to_query_string()),
                )
                return images[0].name

        logger.debug("images.resolve.fallback", extra=log_context(infra=infra))
        return DEFAULT_IMAGE_NAME


__all__ = [
    "APPLE_OSES",
    "CASCADE_TIERS",
    "CandidateTags",
    "DEFAULT_IMAGE_NAME",
    "DEFAULT_TIERS",
    "ImageResolver",
    "JobConfig",
    "build_queries",
    "candidate_tag_sets",
]
