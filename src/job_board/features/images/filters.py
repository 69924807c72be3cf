"""Image lookup descriptors and the query-string form used by the images API."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qs

_TRUE_VALUES = {"1", "true", "t", "yes", "y", "on"}
_FALSE_VALUES = {"0", "false", "f", "no", "n", "off"}


@dataclass(frozen=True, slots=True)
class ImagesQuery:
    """One lookup against the image catalog.

    ``is_default=None`` means default and non-default images both qualify.
    ``name`` is a regular expression searched in the image name.
    """

    infra: str
    tags: dict[str, str] = field(default_factory=dict)
    is_default: bool | None = None
    name: str | None = None
    limit: int = 1

    def matches_name(self, name: str) -> bool:
        if not self.name:
            return True
        return re.search(self.name, name) is not None

    def to_query_string(self) -> str:
        parts = [f"infra={self.infra}"]
        if self.name:
            parts.append(f"name={self.name}")
        if self.tags:
            parts.append("tags=" + ",".join(f"{k}:{v}" for k, v in self.tags.items()))
        if self.is_default is not None:
            parts.append(f"is_default={'true' if self.is_default else 'false'}")
        parts.append(f"limit={self.limit}")
        return "&".join(parts)


def tag_value(value: Any) -> str:
    """Render a tag value the way it is stored; booleans become ``true``/``false``."""

    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def parse_bool(value: str | None) -> bool | None:
    if value is None or not value.strip():
        return None
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"invalid boolean {value!r}")


def parse_tags(value: str | None) -> dict[str, str]:
    """Parse ``k:v,k2:v2`` into a mapping; entries without a colon are skipped."""

    tags: dict[str, str] = {}
    for entry in (value or "").split(","):
        key, sep, tag_value = entry.strip().partition(":")
        if sep and key.strip():
            tags[key.strip()] = tag_value.strip()
    return tags


def parse_limit(value: str | int | None, *, default: int = 1) -> int:
    if value is None or value == "":
        return default
    limit = int(value)
    if limit < 1:
        raise ValueError("limit must be >= 1")
    return limit


def validate_name_pattern(pattern: str | None) -> str | None:
    if not pattern:
        return None
    try:
        re.compile(pattern)
    except re.error as exc:
        raise ValueError(f"invalid name pattern: {exc}") from exc
    return pattern


def query_from_params(params: Mapping[str, str | None]) -> ImagesQuery | None:
    """Build an :class:`ImagesQuery` from flat params; ``None`` without ``infra``."""

    infra = (params.get("infra") or "").strip()
    if not infra:
        return None
    return ImagesQuery(
        infra=infra,
        tags=parse_tags(params.get("tags")),
        is_default=parse_bool(params.get("is_default")),
        name=validate_name_pattern(params.get("name")),
        limit=parse_limit(params.get("limit")),
    )


def query_from_string(line: str) -> ImagesQuery | None:
    """Parse one ``text/uri-list`` line (``infra=x&tags=a:b&limit=3``)."""

    parsed = parse_qs(line.strip().lstrip("?"), keep_blank_values=True)
    flat = {key: values[-1] for key, values in parsed.items() if values}
    return query_from_params(flat)


__all__ = [
    "ImagesQuery",
    "parse_bool",
    "parse_limit",
    "parse_tags",
    "query_from_params",
    "query_from_string",
    "tag_value",
    "validate_name_pattern",
]
