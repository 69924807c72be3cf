"""Strip fields a worker must not receive from a delivered job."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

REJECT_KEYS: frozenset[str] = frozenset({"cache_settings", "env_vars", "source", "ssh_key"})

SELECT_KEYS: dict[str, frozenset[str]] = {
    "config": frozenset({"dist", "group", "language", "os"}),
    "job": frozenset({"id", "number", "queued_at"}),
    "repository": frozenset({"slug"}),
}


def redact_job(job: Mapping[str, Any]) -> dict[str, Any]:
    """Return a deep copy of ``job`` with ``data`` reduced to deliverable fields."""

    cleaned = copy.deepcopy(dict(job))
    data = cleaned.get("data")
    if not isinstance(data, dict):
        return cleaned

    for key in REJECT_KEYS:
        data.pop(key, None)

    for section, allowed in SELECT_KEYS.items():
        value = data.get(section)
        if isinstance(value, dict):
            data[section] = {key: item for key, item in value.items() if key in allowed}

    return cleaned


__all__ = ["REJECT_KEYS", "SELECT_KEYS", "redact_job"]
