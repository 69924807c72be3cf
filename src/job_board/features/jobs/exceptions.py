"""Domain exceptions for job delivery."""

from __future__ import annotations


class JobNotFoundError(LookupError):
    """No job record exists for the requested ``(job_id, site)``."""


class JobPersistenceError(ValueError):
    """A submitted job document could not be stored."""


class JobScriptFetchError(RuntimeError):
    """The build script API failed for this job."""

    def __init__(self, upstream_error: str) -> None:
        super().__init__("job script fetch error")
        self.upstream_error = upstream_error


__all__ = ["JobNotFoundError", "JobPersistenceError", "JobScriptFetchError"]
