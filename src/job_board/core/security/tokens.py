"""JWT helpers for job-scoped bearer tokens."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

TOKEN_ISSUER = "job-board"


@dataclass(frozen=True, slots=True)
class DecodedToken:
    header: dict[str, Any]
    payload: dict[str, Any]


def decode_token(
    token: str,
    *,
    key: str,
    algorithms: Sequence[str],
    subject: str | None = None,
) -> DecodedToken:
    """Decode and verify a JWT.

    When ``subject`` is given the ``sub`` claim must match it; a mismatch
    raises :class:`jwt.InvalidTokenError` like any other verification failure.
    """

    header = jwt.get_unverified_header(token)
    payload = jwt.decode(token, key, algorithms=list(algorithms))
    if subject is not None and str(payload.get("sub", "")) != subject:
        raise jwt.InvalidTokenError("Invalid subject")
    return DecodedToken(header=dict(header), payload=dict(payload))


class JobTokenIssuer:
    """Issue short-lived tokens a worker uses to report on one job."""

    def __init__(self, *, key: str, algorithm: str, ttl: timedelta) -> None:
        self._key = key
        self._algorithm = algorithm
        self._ttl = ttl

    def issue(self, *, job_id: str, site: str, now: datetime | None = None) -> str:
        issued_at = now or datetime.now(tz=UTC)
        claims = {
            "iss": TOKEN_ISSUER,
            "sub": str(job_id),
            "site": site,
            "iat": issued_at,
            "exp": issued_at + self._ttl,
        }
        return jwt.encode(claims, self._key, algorithm=self._algorithm)


__all__ = ["DecodedToken", "JobTokenIssuer", "TOKEN_ISSUER", "decode_token"]
