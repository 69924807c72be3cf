"""Request authentication pipeline used by FastAPI dependencies.

Order of checks for every gated request:

1. job-scoped path without ``Travis-Site`` -> 412 (before any credential check)
2. no credentials -> 401
3. scheme other than basic/bearer -> 400
4. basic: guest pair, or a member of the shared token allow-list
5. bearer: a signed token whose ``sub`` equals the job id in the path
"""

from __future__ import annotations

import logging
import re

import jwt
from fastapi import Request

from job_board.common.logging import log_context
from job_board.core.security.tokens import decode_token
from job_board.settings import Settings

from .credentials import TokenAllowList, decode_basic, parse_authorization
from .errors import AuthenticationError, BadCredentialsSchemeError, SiteHeaderMissingError
from .principal import BasicPrincipal, BearerPrincipal, GuestPrincipal, Principal, RequestContext

logger = logging.getLogger(__name__)

SITE_HEADER = "Travis-Site"
INFRA_HEADER = "Travis-Infrastructure"
SITE_PATHS = re.compile(r"^/jobs.+")
_JOB_ID_IN_PATH = re.compile(r"jobs/(\d+)")

_STATE_KEY = "auth_context"


def job_id_from_path(path: str) -> str | None:
    match = _JOB_ID_IN_PATH.search(path)
    return match.group(1) if match else None


class Authenticator:
    """Turn request headers into a :class:`RequestContext` or raise."""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._allow_list = TokenAllowList(settings.auth_tokens.get_secret_value())

    def authenticate(self, request: Request) -> RequestContext:
        existing = getattr(request.state, _STATE_KEY, None)
        if isinstance(existing, RequestContext):
            return existing

        path = request.url.path
        if SITE_PATHS.match(path) and SITE_HEADER not in request.headers:
            raise SiteHeaderMissingError(f"missing {SITE_HEADER} header")

        header = parse_authorization(request.headers.get("authorization"))
        if header is None:
            raise AuthenticationError("unauthorized")
        if not (header.is_basic or header.is_bearer):
            raise BadCredentialsSchemeError("bad request")

        site = request.headers.get(SITE_HEADER, "?")
        infra = request.headers.get(INFRA_HEADER, "")

        if header.is_basic:
            principal = self._basic(header.params)
        else:
            principal = self._bearer(header.params, job_id=job_id_from_path(path))

        context = RequestContext(principal=principal, site=site, infra=infra)
        setattr(request.state, _STATE_KEY, context)
        return context

    def _basic(self, params: str) -> Principal:
        credentials = decode_basic(params)
        if credentials is None:
            raise AuthenticationError("unauthorized")
        if credentials.is_guest:
            return GuestPrincipal()
        if self._allow_list.allows(credentials):
            return BasicPrincipal(username=credentials.username)
        raise AuthenticationError("unauthorized")

    def _bearer(self, token: str, *, job_id: str | None) -> Principal:
        try:
            decoded = decode_token(
                token,
                key=self._settings.jwt_verification_key,
                algorithms=[self._settings.jwt_algorithm],
                subject=job_id,
            )
        except jwt.PyJWTError as exc:
            logger.warning(
                "auth.bearer.decode_failed",
                extra=log_context(job_id=job_id, error=str(exc)),
            )
            raise AuthenticationError("unauthorized") from exc

        if job_id is None or not token or not decoded.header or not decoded.payload:
            raise AuthenticationError("unauthorized")

        return BearerPrincipal(
            subject=str(decoded.payload.get("sub", "")),
            header=decoded.header,
            claims=decoded.payload,
        )


__all__ = [
    "Authenticator",
    "INFRA_HEADER",
    "SITE_HEADER",
    "SITE_PATHS",
    "job_id_from_path",
]
