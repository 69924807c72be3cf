"""Error payloads and exception handlers for the job-board API.

Every error leaves the service as ``{"@type": "error", "error": <message>}``,
optionally with extra keys (``upstream_error`` for failed script fetches).
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from starlette.exceptions import HTTPException

from job_board.core.auth.errors import (
    AuthenticationError,
    BadCredentialsSchemeError,
    PermissionDeniedError,
    SiteHeaderMissingError,
)

from .logging import log_context

_UNHANDLED_LOGGER = logging.getLogger("job_board.errors")
_HTTP_LOGGER = logging.getLogger("job_board.http")

BASIC_CHALLENGE = 'Basic realm="job-board"'


class ApiError(RuntimeError):
    """Exception carrying an HTTP status and an ``@type: error`` body."""

    def __init__(
        self,
        *,
        status_code: int,
        error: str,
        extra: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.extra = dict(extra or {})
        self.headers = headers


def error_body(message: str, **extra: Any) -> dict[str, Any]:
    body: dict[str, Any] = {"@type": "error", "error": message}
    body.update(extra)
    return body


def error_response(
    status_code: int,
    message: str,
    *,
    headers: dict[str, str] | None = None,
    **extra: Any,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_body(message, **extra),
        headers=headers,
    )


async def api_error_handler(_request: Request, exc: ApiError) -> JSONResponse:
    return error_response(exc.status_code, exc.error, headers=exc.headers, **exc.extra)


async def site_header_missing_handler(_request: Request, exc: SiteHeaderMissingError) -> JSONResponse:
    return error_response(status.HTTP_412_PRECONDITION_FAILED, str(exc))


async def authentication_error_handler(_request: Request, exc: AuthenticationError) -> JSONResponse:
    return error_response(
        status.HTTP_401_UNAUTHORIZED,
        str(exc) or "unauthorized",
        headers={"WWW-Authenticate": BASIC_CHALLENGE},
    )


async def bad_scheme_handler(_request: Request, exc: BadCredentialsSchemeError) -> JSONResponse:
    return error_response(status.HTTP_400_BAD_REQUEST, str(exc))


async def permission_denied_handler(_request: Request, exc: PermissionDeniedError) -> JSONResponse:
    return error_response(status.HTTP_403_FORBIDDEN, str(exc))


async def validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for entry in exc.errors():
        loc = ".".join(str(part) for part in entry.get("loc", ()) if part not in {"body", "query", "header"})
        problems.append(f"{loc}: {entry.get('msg')}" if loc else str(entry.get("msg")))
    return error_response(status.HTTP_400_BAD_REQUEST, "; ".join(problems) or "invalid request")


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """4xx responses are returned without logging; 5xx are logged at ERROR."""

    if exc.status_code >= 500:
        _HTTP_LOGGER.error(
            "http_exception",
            extra=log_context(
                path=str(request.url.path),
                method=request.method,
                status_code=exc.status_code,
                detail=exc.detail,
            ),
        )
    return error_response(
        exc.status_code,
        str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def pool_timeout_handler(request: Request, exc: PoolTimeoutError) -> JSONResponse:
    _HTTP_LOGGER.warning(
        "db.pool.exhausted",
        extra=log_context(path=str(request.url.path), method=request.method, detail=str(exc)),
    )
    return error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "database unavailable, retry later",
        headers={"Retry-After": "1"},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler: HTTP 500 plus a structured ERROR log with stack trace."""

    _UNHANDLED_LOGGER.exception(
        "unhandled_exception",
        extra=log_context(
            path=str(request.url.path),
            method=request.method,
            exception_type=type(exc).__name__,
            detail=str(exc),
        ),
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    """Attach job-board exception handlers to the FastAPI app."""

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(SiteHeaderMissingError, site_header_missing_handler)
    app.add_exception_handler(AuthenticationError, authentication_error_handler)
    app.add_exception_handler(BadCredentialsSchemeError, bad_scheme_handler)
    app.add_exception_handler(PermissionDeniedError, permission_denied_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(PoolTimeoutError, pool_timeout_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = [
    "ApiError",
    "BASIC_CHALLENGE",
    "error_body",
    "error_response",
    "register_exception_handlers",
]
