"""FastAPI dependencies enforcing the auth gateway and the guest policy."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from .errors import PermissionDeniedError
from .pipeline import Authenticator
from .principal import RequestContext


def get_authenticator(request: Request) -> Authenticator:
    return request.app.state.authenticator


def require_context(
    request: Request,
    authenticator: Annotated[Authenticator, Depends(get_authenticator)],
) -> RequestContext:
    """Authenticate the request; guests included."""

    return authenticator.authenticate(request)


def require_member(
    context: Annotated[RequestContext, Depends(require_context)],
) -> RequestContext:
    """Authenticate the request and reject the guest identity."""

    if context.principal.is_guest:
        raise PermissionDeniedError("just no")
    return context


ContextDep = Annotated[RequestContext, Depends(require_context)]
MemberContextDep = Annotated[RequestContext, Depends(require_member)]

__all__ = [
    "ContextDep",
    "MemberContextDep",
    "get_authenticator",
    "require_context",
    "require_member",
]
