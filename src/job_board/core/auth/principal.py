"""Immutable identity values produced once per request by the auth pipeline."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union


class AuthVia(str, enum.Enum):
    """Credential scheme used to authenticate the request."""

    GUEST = "guest"
    BASIC = "basic"
    BEARER = "bearer"


@dataclass(frozen=True, slots=True)
class GuestPrincipal:
    """The fixed ``guest:guest`` identity; read-only access at most."""

    username: str = "guest"
    auth_via: AuthVia = AuthVia.GUEST

    @property
    def is_guest(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class BasicPrincipal:
    """A caller holding one of the shared basic-auth tokens."""

    username: str
    auth_via: AuthVia = AuthVia.BASIC

    @property
    def is_guest(self) -> bool:
        return False


@dataclass(frozen=True, slots=True)
class BearerPrincipal:
    """A caller presenting a verified job token."""

    subject: str
    header: Mapping[str, Any] = field(default_factory=dict)
    claims: Mapping[str, Any] = field(default_factory=dict)
    auth_via: AuthVia = AuthVia.BEARER

    @property
    def username(self) -> str:
        return self.subject

    @property
    def is_guest(self) -> bool:
        return False


Principal = Union[GuestPrincipal, BasicPrincipal, BearerPrincipal]


@dataclass(frozen=True, slots=True)
class RequestContext:
    """Authenticated principal plus the routing metadata of one request."""

    principal: Principal
    site: str
    infra: str = ""


__all__ = [
    "AuthVia",
    "BasicPrincipal",
    "BearerPrincipal",
    "GuestPrincipal",
    "Principal",
    "RequestContext",
]
