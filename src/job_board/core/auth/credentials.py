"""Authorization header parsing and the shared basic-auth allow-list."""

from __future__ import annotations

import base64
from dataclasses import dataclass

GUEST_CREDENTIALS = ("guest", "guest")


@dataclass(frozen=True, slots=True)
class AuthorizationHeader:
    scheme: str
    params: str

    @property
    def is_basic(self) -> bool:
        return self.scheme == "basic"

    @property
    def is_bearer(self) -> bool:
        return self.scheme == "bearer"


@dataclass(frozen=True, slots=True)
class BasicCredentials:
    username: str
    password: str | None = None

    @property
    def is_guest(self) -> bool:
        return (self.username, self.password) == GUEST_CREDENTIALS


def parse_authorization(value: str | None) -> AuthorizationHeader | None:
    """Split an Authorization header into a lower-cased scheme and its params."""

    if not value or not value.strip():
        return None
    scheme, _, params = value.strip().partition(" ")
    return AuthorizationHeader(scheme=scheme.lower(), params=params.strip())


def decode_basic(params: str) -> BasicCredentials | None:
    """Decode ``base64(username:password)``; ``None`` when it is not valid base64."""

    try:
        raw = base64.b64decode(params, validate=False).decode("utf-8")
    except ValueError:
        return None
    username, sep, password = raw.partition(":")
    return BasicCredentials(username=username, password=password if sep else None)


class TokenAllowList:
    """Shared tokens accepted for basic auth.

    The configuration string has two shapes. Without any comma it is a
    colon-separated list of bare tokens (``"abc:def"``). With a comma it is a
    comma-separated list of ``username:password`` pairs
    (``"worker:abc, gateway:def"``). Whitespace around each part is ignored.
    """

    def __init__(self, raw: str) -> None:
        self._bare: frozenset[str] = frozenset()
        self._pairs: frozenset[tuple[str, ...]] = frozenset()
        raw = raw or ""
        if "," not in raw:
            self._bare = frozenset(part.strip() for part in raw.split(":") if part.strip())
        else:
            self._pairs = frozenset(
                tuple(part.strip() for part in pair.split(":"))
                for pair in raw.split(",")
                if pair.strip()
            )

    def __len__(self) -> int:
        return len(self._bare) + len(self._pairs)

    def allows(self, credentials: BasicCredentials) -> bool:
        if credentials.username in self._bare:
            return True
        if credentials.password is not None and credentials.password in self._bare:
            return True
        if credentials.password is None:
            return False
        return (credentials.username, credentials.password) in self._pairs


__all__ = [
    "AuthorizationHeader",
    "BasicCredentials",
    "GUEST_CREDENTIALS",
    "TokenAllowList",
    "decode_basic",
    "parse_authorization",
]
