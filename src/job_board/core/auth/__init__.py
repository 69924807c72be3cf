"""Authentication gateway for job-scoped and image endpoints."""

from .errors import (
    AuthenticationError,
    BadCredentialsSchemeError,
    PermissionDeniedError,
    SiteHeaderMissingError,
)
from .pipeline import INFRA_HEADER, SITE_HEADER, Authenticator
from .principal import BasicPrincipal, BearerPrincipal, GuestPrincipal, RequestContext

__all__ = [
    "AuthenticationError",
    "Authenticator",
    "BadCredentialsSchemeError",
    "BasicPrincipal",
    "BearerPrincipal",
    "GuestPrincipal",
    "INFRA_HEADER",
    "PermissionDeniedError",
    "RequestContext",
    "SITE_HEADER",
    "SiteHeaderMissingError",
]
