"""Shared auth/permission error types."""


class AuthenticationError(Exception):
    """Raised when a request cannot be authenticated."""


class BadCredentialsSchemeError(Exception):
    """Raised when the Authorization header uses neither basic nor bearer."""


class SiteHeaderMissingError(Exception):
    """Raised when a job-scoped request arrives without a routing site header."""


class PermissionDeniedError(Exception):
    """Raised when an authenticated principal may not use an endpoint."""
