"""Build script generation: upstream API registry and content-addressed cache."""

from .registry import BuildApiEndpoint, BuildApiRegistry, UnknownSiteError
from .service import BuildScriptError, BuildScriptService

__all__ = [
    "BuildApiEndpoint",
    "BuildApiRegistry",
    "BuildScriptError",
    "BuildScriptService",
    "UnknownSiteError",
]
