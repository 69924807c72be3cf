"""DB package exports."""

from .base import NAMING_CONVENTION, Base, TimestampMixin, metadata, utc_now
from .database import (
    Database,
    DatabaseConfig,
    build_async_url,
    build_sync_url,
    db,
    get_db_session,
    session_scope,
)

__all__ = [
    "Base",
    "metadata",
    "NAMING_CONVENTION",
    "utc_now",
    "TimestampMixin",
    "Database",
    "DatabaseConfig",
    "db",
    "session_scope",
    "get_db_session",
    "build_sync_url",
    "build_async_url",
]
