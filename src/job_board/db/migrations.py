"""Programmatic Alembic runner for job-board migrations."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from importlib import resources
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url

from job_board.settings import Settings, get_settings

from .database import DatabaseConfig, _ensure_sqlite_parent_dir, build_sync_url

__all__ = ["alembic_config", "migration_lock", "run_migrations"]

MIGRATION_LOCK_KEY = 0x10BB0A2D  # stable Postgres advisory lock key


def _alembic_resource_paths() -> tuple[Path, Path]:
    package = resources.files("job_board")
    return package / "alembic.ini", package / "migrations"


@contextmanager
def migration_lock(settings: Settings) -> Iterator[None]:
    """Serialize concurrent migrators on PostgreSQL; no-op on SQLite."""

    url = build_sync_url(DatabaseConfig(url=settings.database_url))
    if make_url(url).get_backend_name() != "postgresql":
        _ensure_sqlite_parent_dir(make_url(url))
        yield
        return

    engine = create_engine(url)
    try:
        with engine.connect() as base_conn:
            conn = base_conn.execution_options(isolation_level="AUTOCOMMIT")
            conn.execute(text("SELECT pg_advisory_lock(:key)"), {"key": MIGRATION_LOCK_KEY})
            try:
                yield
            finally:
                conn.execute(text("SELECT pg_advisory_unlock(:key)"), {"key": MIGRATION_LOCK_KEY})
    finally:
        engine.dispose()


@contextmanager
def alembic_config(settings: Settings | None = None) -> Iterator[Config]:
    alembic_ini_ref, migrations_ref = _alembic_resource_paths()
    with resources.as_file(alembic_ini_ref) as alembic_ini, resources.as_file(
        migrations_ref
    ) as migrations_dir:
        if not alembic_ini.exists():
            raise FileNotFoundError(f"Alembic config not found at {alembic_ini}")
        if not migrations_dir.exists():
            raise FileNotFoundError(f"Alembic migrations not found at {migrations_dir}")

        alembic_cfg = Config(str(alembic_ini))
        alembic_cfg.set_main_option("script_location", str(migrations_dir))
        resolved = settings or get_settings()
        alembic_cfg.attributes["settings"] = resolved
        # ConfigParser treats % as interpolation; escape to preserve URL encoding.
        safe_url = build_sync_url(DatabaseConfig(url=resolved.database_url)).replace("%", "%%")
        alembic_cfg.set_main_option("sqlalchemy.url", safe_url)
        yield alembic_cfg


def run_migrations(settings: Settings | None = None, *, revision: str = "head") -> None:
    resolved = settings or get_settings()
    with migration_lock(resolved):
        with alembic_config(resolved) as alembic_cfg:
            command.upgrade(alembic_cfg, revision)
