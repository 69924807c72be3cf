"""job-board settings (Pydantic v2, JOB_BOARD_* environment variables)."""

from __future__ import annotations

import json
from datetime import timedelta
from functools import lru_cache
from typing import Any, ClassVar

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import DotEnvSettingsSource, EnvSettingsSource

# ---- Defaults ---------------------------------------------------------------

DEFAULT_DATABASE_URL = "sqlite:///./data/job_board.sqlite"
DEFAULT_REDIS_URL = "redis://localhost:6379/0"
DEFAULT_JOB_SCRIPT_CACHE_TTL = timedelta(hours=1)
DEFAULT_JWT_TTL = timedelta(hours=2)

_LENIENT_LIST_FIELDS = {"paranoid_queue_names"}

_UNIT_SECONDS = {"s": 1, "m": 60, "h": 3600, "d": 86400}


# ---- Helpers ----------------------------------------------------------------

def _parse_duration(value: Any, *, field_name: str) -> timedelta:
    """Accept seconds (int/float/str) or '60s'/'5m'/'1h'/'14d'."""
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)):
        seconds = float(value)
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            raise ValueError(f"{field_name} must not be blank")
        try:
            seconds = float(s)
        except ValueError:
            unit = s[-1].lower()
            num = s[:-1].strip()
            if unit not in _UNIT_SECONDS or not num:
                raise ValueError(
                    f"{field_name} must be secs or 'Xs','Xm','Xh','Xd'"
                ) from None
            try:
                seconds = float(num) * _UNIT_SECONDS[unit]
            except ValueError as exc:
                raise ValueError(
                    f"{field_name} must be secs or 'Xs','Xm','Xh','Xd'"
                ) from exc
    else:
        raise TypeError(f"{field_name} must be number, duration string, or timedelta")
    if seconds <= 0:
        raise ValueError(f"{field_name} must be > 0 seconds")
    return timedelta(seconds=seconds)


def _list_from_env(value: Any) -> list[str]:
    """JSON array or comma string; strip empties; dedupe preserving order."""
    if value in (None, "", []):
        items: list[str] = []
    elif isinstance(value, str):
        s = value.strip()
        if s.startswith("["):
            try:
                parsed = json.loads(s)
            except json.JSONDecodeError as exc:
                raise ValueError("Expected a JSON array") from exc
            if not isinstance(parsed, list):
                raise ValueError("Expected a JSON array")
            items = [str(x).strip() for x in parsed if str(x).strip()]
        else:
            items = [seg.strip() for seg in s.split(",") if seg.strip()]
    elif isinstance(value, (list, tuple, set)):
        items = [str(x).strip() for x in value if str(x).strip()]
    else:
        raise TypeError("Expected string or list")

    seen, out = set(), []
    for x in items:
        if x not in seen:
            seen.add(x)
            out.append(x)
    return out


def _mapping_from_env(value: Any, *, field_name: str) -> dict[str, Any]:
    if value in (None, ""):
        return {}
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as exc:
            raise ValueError(f"{field_name} must be a JSON object") from exc
    if not isinstance(value, dict):
        raise ValueError(f"{field_name} must be a JSON object")
    return dict(value)


# ---- Settings ---------------------------------------------------------------

class _LenientEnvSettingsSource(EnvSettingsSource):
    """Environment source that preserves raw strings for list-like fields."""

    lenient_fields: ClassVar[set[str]] = _LENIENT_LIST_FIELDS

    def prepare_field_value(self, field_name: str, field, value: Any, value_is_complex: bool) -> Any:
        if field_name in self.lenient_fields and isinstance(value, str):
            return value
        return super().prepare_field_value(field_name, field, value, value_is_complex)


class _LenientDotEnvSettingsSource(DotEnvSettingsSource):
    """Dotenv source that preserves raw strings for list-like fields."""

    lenient_fields: ClassVar[set[str]] = _LENIENT_LIST_FIELDS

    def prepare_field_value(self, field_name: str, field, value: Any, value_is_complex: bool) -> Any:
        if field_name in self.lenient_fields and isinstance(value, str):
            return value
        return super().prepare_field_value(field_name, field, value, value_is_complex)


class Settings(BaseSettings):
    """FastAPI settings loaded from JOB_BOARD_* environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="JOB_BOARD_",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        env_source = _LenientEnvSettingsSource(
            settings_cls,
            case_sensitive=getattr(env_settings, "case_sensitive", None),
            env_prefix=getattr(env_settings, "env_prefix", None),
            env_ignore_empty=getattr(env_settings, "env_ignore_empty", None),
        )
        dotenv_source = _LenientDotEnvSettingsSource(
            settings_cls,
            env_file=getattr(dotenv_settings, "env_file", None),
            case_sensitive=getattr(dotenv_settings, "case_sensitive", None),
            env_prefix=getattr(dotenv_settings, "env_prefix", None),
            env_ignore_empty=getattr(dotenv_settings, "env_ignore_empty", None),
        )
        return (init_settings, env_source, dotenv_source, file_secret_settings)

    # Core
    app_name: str = "job-board"
    app_version: str = "3.2.0"
    api_docs_enabled: bool = False
    logging_level: str = "INFO"

    # Server
    api_host: str = "0.0.0.0"
    api_port: int = Field(4567, ge=1, le=65535)
    api_processes: int = Field(1, ge=1)

    # Database
    database_url: str = DEFAULT_DATABASE_URL
    database_echo: bool = False
    database_pool_size: int = Field(10, ge=1)
    database_max_overflow: int = Field(5, ge=0)
    database_pool_timeout: int = Field(5, gt=0)

    # Redis
    redis_url: str = DEFAULT_REDIS_URL
    redis_max_connections: int = Field(20, ge=1)
    redis_pool_timeout: float = Field(1.0, gt=0)
    redis_socket_timeout: float = Field(2.0, gt=0)

    # Auth
    auth_tokens: SecretStr = Field(default=SecretStr(""))
    jwt_algorithm: str = "RS512"
    jwt_public_key: SecretStr | None = None
    jwt_private_key: SecretStr | None = None
    jwt_ttl: timedelta = Field(default=DEFAULT_JWT_TTL)

    # Build script API
    build_api_urls: dict[str, str] = Field(default_factory=dict)
    build_api_timeout: float = Field(10.0, gt=0)
    build_api_max_connections: int = Field(50, ge=1)
    build_config: dict[str, Any] = Field(default_factory=dict)
    paranoid_queue_names: list[str] = Field(default_factory=list)
    job_script_caching_enabled: bool = True
    job_script_cache_ttl: timedelta = Field(default=DEFAULT_JOB_SCRIPT_CACHE_TTL)

    # Delivery URLs
    job_state_urls: dict[str, str] = Field(default_factory=dict)
    log_parts_urls: dict[str, str] = Field(default_factory=dict)

    # ---- Validators ----

    @field_validator("logging_level", mode="before")
    @classmethod
    def _v_log_level(cls, v: Any) -> str:
        s = ("" if v is None else str(v).strip()).upper()
        return s or "INFO"

    @field_validator("paranoid_queue_names", mode="before")
    @classmethod
    def _v_paranoid_queues(cls, v: Any) -> list[str]:
        return _list_from_env(v)

    @field_validator("jwt_ttl", mode="before")
    @classmethod
    def _v_jwt_ttl(cls, v: Any) -> timedelta:
        return _parse_duration(v, field_name="jwt_ttl")

    @field_validator("job_script_cache_ttl", mode="before")
    @classmethod
    def _v_script_ttl(cls, v: Any) -> timedelta:
        return _parse_duration(v, field_name="job_script_cache_ttl")

    @field_validator("build_api_urls", "job_state_urls", "log_parts_urls", "build_config", mode="before")
    @classmethod
    def _v_mappings(cls, v: Any, info) -> dict[str, Any]:
        return _mapping_from_env(v, field_name=info.field_name)

    # ---- Convenience ----

    @property
    def jwt_verification_key(self) -> str:
        key = self.jwt_public_key or self.jwt_private_key
        return key.get_secret_value() if key is not None else ""

    @property
    def jwt_signing_key(self) -> str:
        key = self.jwt_private_key or self.jwt_public_key
        return key.get_secret_value() if key is not None else ""

    @property
    def job_script_cache_ttl_seconds(self) -> int:
        return max(1, int(self.job_script_cache_ttl.total_seconds()))


@lru_cache(maxsize=1)
def _build_settings() -> Settings:
    return Settings()


def get_settings() -> Settings:
    return _build_settings()


def reload_settings() -> Settings:
    _build_settings.cache_clear()
    return _build_settings()


__all__ = [
    "DEFAULT_DATABASE_URL",
    "DEFAULT_REDIS_URL",
    "Settings",
    "get_settings",
    "reload_settings",
]
