"""Configuration models, YAML loader, and environment loader for the engine."""

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator


class MarketConfig(BaseModel):
    """Vacancy API location and sampling limits."""

    host: str = "hh.kz"
    api_base: str = "https://api.hh.ru"
    user_agent: str = "MarketFit/1.0 (+https://github.com)"
    sample_pages: int = Field(default=2, ge=1, le=20)
    per_page: int = Field(default=50, ge=1, le=100)
    vacancy_sample_per_role: int = Field(default=30, ge=1)
    detail_concurrency: int = Field(default=6, ge=2)
    max_roles: int = Field(default=3, ge=1, le=5)

    @field_validator("host")
    @classmethod
    def host_not_empty(cls, v: str) -> str:
        if not v.strip():
            msg = "host must not be empty"
            raise ValueError(msg)
        return v.strip()

    @field_validator("api_base")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")


class HttpConfig(BaseModel):
    """Timeout and retry policy for upstream calls."""

    fetch_timeout_ms: int = Field(default=15000, ge=3000)
    retries: int = Field(default=2, ge=0, le=5)
    backoff_base_ms: int = Field(default=400, ge=0)
    backoff_cap_ms: int = Field(default=3000, ge=0)


class CacheConfig(BaseModel):
    """TTL cache settings."""

    ttl_ms: int = Field(default=3 * 60 * 1000, ge=0)
    sweep_interval_s: float = Field(default=300.0, gt=0)


class ExternalConfig(BaseModel):
    """Optional LLM-backed recommender used as the first tier."""

    provider: str | None = None
    model: str | None = None
    max_tokens: int = Field(default=1024, ge=64)
    temperature: float = Field(default=0.2, ge=0.0, le=2.0)
    timeout_s: float = Field(default=30.0, gt=0)

    @field_validator("provider")
    @classmethod
    def blank_is_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v.strip().lower()


class CourseConfig(BaseModel):
    """Course suggestion source."""

    provider: Literal["static", "stepik"] = "static"
    max_results: int = Field(default=12, ge=1)


class ServerConfig(BaseModel):
    """HTTP surface settings."""

    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)
    request_timeout_s: float = Field(default=60.0, gt=0)


class Settings(BaseModel):
    """Top-level settings loaded from YAML or the environment."""

    market: MarketConfig = Field(default_factory=MarketConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    external: ExternalConfig = Field(default_factory=ExternalConfig)
    courses: CourseConfig = Field(default_factory=CourseConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from environment variables.

        Unset variables keep their defaults. Values are handed to pydantic
        unchanged, so a malformed number raises ValidationError.
        """
        env = os.environ if environ is None else environ
        raw: dict[str, dict[str, Any]] = {}
        for var, (section, field) in _ENV_VARS.items():
            value = env.get(var)
            if value is None or not value.strip():
                continue
            raw.setdefault(section, {})[field] = value.strip()
        return cls.model_validate(raw)


# Environment variable → (section, field)
_ENV_VARS: dict[str, tuple[str, str]] = {
    "HH_HOST": ("market", "host"),
    "HH_API_BASE": ("market", "api_base"),
    "HH_USER_AGENT": ("market", "user_agent"),
    "RECS_SAMPLE_PAGES": ("market", "sample_pages"),
    "RECS_PER_PAGE": ("market", "per_page"),
    "RECS_VACANCY_SAMPLE_PER_ROLE": ("market", "vacancy_sample_per_role"),
    "RECS_DETAIL_CONCURRENCY": ("market", "detail_concurrency"),
    "RECS_MAX_ROLES": ("market", "max_roles"),
    "RECS_FETCH_TIMEOUT_MS": ("http", "fetch_timeout_ms"),
    "RECS_RETRIES": ("http", "retries"),
    "RECS_CACHE_TTL_MS": ("cache", "ttl_ms"),
    "RECS_CACHE_SWEEP_S": ("cache", "sweep_interval_s"),
    "RECS_EXTERNAL_PROVIDER": ("external", "provider"),
    "RECS_EXTERNAL_MODEL": ("external", "model"),
    "RECS_EXTERNAL_TIMEOUT_S": ("external", "timeout_s"),
    "RECS_COURSE_PROVIDER": ("courses", "provider"),
    "RECS_REQUEST_TIMEOUT_S": ("server", "request_timeout_s"),
}
