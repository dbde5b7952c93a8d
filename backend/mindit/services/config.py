"""Application configuration helpers."""

from __future__ import annotations

from functools import lru_cache
import os
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator

PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_EXA_API_URL = "https://api.exa.ai/search"
DEFAULT_SUMMARY_MODEL = "google/gemini-2.0-flash-exp:free"
EXA_KEY_PLACEHOLDER = "your_exa_api_key_here"


class AppConfig(BaseModel):
    """Runtime configuration loaded from environment variables."""

    model_config = ConfigDict(frozen=True)

    supabase_url: Optional[str] = Field(
        default=None, description="Base URL of the managed auth/database/storage backend"
    )
    supabase_anon_key: Optional[str] = Field(
        default=None, description="Public (anon) API key for the backend"
    )
    supabase_service_role_key: Optional[str] = Field(
        default=None, description="Privileged key used for storage administration (optional)"
    )
    exa_api_key: Optional[str] = Field(default=None, description="Exa search API key")
    exa_api_url: str = Field(default=DEFAULT_EXA_API_URL, description="Exa search endpoint")
    openrouter_api_key: Optional[str] = Field(
        default=None, description="OpenRouter key used for note summaries (optional)"
    )
    summary_model: str = Field(default=DEFAULT_SUMMARY_MODEL)
    site_url: str = Field(
        default="http://localhost:3000",
        description="Public URL of the site, used for auth email redirects",
    )
    environment: str = Field(default="production")
    http_timeout_seconds: float = Field(default=30.0, gt=0)
    cors_origins: tuple[str, ...] = Field(
        default=("http://localhost:3000", "http://localhost:5173")
    )

    @field_validator("supabase_url", mode="before")
    @classmethod
    def _normalize_supabase_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip().rstrip("/")
        if not cleaned:
            return None
        if urlparse(cleaned).scheme not in ("http", "https"):
            raise ValueError("SUPABASE_URL must be an http(s) URL")
        return cleaned

    @field_validator("exa_api_key", mode="before")
    @classmethod
    def _normalize_exa_key(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        cleaned = value.strip()
        if not cleaned or cleaned == EXA_KEY_PLACEHOLDER:
            return None
        return cleaned

    @field_validator(
        "supabase_anon_key", "supabase_service_role_key", "openrouter_api_key", mode="before"
    )
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev")

    @property
    def supabase_project_ref(self) -> Optional[str]:
        """Project ref is the first label of the backend host (``<ref>.supabase.co``)."""
        if not self.supabase_url:
            return None
        host = urlparse(self.supabase_url).hostname or ""
        return host.split(".")[0] or None

    @property
    def auth_cookie_name(self) -> str:
        return f"sb-{self.supabase_project_ref or 'local'}-auth-token"


def _read_env(key: str, default: Optional[str] = None) -> Optional[str]:
    return os.getenv(key, default)


@lru_cache(maxsize=1)
def get_config() -> AppConfig:
    """Load and cache application configuration."""
    supabase_url = _read_env("SUPABASE_URL") or _read_env("NEXT_PUBLIC_SUPABASE_URL")
    supabase_anon_key = _read_env("SUPABASE_ANON_KEY") or _read_env(
        "NEXT_PUBLIC_SUPABASE_ANON_KEY"
    )
    cors_origins = _read_env("CORS_ORIGINS")

    kwargs = dict(
        supabase_url=supabase_url,
        supabase_anon_key=supabase_anon_key,
        supabase_service_role_key=_read_env("SUPABASE_SERVICE_ROLE_KEY"),
        exa_api_key=_read_env("EXA_API_KEY"),
        exa_api_url=_read_env("EXA_API_URL", DEFAULT_EXA_API_URL),
        openrouter_api_key=_read_env("OPENROUTER_API_KEY")
        or _read_env("NEXT_PUBLIC_OPENROUTER_API_KEY"),
        summary_model=_read_env("SUMMARY_MODEL", DEFAULT_SUMMARY_MODEL),
        site_url=_read_env("SITE_URL") or _read_env("NEXT_PUBLIC_SITE_URL", "http://localhost:3000"),
        environment=_read_env("ENVIRONMENT", "production"),
        http_timeout_seconds=float(_read_env("HTTP_TIMEOUT_SECONDS", "30")),
    )
    if cors_origins:
        kwargs["cors_origins"] = tuple(
            origin.strip() for origin in cors_origins.split(",") if origin.strip()
        )
    return AppConfig(**kwargs)


def reload_config() -> AppConfig:
    """Clear cached config (useful for tests) and reload."""
    get_config.cache_clear()
    return get_config()


__all__ = ["AppConfig", "get_config", "reload_config", "PROJECT_ROOT", "DEFAULT_EXA_API_URL"]
