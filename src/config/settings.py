"""
Runtime Settings for TimeCraft.

All configuration is read from environment variables once and cached.
Call `get_settings.cache_clear()` in tests after changing the environment.

Environment variables:
- TIMECRAFT_ENVIRONMENT: "development" | "production" (default development)
- TIMECRAFT_DEV_MODE: "1" for console logs and uvicorn reload
- TIMECRAFT_DATABASE_URL: SQLAlchemy URL (default sqlite:///timecraft.db)
- TIMECRAFT_CORS_ORIGINS: comma-separated allowed origins
- TIMECRAFT_HOST / TIMECRAFT_PORT: bind address for main.py
- GEMINI_API_KEY (or API_KEY): key for the schedule-generation model
- TIMECRAFT_GEMINI_MODEL: model name (default gemini-2.5-flash)
- TIMECRAFT_GEMINI_BASE_URL: REST base URL
- TIMECRAFT_AI_TIMEOUT: request timeout in seconds (default 60)
- TIMECRAFT_NOTIFY_WINDOW_MINUTES: upcoming-task window (default 15)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache

from src.lib.exceptions import ConfigurationError

DEFAULT_DATABASE_URL = "sqlite:///timecraft.db"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


def _split_csv(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    """Resolved application settings."""

    environment: str = "development"
    dev_mode: bool = False
    database_url: str = DEFAULT_DATABASE_URL
    cors_origins: list[str] = field(default_factory=list)
    host: str = "127.0.0.1"
    port: int = 8000
    gemini_api_key: str | None = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    gemini_base_url: str = DEFAULT_GEMINI_BASE_URL
    ai_timeout_seconds: float = 60.0
    notify_window_minutes: int = 15

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def require_api_key(self) -> str:
        """Return the model API key or raise ConfigurationError."""
        if not self.gemini_api_key:
            raise ConfigurationError(
                "GEMINI_API_KEY is not set; schedule generation is unavailable."
            )
        return self.gemini_api_key

    @classmethod
    def from_env(cls) -> Settings:
        environment = os.getenv("TIMECRAFT_ENVIRONMENT", "development")
        cors_origins = _split_csv(os.getenv("TIMECRAFT_CORS_ORIGINS", ""))

        # Wildcard origins are rejected in production
        if environment == "production" and "*" in cors_origins:
            raise ConfigurationError(
                "TIMECRAFT_CORS_ORIGINS contains wildcard '*' which is forbidden "
                "in production. Specify explicit origins instead."
            )

        try:
            port = int(os.getenv("TIMECRAFT_PORT", "8000"))
        except ValueError as exc:
            raise ConfigurationError("TIMECRAFT_PORT must be an integer") from exc

        return cls(
            environment=environment,
            dev_mode=os.getenv("TIMECRAFT_DEV_MODE", "0") == "1",
            database_url=os.getenv("TIMECRAFT_DATABASE_URL", DEFAULT_DATABASE_URL),
            cors_origins=cors_origins,
            host=os.getenv("TIMECRAFT_HOST", "127.0.0.1"),
            port=port,
            gemini_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("API_KEY"),
            gemini_model=os.getenv("TIMECRAFT_GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
            gemini_base_url=os.getenv(
                "TIMECRAFT_GEMINI_BASE_URL", DEFAULT_GEMINI_BASE_URL
            ).rstrip("/"),
            ai_timeout_seconds=_env_float("TIMECRAFT_AI_TIMEOUT", 60.0),
            notify_window_minutes=int(_env_float("TIMECRAFT_NOTIFY_WINDOW_MINUTES", 15)),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, read from the environment once."""
    return Settings.from_env()


__all__ = ["Settings", "get_settings"]
