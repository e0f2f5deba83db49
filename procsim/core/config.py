"""
PROCSIM — Configuration Management
===================================
Centralized, validated configuration with environment-based overrides.
All settings are loaded from environment variables with sensible defaults.

Usage:
    from procsim.core.config import get_settings
    settings = get_settings()
"""

from __future__ import annotations

from enum import StrEnum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    """Deployment environment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """
    Root configuration object.

    All values can be overridden via environment variables prefixed with ``PROCSIM_``.
    Example: ``PROCSIM_TICK_INTERVAL_SECONDS=0.5``
    """

    model_config = SettingsConfigDict(
        env_prefix="PROCSIM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── General ──────────────────────────────────────────────────────────
    app_name: str = "procsim"
    environment: Environment = Environment.DEVELOPMENT
    debug: bool = False

    # ── Logging & Observability ──────────────────────────────────────────
    log_level: str = Field(
        default="INFO", pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    log_format: str = Field(default="json", pattern=r"^(json|console)$")

    # ── Correlation ──────────────────────────────────────────────────────
    correlation_id_header: str = "X-Correlation-ID"

    # ── Server ───────────────────────────────────────────────────────────
    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=1, le=65535)

    # ── Scheduling ───────────────────────────────────────────────────────
    tick_interval_seconds: float = Field(
        default=2.0,
        gt=0,
        description="Wall-clock period between two monitor ticks.",
    )
    max_background_workers: int = Field(default=4, ge=1, le=64)
    background_result_retention: int = Field(
        default=256,
        ge=1,
        description="Finished background results kept until collected.",
    )
    monitor_autostart: bool = True

    # ── Reporting ────────────────────────────────────────────────────────
    report_top_first: bool = Field(
        default=True,
        description="Render ready levels top-to-bottom (False: bottom-to-top).",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Return the singleton Settings instance.

    Cached so environment is read exactly once per process lifetime.
    Call ``get_settings.cache_clear()`` in tests to reset.
    """
    return Settings()
