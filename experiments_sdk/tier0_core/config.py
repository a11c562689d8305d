"""
experiments_sdk.tier0_core.config
───────────────────────────────────
Typed configuration with env layering. Reads from .env → environment
variables. All fields are typed via Pydantic.

Minimal stack: pydantic-settings + python-dotenv
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ExperimentsConfig(BaseSettings):
    """
    Typed SDK configuration. All env vars are prefixed with EXPERIMENTS_
    unless overridden.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ───────────────────────────────────────────────────────────
    environment: str = Field(default="development", alias="EXPERIMENTS_ENV")

    # ── Logging ───────────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO", alias="EXPERIMENTS_LOG_LEVEL")
    log_format: str = Field(default="json", alias="EXPERIMENTS_LOG_FORMAT")

    # ── Storage tiers ─────────────────────────────────────────────────────────
    storage_backend: str = Field(default="memory", alias="EXPERIMENTS_STORAGE_BACKEND")
    redis_url: str = Field(default="redis://localhost:6379/0", alias="REDIS_URL")
    storage_prefix: str = Field(default="experiments", alias="EXPERIMENTS_STORAGE_PREFIX")
    browser_ttl: int | None = Field(default=None, alias="EXPERIMENTS_BROWSER_TTL")
    tab_ttl: int | None = Field(default=1800, alias="EXPERIMENTS_TAB_TTL")

    # ── Tracking ──────────────────────────────────────────────────────────────
    tracking_backend: str = Field(default="log", alias="EXPERIMENTS_TRACKING_BACKEND")
    tracking_url: str | None = Field(default=None, alias="EXPERIMENTS_TRACKING_URL")
    tracking_timeout: float = Field(default=5.0, alias="EXPERIMENTS_TRACKING_TIMEOUT")

    @field_validator("environment")
    @classmethod
    def validate_env(cls, v: str) -> str:
        allowed = {"development", "staging", "production", "test"}
        if v.lower() not in allowed:
            raise ValueError(f"environment must be one of {allowed}, got {v!r}")
        return v.lower()

    @field_validator("browser_ttl", "tab_ttl")
    @classmethod
    def validate_ttl(cls, v: int | None) -> int | None:
        if v is not None and v <= 0:
            return None
        return v

    @property
    def is_test(self) -> bool:
        return self.environment == "test"


@lru_cache(maxsize=1)
def get_config() -> ExperimentsConfig:
    """
    Return the singleton SDK config. Cached after first call.
    Call _reset_config() in tests to pick up new env vars.
    """
    return ExperimentsConfig()


def _reset_config() -> None:
    """For tests: clear the config cache."""
    get_config.cache_clear()


__all__ = ["ExperimentsConfig", "get_config"]
