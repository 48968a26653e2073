# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for all deployment-specific settings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Quote store (pool source + persistent similarity tier) ===
    quote_store_backend: Literal["sqlite", "memory"] = "sqlite"
    database_path: Path = Path("~/.quoterec/quotes.db")

    # === Ephemeral cache (quotes + similarity rankings) ===
    ephemeral_cache_backend: Literal["none", "memory", "redis"] = "memory"
    cache_redis_url: str = ""
    cache_ttl: int = 3600
    # None = 2 x cache_ttl
    similarity_cache_ttl: int | None = None
    cache_timeout_seconds: float = 2.0

    # === Similarity ===
    similarity_min_score: float = 0.08
    similarity_default_limit: int = 10
    similarity_max_limit: int = 50
    similarity_cache_limit: int = 50

    # === Selection ===
    selection_seed: int | None = None

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("cache_ttl", "similarity_cache_ttl")
    @classmethod
    def validate_ttl(cls, v: int | None) -> int | None:  # noqa: N805
        if v is not None and v <= 0:
            raise ValueError("cache TTLs must be > 0 seconds")
        return v

    @field_validator("cache_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:  # noqa: N805
        if v <= 0:
            raise ValueError("cache_timeout_seconds must be > 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.similarity_cache_ttl is None:
            self.similarity_cache_ttl = 2 * self.cache_ttl

        if not 0.0 <= self.similarity_min_score <= 1.0:
            errors.append("SIMILARITY_MIN_SCORE must be within [0, 1]")

        if not (
            1
            <= self.similarity_default_limit
            <= self.similarity_max_limit
            <= self.similarity_cache_limit
        ):
            errors.append(
                "Similarity limits must satisfy 1 <= SIMILARITY_DEFAULT_LIMIT"
                " <= SIMILARITY_MAX_LIMIT <= SIMILARITY_CACHE_LIMIT"
            )

        if self.log_retention < 0:
            errors.append("LOG_RETENTION must be >= 0")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or CLI flags).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
