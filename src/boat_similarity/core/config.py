"""
Configuration management for the boat similarity engine.

Uses Pydantic settings for type-safe configuration with environment variable support.
All settings can be overridden via environment variables prefixed with
BOAT_SIMILARITY_, e.g. BOAT_SIMILARITY_EMBEDDING_CACHE_CAPACITY=4096.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .types import CachePolicy


class Settings(BaseSettings):
    """
    Engine settings with environment variable support.

    Weight profiles themselves are code-level presets (see
    similarity.profiles); settings only choose which one is the default.
    """

    model_config = SettingsConfigDict(
        env_prefix="BOAT_SIMILARITY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # Profiles & Ranking
    # ==========================================================================
    default_profile: Optional[str] = Field(
        default="hybrid",
        description="Preset used when a call supplies no profile. Empty disables the fallback.",
    )
    default_top_k: int = Field(default=3, ge=1, description="Results returned by find_top_k")
    default_threshold: float = Field(default=0.0, ge=0.0, le=1.0)

    # ==========================================================================
    # Embedding Cache
    # ==========================================================================
    embedding_cache_capacity: int = Field(default=1024, ge=1, le=1_000_000)
    embedding_cache_policy: CachePolicy = Field(
        default=CachePolicy.lru,
        description="Eviction order: lru, fifo",
    )

    # ==========================================================================
    # Vectors
    # ==========================================================================
    distance_decay_constant: float = Field(
        default=100.0,
        gt=0,
        description="Decay constant for exp(-distance/decay) similarity",
    )

    # ==========================================================================
    # Logging
    # ==========================================================================
    log_level: str = Field(default="INFO", description="DEBUG, INFO, WARNING, ERROR")

    @field_validator("default_profile", mode="before")
    @classmethod
    def _empty_profile_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        value = value.upper()
        if value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {value}")
        return value


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()
