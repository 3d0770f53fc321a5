"""
Configuration management for the Travel Persona Engine.

Uses Pydantic Settings for type-safe configuration. Every value can be
overridden through a PERSONA_-prefixed environment variable or a .env file.
"""
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="PERSONA_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"
    json_logs: bool = True

    # Archetype catalog (None = packaged default catalog)
    archetype_catalog_path: Optional[str] = None

    # Orchestration
    parallel_extractors: bool = True
    fallback_trait_score: float = Field(default=50.0, ge=0.0, le=100.0)


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
