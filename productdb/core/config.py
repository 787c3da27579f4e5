"""
Configuration management for the product database service.

This module centralizes environment-driven configuration using Pydantic's
`BaseSettings`. The API, the storage layer and the CLI all consume the shared
`settings` instance so a single `.env` file drives every entry point.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, List, Optional

from pydantic import Field, PositiveFloat, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration sourced from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    # General application settings
    API_TITLE: str = "Product Database API"
    API_VERSION: str = "0.1.0"
    API_PREFIX: str = "/api/v1"
    DEBUG: bool = False
    ENVIRONMENT: str = Field("development", pattern=r"^(development|staging|production)$")
    HOST: str = "0.0.0.0"
    PORT: int = 9999
    ALLOWED_ORIGINS: Annotated[List[str], NoDecode] = Field(default_factory=lambda: ["*"])
    ENABLE_OPENAPI: Optional[bool] = None

    # Persistence
    STORAGE_BACKEND: str = Field("sql", pattern=r"^(sql|memory)$")
    DATABASE_URL: str = "sqlite+aiosqlite:///./productdb.db"
    DATABASE_ECHO: bool = False
    DATABASE_AUTO_MIGRATE: bool = True

    # Request handling
    REQUEST_TIMEOUT_SECONDS: PositiveFloat = 30.0

    # Logging / monitoring / tracing
    LOG_LEVEL: str = "INFO"
    ENABLE_METRICS: bool = True
    ENABLE_TRACING: bool = False
    OTEL_EXPORTER_OTLP_ENDPOINT: Optional[str] = None
    OTEL_EXPORTER_OTLP_HEADERS: Optional[str] = None

    @field_validator("ALLOWED_ORIGINS", mode="before")
    def _split_origins(cls, value: str | List[str]) -> List[str]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @property
    def openapi_enabled(self) -> bool:
        """OpenAPI docs default to on everywhere except production."""

        if self.ENABLE_OPENAPI is not None:
            return self.ENABLE_OPENAPI
        return self.ENVIRONMENT != "production"


@lru_cache()
def get_settings() -> Settings:
    """Return a cached `Settings` instance."""

    return Settings()


# Singleton-style settings instance for modules that prefer direct access.
settings = get_settings()
