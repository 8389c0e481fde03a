"""
Shared configuration management for the APQ Access Layer.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="ACCESS_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Persisted query store
    redis_url: str = Field(default="redis://localhost:6379/0")
    store_backend: Literal["redis", "memory"] = Field(default="redis")

    # Origin
    origin_url: str = Field(default="http://localhost:4000/graphql")
    origin_timeout_seconds: float = Field(default=10.0, gt=0)

    # Cache headers and APQ entry lifetime
    default_ttl_seconds: int = Field(default=900, ge=0)
    apq_ttl_seconds: int = Field(default=604800, gt=0)
    swr_seconds: int = Field(default=900, ge=0)
    ignore_origin_cache_headers: bool = Field(default=False)


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
