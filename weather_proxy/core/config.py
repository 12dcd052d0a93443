"""
Core configuration module for the Weather Proxy.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the WEATHER_PROXY_ prefix.
The provider credential is also accepted under its bare OPENWEATHER_API_KEY name so
existing deployment env files keep working.

Both processes (the proxy and the heartbeat monitor) read the same Settings class;
each one only uses the fields it needs.
"""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All fields use the WEATHER_PROXY_ prefix for environment variables.
    Example: WEATHER_PROXY_PORT=8080
    """

    # =========================================================================
    # Service Configuration
    # =========================================================================
    service_name: str = Field(
        default="weather-proxy",
        description="Name of the service for logging and identification",
    )
    host: str = Field(
        default="0.0.0.0",
        description="Interface the proxy binds to",
    )
    port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description="Port the proxy listens on",
    )
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )

    # =========================================================================
    # Status Bus (Redis pub/sub)
    # =========================================================================
    redis_url: str = Field(
        default="redis://redis:6379",
        description="Redis connection URL for the status bus",
    )
    status_channel: str = Field(
        default="status_channel",
        description="Pub/sub channel carrying provider status messages",
    )
    publish_timeout_seconds: float = Field(
        default=1.0,
        gt=0.0,
        le=30.0,
        description="Upper bound on a single status publish",
    )

    # =========================================================================
    # Providers
    # =========================================================================
    openweather_api_key: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices(
            "WEATHER_PROXY_OPENWEATHER_API_KEY",
            "OPENWEATHER_API_KEY",
        ),
        description="API key for api.openweathermap.org",
    )
    openweathermap_enabled: bool = Field(
        default=True,
        description="Administratively enable the openweathermap provider",
    )
    wttr_enabled: bool = Field(
        default=True,
        description="Administratively enable the wttr.in provider",
    )
    provider_timeout_seconds: float = Field(
        default=5.0,
        gt=0.0,
        le=60.0,
        description="Timeout in seconds for a single provider call",
    )

    # =========================================================================
    # Circuit Breaker Configuration
    # =========================================================================
    circuit_breaker_failure_threshold: int = Field(
        default=3,
        ge=1,
        le=100,
        description="Number of consecutive failures before a provider circuit opens",
    )
    circuit_breaker_cooldown_seconds: float = Field(
        default=30.0,
        gt=0.0,
        le=3600.0,
        description="Seconds a circuit stays open before a half-open trial",
    )

    # =========================================================================
    # Heartbeat Monitor
    # =========================================================================
    proxy_health_url: str = Field(
        default="http://api-proxy:8080/health",
        description="Liveness endpoint polled by the heartbeat monitor",
    )
    heartbeat_interval_seconds: float = Field(
        default=5.0,
        gt=0.0,
        description="Seconds between liveness checks",
    )
    heartbeat_timeout_seconds: float = Field(
        default=5.0,
        gt=0.0,
        le=60.0,
        description="Timeout for a single liveness check",
    )
    subscriber_reconnect_seconds: float = Field(
        default=2.0,
        gt=0.0,
        description="Delay before resubscribing after the bus connection drops",
    )

    model_config = {
        "env_prefix": "WEATHER_PROXY_",
        "case_sensitive": False,
        "extra": "ignore",
        "populate_by_name": True,
    }

    @field_validator("redis_url")
    @classmethod
    def validate_redis_url(cls, v: str) -> str:
        """Validate Redis URL format."""
        if not v.startswith(("redis://", "rediss://")):
            raise ValueError("Redis URL must start with redis:// or rediss://")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalise and validate the log level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


@lru_cache
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Uses functools.lru_cache to ensure only one Settings instance is created.
    Tests that change the environment call get_settings.cache_clear().

    Returns:
        Settings: The application settings instance.
    """
    return Settings()
