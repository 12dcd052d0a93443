"""
API Dependencies

FastAPI dependency functions for the API layer. Long-lived components are
created in the application lifespan and stored on ``app.state``; these
functions hand them to route handlers and can be replaced in tests through
``app.dependency_overrides``.
"""

from typing import Optional

from fastapi import Request
from redis.asyncio import Redis

from weather_proxy.core.config import Settings, get_settings as _get_settings
from weather_proxy.resilience.fallback_engine import FallbackEngine


def get_settings() -> Settings:
    """Get application settings (lru_cache singleton from core.config)."""
    return _get_settings()


def get_fallback_engine(request: Request) -> FallbackEngine:
    """
    Get the FallbackEngine created at startup.

    Raises:
        RuntimeError: If the application lifespan has not run
    """
    engine = getattr(request.app.state, "fallback_engine", None)
    if engine is None:
        raise RuntimeError("FallbackEngine not initialised; is the app lifespan running?")
    return engine


def get_redis(request: Request) -> Optional[Redis]:
    """Get the status bus Redis client, or None when it was not configured."""
    return getattr(request.app.state, "redis", None)


__all__ = [
    "get_settings",
    "get_fallback_engine",
    "get_redis",
]
