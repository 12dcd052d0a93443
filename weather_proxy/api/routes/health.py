"""
Health Router

- GET /health          liveness probe polled by the heartbeat monitor ("alive")
- GET /health/ready    readiness: status bus reachable
- GET /health/circuits current circuit breaker state per provider
- GET /metrics         Prometheus exposition

Dependency checks live in HealthService so tests can substitute a fake.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Response
from fastapi.responses import PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel
from redis.asyncio import Redis
from redis.exceptions import RedisError

from weather_proxy.api.deps import get_fallback_engine, get_redis
from weather_proxy.resilience.fallback_engine import FallbackEngine

logger = logging.getLogger(__name__)

LIVENESS_BODY = "alive"


class ReadinessResponse(BaseModel):
    """Readiness check response model."""

    status: str
    checks: dict[str, bool]


class CircuitsResponse(BaseModel):
    """Circuit breaker state for every provider, in priority order."""

    providers: list[dict[str, Any]]


class HealthService:
    """
    Dependency checks for the readiness endpoint.

    Args:
        redis_client: Status bus client; None means the bus is not configured
    """

    def __init__(self, redis_client: Optional[Redis] = None) -> None:
        self._redis = redis_client

    async def check_redis(self) -> bool:
        """
        Ping the status bus.

        Returns:
            True if Redis answered, or if no bus is configured
        """
        if self._redis is None:
            logger.debug("Redis not configured, skipping health check")
            return True

        try:
            await self._redis.ping()
            return True
        except (RedisError, OSError) as e:
            logger.warning(f"Redis health check failed: {e}")
            return False


def get_health_service(redis_client: Optional[Redis] = Depends(get_redis)) -> HealthService:
    return HealthService(redis_client)


router = APIRouter(tags=["Health"])


@router.get("/health", response_class=PlainTextResponse)
async def health_check() -> PlainTextResponse:
    """
    Liveness endpoint.

    Always 200 with body ``alive`` while the process is serving requests;
    it deliberately ignores provider and bus health.
    """
    return PlainTextResponse(LIVENESS_BODY)


@router.get("/health/ready", response_model=ReadinessResponse)
async def readiness_check(
    response: Response,
    health_service: HealthService = Depends(get_health_service),
) -> ReadinessResponse:
    """
    Readiness endpoint: 200 when the status bus answers, 503 otherwise.
    """
    checks = {"redis": await health_service.check_redis()}
    all_healthy = all(checks.values())

    if not all_healthy:
        response.status_code = 503

    return ReadinessResponse(
        status="ready" if all_healthy else "not_ready",
        checks=checks,
    )


@router.get("/health/circuits", response_model=CircuitsResponse)
async def circuits(
    engine: FallbackEngine = Depends(get_fallback_engine),
) -> CircuitsResponse:
    """Report each provider's circuit state alongside its enabled flag."""
    providers = []
    for provider in engine.catalog:
        entry = engine.registry.snapshot(provider.name).to_dict()
        entry["enabled"] = provider.enabled
        entry["priority"] = provider.priority
        providers.append(entry)
    return CircuitsResponse(providers=providers)


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
