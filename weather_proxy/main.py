"""
Weather Proxy - Main Application Entry Point

FastAPI application fronting the weather providers. The lifespan owns the
long-lived collaborators: the Redis status bus client, the shared provider
HTTP client, the status publisher and the fallback engine.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

import redis.asyncio as redis
import uvicorn
from fastapi import FastAPI

from weather_proxy import __version__
from weather_proxy.api.middleware.logging import RequestLoggingMiddleware
from weather_proxy.api.routes.health import router as health_router
from weather_proxy.api.routes.weather import missing_request_key_handler
from weather_proxy.api.routes.weather import router as weather_router
from weather_proxy.clients.http import create_http_client
from weather_proxy.clients.status_publisher import StatusPublisher
from weather_proxy.core.config import Settings, get_settings
from weather_proxy.core.exceptions import MissingRequestKeyError
from weather_proxy.observability.logging import configure_logging, get_logger
from weather_proxy.resilience.fallback_engine import FallbackEngine

APP_NAME = "Weather Proxy"
APP_DESCRIPTION = "Resilient weather API proxy with per-provider circuit breakers"

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan: build collaborators on startup, release them on shutdown.
    """
    settings: Settings = app.state.settings

    logger.info(
        "starting",
        service=settings.service_name,
        version=__version__,
        environment=settings.environment,
    )

    redis_client = redis.from_url(settings.redis_url, decode_responses=True)
    http_client = create_http_client(timeout_seconds=settings.provider_timeout_seconds)
    publisher = StatusPublisher(
        redis_client,
        channel=settings.status_channel,
        publish_timeout_seconds=settings.publish_timeout_seconds,
    )

    app.state.redis = redis_client
    app.state.http_client = http_client
    app.state.status_publisher = publisher
    app.state.fallback_engine = FallbackEngine.from_settings(settings, http_client, publisher)

    try:
        yield
    finally:
        logger.info("shutting down", service=settings.service_name)
        await publisher.aclose()
        await http_client.aclose()
        await redis_client.aclose()
        app.state.fallback_engine = None


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings override (default: get_settings())
    """
    settings = settings or get_settings()
    configure_logging(level=settings.log_level, force=True)

    application = FastAPI(
        title=APP_NAME,
        description=APP_DESCRIPTION,
        version=__version__,
        docs_url="/docs" if settings.environment != "production" else None,
        redoc_url=None,
        lifespan=lifespan,
    )
    application.state.settings = settings

    application.add_middleware(RequestLoggingMiddleware)
    application.add_exception_handler(MissingRequestKeyError, missing_request_key_handler)

    application.include_router(health_router)
    application.include_router(weather_router)

    @application.get("/", tags=["Info"])
    async def root() -> dict[str, Any]:
        """Root endpoint returning basic service information."""
        return {
            "service": APP_NAME,
            "version": __version__,
            "endpoints": ["/weather?city=<city>", "/health"],
        }

    return application


app = create_app()


def run() -> None:
    """Console entry point: serve the proxy with uvicorn."""
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)


if __name__ == "__main__":
    run()
