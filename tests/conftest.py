"""
Pytest configuration and shared fixtures.

Fixtures follow the FakeRepository approach: fakeredis stands in for the
status bus, AsyncMock(spec=httpx.AsyncClient) for provider transport, and a
manual clock drives circuit breaker cooldowns without sleeping.
"""

import asyncio
import sys
from pathlib import Path
from typing import Any, Optional
from unittest.mock import AsyncMock, MagicMock

import fakeredis.aioredis
import httpx
import pytest
import pytest_asyncio

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))


def pytest_configure(config):
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: Integration tests for service interactions")


# =============================================================================
# Helpers
# =============================================================================


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_response(
    status_code: int = 200,
    json_body: Optional[Any] = None,
    text: Optional[str] = None,
    url: str = "https://provider.test/weather",
) -> httpx.Response:
    """Build a real httpx.Response bound to a request."""
    request = httpx.Request("GET", url)
    if json_body is not None:
        return httpx.Response(status_code, json=json_body, request=request)
    return httpx.Response(status_code, text=text or "", request=request)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def response_factory():
    """Factory for httpx.Response objects (see make_response)."""
    return make_response


@pytest.fixture
def fake_redis():
    """Fake async Redis client with decode_responses=True."""
    return fakeredis.aioredis.FakeRedis(decode_responses=True)


@pytest.fixture
def mock_http_client():
    """Mock provider HTTP client."""
    return AsyncMock(spec=httpx.AsyncClient)


@pytest.fixture
def mock_publisher():
    """Mock StatusPublisher; ``emit`` is synchronous, ``publish`` async."""
    from weather_proxy.clients.status_publisher import StatusPublisher

    publisher = MagicMock(spec=StatusPublisher)
    publisher.publish = AsyncMock(return_value=True)
    return publisher


@pytest.fixture
def test_settings():
    """Settings with safe test values; no real services are contacted."""
    from weather_proxy.core.config import Settings

    return Settings(
        service_name="weather-proxy-test",
        environment="development",
        redis_url="redis://localhost:6379",
        openweather_api_key="test-openweather-key",
        provider_timeout_seconds=5.0,
        circuit_breaker_failure_threshold=3,
        circuit_breaker_cooldown_seconds=30.0,
        proxy_health_url="http://api-proxy:8080/health",
        heartbeat_interval_seconds=0.01,
        heartbeat_timeout_seconds=1.0,
        subscriber_reconnect_seconds=0.01,
    )


@pytest.fixture
def two_provider_catalog():
    """Catalog with 'primary' (priority 0) and 'secondary' (priority 1)."""
    from weather_proxy.providers.base import WeatherProvider
    from weather_proxy.providers.catalog import ProviderCatalog

    return ProviderCatalog(
        [
            WeatherProvider(
                name="primary",
                priority=0,
                url_template="https://primary.test/weather?q={city}",
                failure_threshold=3,
                cooldown_seconds=30.0,
            ),
            WeatherProvider(
                name="secondary",
                priority=1,
                url_template="https://secondary.test/{city}",
                failure_threshold=3,
                cooldown_seconds=30.0,
            ),
        ]
    )


@pytest.fixture
def engine(two_provider_catalog, mock_http_client, mock_publisher, fake_clock):
    """FallbackEngine over the two-provider catalog with mocked collaborators."""
    from weather_proxy.resilience.fallback_engine import FallbackEngine

    return FallbackEngine(
        catalog=two_provider_catalog,
        http_client=mock_http_client,
        publisher=mock_publisher,
        clock=fake_clock,
    )


@pytest_asyncio.fixture
async def slow_drip_server():
    """
    Local HTTP server that answers 200 and then sends one body byte every 0.15s.

    Each byte resets a per-read timeout, so only a deadline on the whole call
    can stop it. Yields the server's base URL.
    """
    stop = asyncio.Event()

    async def drip(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        try:
            await reader.readuntil(b"\r\n\r\n")
            writer.write(
                b"HTTP/1.1 200 OK\r\n"
                b"Content-Type: application/json\r\n"
                b"Transfer-Encoding: chunked\r\n\r\n"
            )
            await writer.drain()
            while not stop.is_set():
                writer.write(b"1\r\n \r\n")
                await writer.drain()
                await asyncio.sleep(0.15)
        except (ConnectionError, asyncio.IncompleteReadError):
            pass
        finally:
            writer.close()

    server = await asyncio.start_server(drip, "127.0.0.1", 0)
    host, port = server.sockets[0].getsockname()[:2]
    try:
        yield f"http://{host}:{port}"
    finally:
        stop.set()
        server.close()
        await asyncio.wait_for(server.wait_closed(), timeout=2.0)
