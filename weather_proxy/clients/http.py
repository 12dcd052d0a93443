"""
HTTP Client Module

Factory for the shared httpx.AsyncClient used for provider calls and by the
heartbeat monitor.

Transport-level retries default to zero: each provider gets exactly one
attempt per fetch, and the circuit breaker decides what happens next.
"""

from typing import Optional

import httpx


DEFAULT_TIMEOUT_SECONDS: float = 5.0
"""Default timeout for HTTP requests in seconds."""

DEFAULT_MAX_CONNECTIONS: int = 100
"""Maximum number of connections in the pool."""

DEFAULT_MAX_KEEPALIVE: int = 20
"""Maximum number of keepalive connections."""

DEFAULT_RETRY_COUNT: int = 0
"""Connection-level retries. Zero keeps one attempt per provider per pass."""

USER_AGENT = "weather-proxy/1.0"


def create_http_client(
    base_url: Optional[str] = None,
    timeout_seconds: Optional[float] = None,
    max_connections: Optional[int] = None,
    max_keepalive: Optional[int] = None,
    retries: Optional[int] = None,
    headers: Optional[dict[str, str]] = None,
) -> httpx.AsyncClient:
    """
    Create a configured HTTP client with connection pooling and timeouts.

    Args:
        base_url: Base URL for all requests
        timeout_seconds: Request timeout in seconds (default: 5.0)
        max_connections: Maximum connections in pool (default: 100)
        max_keepalive: Maximum keepalive connections (default: 20)
        retries: Connection-level retries (default: 0)
        headers: Additional headers to include in all requests

    Returns:
        httpx.AsyncClient: Configured async HTTP client

    Example:
        >>> client = create_http_client(timeout_seconds=5.0)
        >>> async with client:
        ...     response = await client.get("https://wttr.in/London?format=j1")
    """
    timeout = timeout_seconds if timeout_seconds is not None else DEFAULT_TIMEOUT_SECONDS
    max_conn = max_connections if max_connections is not None else DEFAULT_MAX_CONNECTIONS
    max_keep = max_keepalive if max_keepalive is not None else DEFAULT_MAX_KEEPALIVE
    retry_count = retries if retries is not None else DEFAULT_RETRY_COUNT

    limits = httpx.Limits(
        max_connections=max_conn,
        max_keepalive_connections=max_keep,
    )

    timeout_config = httpx.Timeout(
        connect=timeout,
        read=timeout,
        write=timeout,
        pool=timeout,
    )

    default_headers = {
        "User-Agent": USER_AGENT,
        "Accept": "application/json",
    }
    if headers:
        default_headers.update(headers)

    transport = httpx.AsyncHTTPTransport(
        retries=retry_count,
        limits=limits,
    )

    return httpx.AsyncClient(
        base_url=base_url or "",
        timeout=timeout_config,
        headers=default_headers,
        transport=transport,
    )
