"""
Clients Package - outbound adapters.

Components:
- http: httpx.AsyncClient factory for provider and liveness calls
- status_publisher: Redis pub/sub publisher for status events
"""

from weather_proxy.clients.http import create_http_client
from weather_proxy.clients.status_publisher import (
    DEFAULT_STATUS_CHANNEL,
    StatusPublisher,
)

__all__ = [
    "create_http_client",
    "StatusPublisher",
    "DEFAULT_STATUS_CHANNEL",
]
