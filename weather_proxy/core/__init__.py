"""
Core module for the Weather Proxy.

This module contains configuration and the exception hierarchy shared by the
proxy and the heartbeat monitor.
"""

from weather_proxy.core.config import Settings, get_settings
from weather_proxy.core.exceptions import (
    AllProvidersFailedError,
    BusPublishError,
    ErrorCode,
    MissingRequestKeyError,
    ProviderError,
    ProviderUnhealthyResponseError,
    ProviderUnreachableError,
    WeatherProxyException,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Exceptions
    "ErrorCode",
    "WeatherProxyException",
    "ProviderError",
    "ProviderUnreachableError",
    "ProviderUnhealthyResponseError",
    "AllProvidersFailedError",
    "BusPublishError",
    "MissingRequestKeyError",
]
