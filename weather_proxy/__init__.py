"""Weather Proxy - resilient weather API proxy and heartbeat monitor.

Note: Import `app` directly from `weather_proxy.main` to avoid circular imports.
"""

__version__ = "1.0.0"

__all__ = ["main", "api", "core", "models", "resilience", "heartbeat"]
