"""Routes Package - API endpoint definitions.

Note: Import routers directly from individual modules to avoid circular imports.
Example: from weather_proxy.api.routes.weather import router as weather_router
"""

__all__ = ["health", "weather"]
