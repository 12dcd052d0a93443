"""API Package - FastAPI routes, middleware, and dependencies.

Components:
- routes: API endpoint routers (weather, health)
- middleware: Request/response logging
- deps: FastAPI dependency injection functions

Note: Import routers directly from weather_proxy.api.routes to avoid circular imports.
"""

__all__ = ["routes", "middleware", "deps"]
