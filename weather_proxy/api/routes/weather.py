"""
Weather Router

GET /weather?city=<key>

- 200 with the first successful provider's JSON object
- 200 with the stub payload when every provider failed (degraded success)
- 400 plain text when the city is missing
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from weather_proxy.api.deps import get_fallback_engine
from weather_proxy.core.exceptions import AllProvidersFailedError, MissingRequestKeyError
from weather_proxy.resilience.fallback_engine import FallbackEngine

logger = logging.getLogger(__name__)

STUB_PAYLOAD: dict[str, str] = {
    "weather": "unavailable",
    "note": "all providers failed, returning stubbed response",
}

router = APIRouter(tags=["Weather"])


async def missing_request_key_handler(
    request: Request, exc: MissingRequestKeyError
) -> PlainTextResponse:
    """Render a missing request key as a 400 plain-text response."""
    return PlainTextResponse(exc.message, status_code=400)


@router.get("/weather")
async def get_weather(
    city: Optional[str] = None,
    engine: FallbackEngine = Depends(get_fallback_engine),
) -> Any:
    """
    Fetch weather for a city through the provider fallback chain.

    Args:
        city: City name (query parameter)
        engine: Injected fallback engine

    Returns:
        Provider payload, or the stub payload when all providers failed

    Raises:
        MissingRequestKeyError: If ``city`` is absent or blank
    """
    if city is None or not city.strip():
        raise MissingRequestKeyError("city")

    try:
        payload = await engine.fetch(city.strip())
    except AllProvidersFailedError as e:
        logger.warning(f"Serving stub payload: {e.message}")
        return JSONResponse(STUB_PAYLOAD)

    return JSONResponse(payload)
