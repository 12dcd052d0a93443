"""Models Package - data records shared across the proxy."""

from weather_proxy.models.status import (
    STUB_FALLBACK_MESSAGE,
    StatusEvent,
    StatusEventKind,
)

__all__ = [
    "StatusEvent",
    "StatusEventKind",
    "STUB_FALLBACK_MESSAGE",
]
