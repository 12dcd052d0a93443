"""
Status event model.

A status event is a fire-and-forget observability message describing one
provider outcome or circuit transition. Only ``message`` travels over the bus;
``kind`` and ``provider`` exist for logging and tests.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

STUB_FALLBACK_MESSAGE = "FALLBACK: Stub response due to total failure"


class StatusEventKind(str, Enum):
    """Kinds of status events emitted by the fallback engine."""

    SUCCESS = "success"
    FAILURE = "failure"
    CIRCUIT_OPENED = "circuit_opened"
    CIRCUIT_HALF_OPEN = "circuit_half_open"
    CIRCUIT_CLOSED = "circuit_closed"
    STUB_FALLBACK = "stub_fallback"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class StatusEvent:
    """
    Immutable status message.

    Attributes:
        kind: What happened
        message: Human-readable string published to the bus
        provider: Provider the event concerns (None for stub fallback)
        timestamp: Creation time (UTC)
    """

    kind: StatusEventKind
    message: str
    provider: Optional[str] = None
    timestamp: datetime = field(default_factory=_utcnow)

    def __str__(self) -> str:
        return self.message

    # =========================================================================
    # Factory Methods
    # =========================================================================

    @classmethod
    def success(cls, provider: str) -> "StatusEvent":
        return cls(StatusEventKind.SUCCESS, f"✅ Success from {provider}", provider)

    @classmethod
    def failure(cls, provider: str, failure_count: int) -> "StatusEvent":
        return cls(
            StatusEventKind.FAILURE,
            f"⚠️ Failure {failure_count} for {provider}",
            provider,
        )

    @classmethod
    def circuit_opened(cls, provider: str, failure_count: int) -> "StatusEvent":
        return cls(
            StatusEventKind.CIRCUIT_OPENED,
            f"🚫 Circuit opened for {provider} after {failure_count} failures",
            provider,
        )

    @classmethod
    def circuit_half_open(cls, provider: str) -> "StatusEvent":
        return cls(
            StatusEventKind.CIRCUIT_HALF_OPEN,
            f"🔄 Circuit half-open for {provider}, retrying",
            provider,
        )

    @classmethod
    def circuit_closed(cls, provider: str) -> "StatusEvent":
        return cls(
            StatusEventKind.CIRCUIT_CLOSED,
            f"✅ Circuit closed for {provider}, success!",
            provider,
        )

    @classmethod
    def stub_fallback(cls) -> "StatusEvent":
        return cls(StatusEventKind.STUB_FALLBACK, STUB_FALLBACK_MESSAGE)
