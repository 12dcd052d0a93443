"""
Status Publisher

Delivers StatusEvent messages to the Redis pub/sub status channel.

Delivery is best-effort and at-most-once: a failed or slow publish is logged
and dropped, never raised. The fallback engine calls ``emit``, which schedules
the publish as a background task so the request path never waits on the bus.
"""

import asyncio
from typing import Optional, Set

from redis.asyncio import Redis
from redis.exceptions import RedisError

from weather_proxy.core.exceptions import BusPublishError
from weather_proxy.models.status import StatusEvent
from weather_proxy.observability.logging import get_logger

logger = get_logger(__name__)

DEFAULT_STATUS_CHANNEL = "status_channel"
DEFAULT_PUBLISH_TIMEOUT_SECONDS = 1.0


class StatusPublisher:
    """
    Fire-and-forget publisher for the status channel.

    Example:
        >>> import redis.asyncio as redis
        >>> publisher = StatusPublisher(redis.from_url("redis://redis:6379"))
        >>> publisher.emit(StatusEvent.success("wttr"))
        >>> await publisher.aclose()
    """

    def __init__(
        self,
        redis_client: Optional[Redis],
        channel: str = DEFAULT_STATUS_CHANNEL,
        publish_timeout_seconds: float = DEFAULT_PUBLISH_TIMEOUT_SECONDS,
    ) -> None:
        """
        Args:
            redis_client: Async Redis client; None disables delivery (events are only logged)
            channel: Pub/sub channel name
            publish_timeout_seconds: Upper bound on a single publish
        """
        self._redis = redis_client
        self._channel = channel
        self._publish_timeout_seconds = publish_timeout_seconds
        self._pending: Set[asyncio.Task] = set()

    @property
    def channel(self) -> str:
        return self._channel

    @property
    def pending_count(self) -> int:
        """Number of publishes still in flight."""
        return len(self._pending)

    async def publish(self, event: StatusEvent) -> bool:
        """
        Publish one event and wait for the bus to acknowledge it.

        Never raises: any delivery failure is logged and reported as False.

        Returns:
            True if the bus accepted the message
        """
        try:
            await self._send(event)
        except BusPublishError as e:
            logger.warning(
                "status publish failed",
                channel=e.channel,
                status_message=event.message,
                error=e.message,
            )
            return False
        return True

    def emit(self, event: StatusEvent) -> None:
        """
        Schedule ``publish`` without waiting for it.

        Must be called from a running event loop.
        """
        task = asyncio.get_running_loop().create_task(self.publish(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        """Wait for every scheduled publish to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    async def aclose(self) -> None:
        """Flush outstanding publishes. The Redis client is owned by the caller."""
        await self.drain()

    async def _send(self, event: StatusEvent) -> None:
        if self._redis is None:
            logger.debug("status bus not configured", status_message=event.message)
            return

        try:
            await asyncio.wait_for(
                self._redis.publish(self._channel, event.message),
                timeout=self._publish_timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise BusPublishError(
                f"publish timed out after {self._publish_timeout_seconds}s",
                channel=self._channel,
            ) from e
        except (RedisError, OSError) as e:
            raise BusPublishError(str(e) or type(e).__name__, channel=self._channel) from e

        logger.debug("status published", channel=self._channel, status_message=event.message)
