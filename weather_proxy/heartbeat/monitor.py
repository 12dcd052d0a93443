"""
Heartbeat Monitor

Independent liveness verification and status observation for the proxy,
run as its own long-lived process.

Two loops run concurrently and share no state:
- Health loop: every ``interval_seconds`` issue a bounded GET to the proxy's
  /health endpoint. Only a 200 within the timeout counts as healthy; anything
  else raises an alert. A failed check never stops the loop.
- Status subscriber: subscribe to the proxy's status channel, log every
  message, and resubscribe after a delay whenever the bus connection drops.
"""

import asyncio
from typing import Callable, Optional, Protocol, Union

import httpx
from redis.asyncio import Redis
from redis.exceptions import RedisError

from weather_proxy.clients.http import create_http_client
from weather_proxy.core.config import Settings
from weather_proxy.observability.logging import get_logger

logger = get_logger(__name__)

DEFAULT_INTERVAL_SECONDS = 5.0
DEFAULT_TIMEOUT_SECONDS = 5.0
DEFAULT_RECONNECT_SECONDS = 2.0
SUBSCRIBER_POLL_SECONDS = 1.0

ALERT_UNREACHABLE = "API Proxy failed health check!"
ALERT_UNHEALTHY_STATUS = "API Proxy returned non-200 from /health!"


class AlertNotifier(Protocol):
    """Destination for heartbeat alerts (chat webhook, pager, ...)."""

    async def send(self, message: str) -> None: ...


class LoggingAlertNotifier:
    """Alert sink that only writes the alert to the log (mock Slack alert)."""

    async def send(self, message: str) -> None:
        logger.error("🚨 MOCK SLACK ALERT", alert=message)


class HealthMonitor:
    """
    Polls the proxy's liveness endpoint and observes its status channel.

    Example:
        >>> monitor = HealthMonitor.from_settings(settings, redis_client)
        >>> stop = asyncio.Event()
        >>> await monitor.run(stop)

    Attributes:
        health_url: Liveness endpoint being polled
        channel: Status channel being observed
        consecutive_failures: Failed checks since the last healthy one
    """

    def __init__(
        self,
        health_url: str,
        redis_client: Optional[Redis],
        channel: str = "status_channel",
        http_client: Optional[httpx.AsyncClient] = None,
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        reconnect_delay_seconds: float = DEFAULT_RECONNECT_SECONDS,
        alert_notifier: Optional[AlertNotifier] = None,
        on_status: Optional[Callable[[str], None]] = None,
    ) -> None:
        """
        Args:
            health_url: Full URL of the proxy's /health endpoint
            redis_client: Async Redis client for the status bus (None disables the subscriber)
            channel: Status channel name
            http_client: Client for liveness checks (default: create_http_client())
            interval_seconds: Fixed period between checks
            timeout_seconds: Bound on one check
            reconnect_delay_seconds: Wait before resubscribing after a disconnect
            alert_notifier: Alert sink (default: LoggingAlertNotifier)
            on_status: Optional callback invoked with every status message
        """
        self._health_url = health_url
        self._redis = redis_client
        self._channel = channel
        self._owns_http_client = http_client is None
        self._http_client = http_client or create_http_client(timeout_seconds=timeout_seconds)
        self._interval_seconds = interval_seconds
        self._timeout_seconds = timeout_seconds
        self._reconnect_delay_seconds = reconnect_delay_seconds
        self._alert_notifier: AlertNotifier = alert_notifier or LoggingAlertNotifier()
        self._on_status = on_status
        self.consecutive_failures = 0

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        redis_client: Optional[Redis],
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "HealthMonitor":
        return cls(
            health_url=settings.proxy_health_url,
            redis_client=redis_client,
            channel=settings.status_channel,
            http_client=http_client,
            interval_seconds=settings.heartbeat_interval_seconds,
            timeout_seconds=settings.heartbeat_timeout_seconds,
            reconnect_delay_seconds=settings.subscriber_reconnect_seconds,
        )

    @property
    def health_url(self) -> str:
        return self._health_url

    @property
    def channel(self) -> str:
        return self._channel

    # =========================================================================
    # Liveness
    # =========================================================================

    async def check_health(self) -> bool:
        """
        Run one liveness check.

        Returns:
            True only for a 200 response within the timeout
        """
        try:
            response = await asyncio.wait_for(
                self._http_client.get(self._health_url, timeout=self._timeout_seconds),
                timeout=self._timeout_seconds,
            )
        except asyncio.TimeoutError:
            self.consecutive_failures += 1
            logger.error(
                "❌ API Proxy is unreachable",
                url=self._health_url,
                error=f"no complete response within {self._timeout_seconds}s",
                consecutive_failures=self.consecutive_failures,
            )
            await self._alert(ALERT_UNREACHABLE)
            return False
        except httpx.HTTPError as e:
            self.consecutive_failures += 1
            logger.error(
                "❌ API Proxy is unreachable",
                url=self._health_url,
                error=f"{type(e).__name__}: {e}",
                consecutive_failures=self.consecutive_failures,
            )
            await self._alert(ALERT_UNREACHABLE)
            return False

        if response.status_code != httpx.codes.OK:
            self.consecutive_failures += 1
            logger.error(
                "❌ API Proxy unhealthy status code",
                url=self._health_url,
                status_code=response.status_code,
                consecutive_failures=self.consecutive_failures,
            )
            await self._alert(ALERT_UNHEALTHY_STATUS)
            return False

        self.consecutive_failures = 0
        logger.info("✅ API Proxy is healthy", url=self._health_url)
        return True

    async def run_health_loop(self, stop_event: Optional[asyncio.Event] = None) -> None:
        """Check liveness on a fixed cadence until ``stop_event`` is set."""
        stop_event = stop_event or asyncio.Event()
        while not stop_event.is_set():
            await self.check_health()
            if await _wait_or_stop(stop_event, self._interval_seconds):
                break

    async def _alert(self, message: str) -> None:
        try:
            await self._alert_notifier.send(message)
        except Exception as e:
            logger.error("alert delivery failed", alert=message, error=str(e))

    # =========================================================================
    # Status Subscription
    # =========================================================================

    async def run_status_subscriber(self, stop_event: Optional[asyncio.Event] = None) -> None:
        """
        Log every status message until ``stop_event`` is set.

        A dropped connection ends the current subscription; after
        ``reconnect_delay_seconds`` a new one is opened.
        """
        stop_event = stop_event or asyncio.Event()
        if self._redis is None:
            logger.warning("status bus not configured, subscriber disabled")
            return

        while not stop_event.is_set():
            pubsub = self._redis.pubsub(ignore_subscribe_messages=True)
            try:
                await pubsub.subscribe(self._channel)
                logger.info("subscribed to status channel", channel=self._channel)

                while not stop_event.is_set():
                    message = await pubsub.get_message(timeout=SUBSCRIBER_POLL_SECONDS)
                    if message is not None and message.get("type") == "message":
                        self.handle_status(message["data"])
            except (RedisError, OSError) as e:
                logger.warning(
                    "status subscription lost",
                    channel=self._channel,
                    error=f"{type(e).__name__}: {e}",
                    retry_in_seconds=self._reconnect_delay_seconds,
                )
            finally:
                await _close_pubsub(pubsub)

            if await _wait_or_stop(stop_event, self._reconnect_delay_seconds):
                break

    def handle_status(self, data: Union[str, bytes]) -> str:
        """Log one status message and pass it to ``on_status``."""
        status = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else str(data)
        logger.info("📡 Status from API Proxy", status=status)
        if self._on_status is not None:
            self._on_status(status)
        return status

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def run(self, stop_event: Optional[asyncio.Event] = None) -> None:
        """Run the health loop and the status subscriber side by side."""
        stop_event = stop_event or asyncio.Event()
        await asyncio.gather(
            self.run_health_loop(stop_event),
            self.run_status_subscriber(stop_event),
        )

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()


async def _wait_or_stop(stop_event: asyncio.Event, seconds: float) -> bool:
    """Sleep for ``seconds`` unless stopped first. Returns True if stopped."""
    try:
        await asyncio.wait_for(stop_event.wait(), timeout=seconds)
    except asyncio.TimeoutError:
        return False
    return True


async def _close_pubsub(pubsub) -> None:
    try:
        await pubsub.aclose()
    except (RedisError, OSError) as e:
        logger.debug("error closing pubsub", error=str(e))
