"""
Heartbeat service entry point.

Usage:
    python -m weather_proxy.heartbeat
    weather-heartbeat
"""

import asyncio
import signal

import redis.asyncio as redis

from weather_proxy.core.config import get_settings
from weather_proxy.heartbeat.monitor import HealthMonitor
from weather_proxy.observability.logging import configure_logging, get_logger

logger = get_logger(__name__)


async def serve() -> None:
    """Run the monitor until SIGINT/SIGTERM."""
    settings = get_settings()
    redis_client = redis.from_url(settings.redis_url, decode_responses=True)
    monitor = HealthMonitor.from_settings(settings, redis_client)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows event loops lack add_signal_handler
            pass

    logger.info(
        "heartbeat starting",
        health_url=monitor.health_url,
        channel=monitor.channel,
        interval_seconds=settings.heartbeat_interval_seconds,
    )
    try:
        await monitor.run(stop_event)
    finally:
        await monitor.aclose()
        await redis_client.aclose()
        logger.info("heartbeat stopped")


def main() -> None:
    configure_logging(level=get_settings().log_level, force=True)
    asyncio.run(serve())


if __name__ == "__main__":
    main()
