"""Heartbeat monitor: liveness polling and status channel observation."""

from weather_proxy.heartbeat.monitor import (
    AlertNotifier,
    HealthMonitor,
    LoggingAlertNotifier,
)

__all__ = [
    "AlertNotifier",
    "HealthMonitor",
    "LoggingAlertNotifier",
]
