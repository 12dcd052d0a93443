"""
Observability Package

Structured JSON logging (structlog) with correlation IDs. Prometheus metrics
for the resilience layer live in weather_proxy.resilience.metrics.
"""

from weather_proxy.observability.logging import (
    clear_correlation_id,
    configure_logging,
    correlation_id_context,
    get_correlation_id,
    get_logger,
    set_correlation_id,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "set_correlation_id",
    "get_correlation_id",
    "clear_correlation_id",
    "correlation_id_context",
]
