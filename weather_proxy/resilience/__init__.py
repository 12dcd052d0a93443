"""
Resilience patterns for the Weather Proxy.

This module provides:
- CircuitBreakerRegistry: per-provider circuit breaker state machine
- FallbackEngine: priority-ordered provider fallback driven by the registry
- Prometheus metrics for provider outcomes and state transitions
"""

from weather_proxy.resilience.circuit_breaker import (
    Admission,
    CircuitBreakerRegistry,
    CircuitSnapshot,
    CircuitState,
    FailureOutcome,
)
from weather_proxy.resilience.fallback_engine import FallbackEngine

__all__ = [
    # Circuit Breaker
    "Admission",
    "CircuitBreakerRegistry",
    "CircuitSnapshot",
    "CircuitState",
    "FailureOutcome",
    # Fallback
    "FallbackEngine",
]
