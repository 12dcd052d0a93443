"""
Resilience Metrics

Prometheus metrics for provider circuit breakers and the fallback engine.
Recorded by the engine after each registry update; the registry itself
stays free of side effects.

Metrics Provided:
- Provider attempts / successes / failures (counters)
- Circuit breaker state transitions (counter) and current state (gauge)
- Stub fallbacks served (counter)
"""

from prometheus_client import Counter, Gauge

METRIC_PROVIDER_ATTEMPTS = "weather_proxy_provider_attempts_total"
METRIC_PROVIDER_SUCCESSES = "weather_proxy_provider_successes_total"
METRIC_PROVIDER_FAILURES = "weather_proxy_provider_failures_total"
METRIC_CIRCUIT_TRANSITIONS = "weather_proxy_circuit_breaker_state_transitions_total"
METRIC_CIRCUIT_STATE = "weather_proxy_circuit_breaker_state"
METRIC_STUB_FALLBACKS = "weather_proxy_stub_fallbacks_total"


PROVIDER_ATTEMPTS = Counter(
    name=METRIC_PROVIDER_ATTEMPTS,
    documentation="Total number of provider calls attempted",
    labelnames=["provider"],
)

PROVIDER_SUCCESSES = Counter(
    name=METRIC_PROVIDER_SUCCESSES,
    documentation="Total number of successful provider calls",
    labelnames=["provider"],
)

PROVIDER_FAILURES = Counter(
    name=METRIC_PROVIDER_FAILURES,
    documentation="Total number of failed provider calls",
    labelnames=["provider", "reason"],
)

CIRCUIT_STATE_TRANSITIONS = Counter(
    name=METRIC_CIRCUIT_TRANSITIONS,
    documentation="Total number of circuit breaker state transitions",
    labelnames=["provider", "to_state", "from_state"],
)

CIRCUIT_STATE_GAUGE = Gauge(
    name=METRIC_CIRCUIT_STATE,
    documentation="Current state of circuit breaker (0=closed, 1=half-open, 2=open)",
    labelnames=["provider"],
)

STUB_FALLBACKS = Counter(
    name=METRIC_STUB_FALLBACKS,
    documentation="Total number of requests answered with the stub payload",
)

_STATE_TO_NUMERIC = {
    "closed": 0,
    "half-open": 1,
    "open": 2,
}


def record_provider_attempt(provider: str) -> None:
    PROVIDER_ATTEMPTS.labels(provider=provider).inc()


def record_provider_success(provider: str) -> None:
    PROVIDER_SUCCESSES.labels(provider=provider).inc()


def record_provider_failure(provider: str, reason: str) -> None:
    """
    Record a failed provider call.

    Args:
        provider: Provider name
        reason: Exception class name (e.g. ProviderUnreachableError)
    """
    PROVIDER_FAILURES.labels(provider=provider, reason=reason).inc()


def record_circuit_state_transition(
    provider: str,
    to_state: str,
    from_state: str,
) -> None:
    """
    Record a circuit breaker state transition and update the state gauge.

    Args:
        provider: Provider the circuit belongs to
        to_state: State transitioning to (closed, open, half-open)
        from_state: State transitioning from (closed, open, half-open)
    """
    CIRCUIT_STATE_TRANSITIONS.labels(
        provider=provider,
        to_state=to_state,
        from_state=from_state,
    ).inc()

    CIRCUIT_STATE_GAUGE.labels(provider=provider).set(
        _STATE_TO_NUMERIC.get(to_state, 0)
    )


def record_stub_fallback() -> None:
    STUB_FALLBACKS.inc()
