"""
Fallback Engine

Orchestrates one logical weather fetch across the configured providers.

Fallback order:
    openweathermap -> wttr.in -> (stub payload at the request boundary)

Providers are tried in fixed priority order, one attempt each. Disabled
providers are skipped without touching their circuit; providers whose circuit
is not eligible are skipped with an info log. The first success wins and no
further provider is called. Every outcome is written back to the circuit
breaker registry in a single locked update, then reported as a status event.

Concurrency:
    The registry is shared across requests and serialises its own updates.
    Provider calls run outside any lock. Status events are emitted through
    StatusPublisher.emit, so a slow bus never delays the response. A cancelled
    fetch records nothing for the in-flight provider.
"""

import asyncio
import time
from typing import Any, Callable, Dict, Optional

import httpx

from weather_proxy.clients.status_publisher import StatusPublisher
from weather_proxy.core.config import Settings
from weather_proxy.core.exceptions import (
    AllProvidersFailedError,
    ProviderError,
    ProviderUnhealthyResponseError,
    ProviderUnreachableError,
)
from weather_proxy.models.status import StatusEvent
from weather_proxy.observability.logging import get_logger
from weather_proxy.providers.base import WeatherProvider
from weather_proxy.providers.catalog import ProviderCatalog, build_default_catalog
from weather_proxy.resilience.circuit_breaker import (
    Admission,
    CircuitBreakerRegistry,
    CircuitState,
)
from weather_proxy.resilience.metrics import (
    record_circuit_state_transition,
    record_provider_attempt,
    record_provider_failure,
    record_provider_success,
    record_stub_fallback,
)

logger = get_logger(__name__)

SKIP_REASON_DISABLED = "provider disabled"
SKIP_REASON_CIRCUIT_OPEN = "circuit open"


class FallbackEngine:
    """
    Circuit-breaker-driven fallback across weather providers.

    Example:
        >>> engine = FallbackEngine(catalog, http_client, publisher)
        >>> try:
        ...     payload = await engine.fetch("London")
        ... except AllProvidersFailedError:
        ...     payload = STUB_PAYLOAD

    Attributes:
        catalog: Providers in priority order
        registry: Circuit breaker registry, one circuit per provider
    """

    def __init__(
        self,
        catalog: ProviderCatalog,
        http_client: httpx.AsyncClient,
        publisher: StatusPublisher,
        registry: Optional[CircuitBreakerRegistry] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize FallbackEngine.

        Registers a circuit for every catalog provider that the registry does
        not already know, using the provider's own threshold and cooldown.

        Args:
            catalog: Providers in priority order
            http_client: Shared async HTTP client for provider calls
            publisher: Status publisher for the bus
            registry: Existing registry to share (default: a new one)
            clock: Monotonic time source, injectable for tests
        """
        self._catalog = catalog
        self._http_client = http_client
        self._publisher = publisher
        self._registry = registry if registry is not None else CircuitBreakerRegistry()
        self._clock = clock

        for provider in catalog:
            if provider.name not in self._registry:
                self._registry.register(
                    provider.name,
                    failure_threshold=provider.failure_threshold,
                    cooldown_seconds=provider.cooldown_seconds,
                )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_client: httpx.AsyncClient,
        publisher: StatusPublisher,
    ) -> "FallbackEngine":
        """Create the engine with the default provider chain."""
        return cls(
            catalog=build_default_catalog(settings),
            http_client=http_client,
            publisher=publisher,
            registry=CircuitBreakerRegistry(
                default_failure_threshold=settings.circuit_breaker_failure_threshold,
                default_cooldown_seconds=settings.circuit_breaker_cooldown_seconds,
            ),
        )

    @property
    def catalog(self) -> ProviderCatalog:
        return self._catalog

    @property
    def registry(self) -> CircuitBreakerRegistry:
        return self._registry

    # =========================================================================
    # Fetch
    # =========================================================================

    async def fetch(self, city: str) -> Dict[str, Any]:
        """
        Fetch weather for a city from the first provider that succeeds.

        Args:
            city: Request key

        Returns:
            The successful provider's JSON payload, unchanged

        Raises:
            AllProvidersFailedError: Every provider was disabled, skipped or failed
        """
        provider_errors: Dict[str, str] = {}

        for provider in self._catalog:
            if not provider.enabled:
                logger.debug("provider disabled, skipping", provider=provider.name)
                provider_errors[provider.name] = SKIP_REASON_DISABLED
                continue

            admission = self._registry.admit(provider.name, self._clock())
            if not admission.allowed:
                logger.info("circuit open, skipping provider", provider=provider.name)
                provider_errors[provider.name] = SKIP_REASON_CIRCUIT_OPEN
                continue

            if admission.trial:
                self._on_half_open(provider.name, admission)

            record_provider_attempt(provider.name)
            try:
                payload = await self._call_provider(provider, city)
            except ProviderError as e:
                self._on_failure(provider.name, e)
                provider_errors[provider.name] = e.message
                continue

            self._on_success(provider.name, admission)
            return payload

        record_stub_fallback()
        logger.error("all providers failed", city=city, provider_errors=provider_errors)
        self._publisher.emit(StatusEvent.stub_fallback())
        raise AllProvidersFailedError(city, provider_errors)

    async def _call_provider(self, provider: WeatherProvider, city: str) -> Dict[str, Any]:
        """
        Perform the single bounded-time call to a provider.

        ``timeout_seconds`` bounds the whole call, body included. httpx's own
        timeout only bounds each phase, so a slowly dripping response would
        otherwise keep the call alive.

        Raises:
            ProviderUnreachableError: Transport error or timeout
            ProviderUnhealthyResponseError: Non-200 status or a body that is not a JSON object
        """
        url = provider.build_url(city)

        try:
            response = await asyncio.wait_for(
                self._http_client.get(url, timeout=provider.timeout_seconds),
                timeout=provider.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            raise ProviderUnreachableError(
                f"no complete response within {provider.timeout_seconds}s",
                provider=provider.name,
            ) from e
        except httpx.HTTPError as e:
            raise ProviderUnreachableError(
                f"{type(e).__name__}: {e}" if str(e) else type(e).__name__,
                provider=provider.name,
            ) from e

        if response.status_code != httpx.codes.OK:
            raise ProviderUnhealthyResponseError(
                f"unexpected status {response.status_code}",
                provider=provider.name,
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ProviderUnhealthyResponseError(
                "response body is not valid JSON",
                provider=provider.name,
                status_code=response.status_code,
            ) from e

        if not isinstance(payload, dict):
            raise ProviderUnhealthyResponseError(
                "response body is not a JSON object",
                provider=provider.name,
                status_code=response.status_code,
            )

        return payload

    # =========================================================================
    # Outcome Handling (after the registry update; never under its locks)
    # =========================================================================

    def _on_half_open(self, provider: str, admission: Admission) -> None:
        logger.info(
            "circuit half-open, retrying",
            provider=provider,
            previous_state=admission.previous_state.value,
        )
        # A re-granted abandoned trial is already HALF_OPEN: no transition.
        if admission.previous_state == CircuitState.OPEN:
            record_circuit_state_transition(
                provider, CircuitState.HALF_OPEN.value, CircuitState.OPEN.value
            )
        self._publisher.emit(StatusEvent.circuit_half_open(provider))

    def _on_failure(self, provider: str, error: ProviderError) -> None:
        outcome = self._registry.record_failure(provider, self._clock())
        failure_count = outcome.snapshot.failure_count
        record_provider_failure(provider, type(error).__name__)

        logger.warning(
            "provider failed",
            provider=provider,
            error=error.message,
            status_code=error.status_code,
            failure_count=failure_count,
        )

        if outcome.opened:
            record_circuit_state_transition(
                provider, CircuitState.OPEN.value, outcome.previous_state.value
            )
            logger.warning("circuit opened", provider=provider, failure_count=failure_count)
            self._publisher.emit(StatusEvent.circuit_opened(provider, failure_count))
        else:
            self._publisher.emit(StatusEvent.failure(provider, failure_count))

    def _on_success(self, provider: str, admission: Admission) -> None:
        self._registry.record_success(provider)
        record_provider_success(provider)

        if admission.trial:
            record_circuit_state_transition(
                provider, CircuitState.CLOSED.value, CircuitState.HALF_OPEN.value
            )
            logger.info("circuit closed", provider=provider)
            self._publisher.emit(StatusEvent.circuit_closed(provider))

        self._publisher.emit(StatusEvent.success(provider))
