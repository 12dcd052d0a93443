"""
Provider catalog.

Holds the closed set of configured providers in priority order and builds the
default openweathermap -> wttr.in chain from settings.
"""

import threading
from typing import Iterable, Iterator, List, Optional

from weather_proxy.core.config import Settings
from weather_proxy.providers.base import WeatherProvider

PROVIDER_OPENWEATHERMAP = "openweathermap"
PROVIDER_WTTR = "wttr"

OPENWEATHERMAP_URL = "https://api.openweathermap.org/data/2.5/weather?q={city}"
WTTR_URL = "https://wttr.in/{city}?format=j1"


class ProviderCatalog:
    """
    Ordered, named set of weather providers.

    Iteration always yields providers sorted by priority, ties broken by the
    order they were supplied in.
    """

    def __init__(self, providers: Iterable[WeatherProvider]) -> None:
        ordered = sorted(enumerate(providers), key=lambda item: (item[1].priority, item[0]))
        self._providers: List[WeatherProvider] = [provider for _, provider in ordered]

        names = [provider.name for provider in self._providers]
        duplicates = {name for name in names if names.count(name) > 1}
        if duplicates:
            raise ValueError(f"Duplicate provider names: {sorted(duplicates)}")

        self._lock = threading.Lock()

    def __iter__(self) -> Iterator[WeatherProvider]:
        return iter(list(self._providers))

    def __len__(self) -> int:
        return len(self._providers)

    @property
    def names(self) -> List[str]:
        return [provider.name for provider in self._providers]

    def get(self, name: str) -> Optional[WeatherProvider]:
        for provider in self._providers:
            if provider.name == name:
                return provider
        return None

    def set_enabled(self, name: str, enabled: bool) -> WeatherProvider:
        """
        Administratively enable or disable a provider.

        Raises:
            KeyError: If no provider has that name
        """
        provider = self.get(name)
        if provider is None:
            raise KeyError(f"Unknown provider '{name}'")
        with self._lock:
            provider.enabled = enabled
        return provider


def build_default_catalog(settings: Settings) -> ProviderCatalog:
    """
    Create the standard provider chain: openweathermap first, wttr.in second.

    Args:
        settings: Application settings (API key, enable flags, timeouts, breaker tuning)

    Returns:
        ProviderCatalog with both providers
    """
    common = {
        "timeout_seconds": settings.provider_timeout_seconds,
        "failure_threshold": settings.circuit_breaker_failure_threshold,
        "cooldown_seconds": settings.circuit_breaker_cooldown_seconds,
    }

    return ProviderCatalog(
        [
            WeatherProvider(
                name=PROVIDER_OPENWEATHERMAP,
                priority=0,
                url_template=OPENWEATHERMAP_URL,
                query_params={"appid": settings.openweather_api_key.get_secret_value()},
                enabled=settings.openweathermap_enabled,
                **common,
            ),
            WeatherProvider(
                name=PROVIDER_WTTR,
                priority=1,
                url_template=WTTR_URL,
                enabled=settings.wttr_enabled,
                **common,
            ),
        ]
    )
