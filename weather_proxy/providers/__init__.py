"""Weather providers: provider records and the default priority chain."""

from weather_proxy.providers.base import WeatherProvider
from weather_proxy.providers.catalog import (
    PROVIDER_OPENWEATHERMAP,
    PROVIDER_WTTR,
    ProviderCatalog,
    build_default_catalog,
)

__all__ = [
    "WeatherProvider",
    "ProviderCatalog",
    "build_default_catalog",
    "PROVIDER_OPENWEATHERMAP",
    "PROVIDER_WTTR",
]
