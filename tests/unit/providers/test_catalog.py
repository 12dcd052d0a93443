"""
Tests for WeatherProvider and ProviderCatalog.
"""

import pytest

from weather_proxy.providers.base import WeatherProvider
from weather_proxy.providers.catalog import (
    PROVIDER_OPENWEATHERMAP,
    PROVIDER_WTTR,
    ProviderCatalog,
    build_default_catalog,
)


def _provider(name: str, priority: int, **kwargs) -> WeatherProvider:
    return WeatherProvider(
        name=name, priority=priority, url_template=f"https://{name}.test/{{city}}", **kwargs
    )


class TestBuildUrl:
    def test_city_is_percent_encoded(self) -> None:
        provider = _provider("wttr", 1)
        assert str(provider.build_url("São Paulo")) == "https://wttr.test/S%C3%A3o%20Paulo"

    def test_reserved_characters_cannot_escape_the_path(self) -> None:
        provider = _provider("wttr", 1)
        url = provider.build_url("a/b?c=d")
        assert url.path == "/a/b?c=d"
        assert url.query == b""

    def test_static_query_params_are_appended(self) -> None:
        provider = WeatherProvider(
            name="openweathermap",
            priority=0,
            url_template="https://api.test/weather?q={city}",
            query_params={"appid": "key"},
        )
        url = provider.build_url("London")

        assert url.params["q"] == "London"
        assert url.params["appid"] == "key"

    def test_api_key_not_in_repr(self) -> None:
        provider = WeatherProvider(
            name="openweathermap",
            priority=0,
            url_template="https://api.test/weather?q={city}",
            query_params={"appid": "secret-key"},
        )
        assert "secret-key" not in repr(provider)


class TestProviderCatalog:
    def test_iterates_in_priority_order(self) -> None:
        catalog = ProviderCatalog([_provider("b", 2), _provider("a", 0), _provider("c", 1)])
        assert catalog.names == ["a", "c", "b"]
        assert [p.name for p in catalog] == ["a", "c", "b"]

    def test_ties_keep_supplied_order(self) -> None:
        catalog = ProviderCatalog([_provider("x", 1), _provider("y", 1)])
        assert catalog.names == ["x", "y"]

    def test_duplicate_names_rejected(self) -> None:
        with pytest.raises(ValueError, match="Duplicate"):
            ProviderCatalog([_provider("wttr", 0), _provider("wttr", 1)])

    def test_get_and_len(self) -> None:
        catalog = ProviderCatalog([_provider("a", 0)])
        assert len(catalog) == 1
        assert catalog.get("a").name == "a"
        assert catalog.get("missing") is None

    def test_set_enabled(self) -> None:
        catalog = ProviderCatalog([_provider("a", 0)])
        catalog.set_enabled("a", False)
        assert catalog.get("a").enabled is False

    def test_set_enabled_unknown_provider(self) -> None:
        catalog = ProviderCatalog([_provider("a", 0)])
        with pytest.raises(KeyError):
            catalog.set_enabled("missing", True)


class TestDefaultCatalog:
    def test_openweathermap_first_then_wttr(self, test_settings) -> None:
        catalog = build_default_catalog(test_settings)
        assert catalog.names == [PROVIDER_OPENWEATHERMAP, PROVIDER_WTTR]

    def test_openweathermap_url_carries_key(self, test_settings) -> None:
        provider = build_default_catalog(test_settings).get(PROVIDER_OPENWEATHERMAP)
        url = provider.build_url("London")

        assert url.host == "api.openweathermap.org"
        assert url.path == "/data/2.5/weather"
        assert url.params["q"] == "London"
        assert url.params["appid"] == "test-openweather-key"

    def test_wttr_url(self, test_settings) -> None:
        provider = build_default_catalog(test_settings).get(PROVIDER_WTTR)
        assert str(provider.build_url("London")) == "https://wttr.in/London?format=j1"

    def test_settings_flow_into_providers(self, test_settings) -> None:
        settings = test_settings.model_copy(
            update={"wttr_enabled": False, "circuit_breaker_failure_threshold": 7}
        )
        catalog = build_default_catalog(settings)

        assert catalog.get(PROVIDER_WTTR).enabled is False
        assert catalog.get(PROVIDER_OPENWEATHERMAP).failure_threshold == 7
