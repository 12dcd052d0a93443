"""
Unit tests for weather_proxy/core/exceptions.py.
"""

import pytest

from weather_proxy.core.exceptions import (
    AllProvidersFailedError,
    BusPublishError,
    ErrorCode,
    MissingRequestKeyError,
    ProviderError,
    ProviderUnhealthyResponseError,
    ProviderUnreachableError,
    WeatherProxyException,
)


class TestHierarchy:
    @pytest.mark.parametrize(
        "exc",
        [
            ProviderUnreachableError("refused", provider="wttr"),
            ProviderUnhealthyResponseError("status 503", provider="wttr", status_code=503),
            AllProvidersFailedError("London"),
            BusPublishError("timeout", channel="status_channel"),
            MissingRequestKeyError(),
        ],
    )
    def test_all_inherit_from_base(self, exc) -> None:
        assert isinstance(exc, WeatherProxyException)
        assert isinstance(exc, Exception)

    def test_provider_errors_share_a_base(self) -> None:
        assert issubclass(ProviderUnreachableError, ProviderError)
        assert issubclass(ProviderUnhealthyResponseError, ProviderError)


class TestErrorCodes:
    def test_base_defaults_to_proxy_error(self) -> None:
        assert WeatherProxyException("boom").error_code == ErrorCode.PROXY_ERROR

    def test_unreachable(self) -> None:
        exc = ProviderUnreachableError("ConnectError", provider="openweathermap")
        assert exc.error_code == ErrorCode.PROVIDER_UNREACHABLE
        assert exc.provider == "openweathermap"
        assert exc.status_code is None

    def test_unhealthy_response_keeps_status(self) -> None:
        exc = ProviderUnhealthyResponseError("unexpected status 401", "openweathermap", 401)
        assert exc.error_code == ErrorCode.PROVIDER_UNHEALTHY_RESPONSE
        assert exc.status_code == 401

    def test_error_code_is_string_enum(self) -> None:
        assert ErrorCode.ALL_PROVIDERS_FAILED == "ALL_PROVIDERS_FAILED"


class TestMessages:
    def test_all_providers_failed_message(self) -> None:
        exc = AllProvidersFailedError("Paris", {"wttr": "circuit open"})

        assert str(exc) == "All providers failed for 'Paris'"
        assert exc.key == "Paris"
        assert exc.provider_errors == {"wttr": "circuit open"}

    def test_all_providers_failed_defaults_to_empty_errors(self) -> None:
        assert AllProvidersFailedError("Paris").provider_errors == {}

    def test_missing_request_key_message(self) -> None:
        exc = MissingRequestKeyError()

        assert exc.message == "Missing ?city= parameter"
        assert exc.field == "city"
        assert exc.error_code == ErrorCode.MISSING_REQUEST_KEY

    def test_bus_publish_error_channel(self) -> None:
        exc = BusPublishError("publish timed out after 1.0s", channel="status_channel")
        assert exc.channel == "status_channel"
        assert exc.error_code == ErrorCode.BUS_PUBLISH_FAILURE

    def test_extra_kwargs_become_attributes(self) -> None:
        exc = WeatherProxyException("boom", request_id="req-1")
        assert exc.request_id == "req-1"
