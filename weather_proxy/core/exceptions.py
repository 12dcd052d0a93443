"""
Custom exceptions for the Weather Proxy.

All exceptions inherit from WeatherProxyException and carry an error code for
consistent handling in logs and API responses.

Provider-level failures never leave the fallback engine: they are recorded
against the provider's circuit and, in aggregate, surface as
AllProvidersFailedError, which the request boundary turns into a stub payload.
"""

from enum import Enum
from typing import Any, Optional


class ErrorCode(str, Enum):
    """
    Error codes for Weather Proxy exceptions.

    These codes provide a consistent way to identify error types
    across the API and in logging.
    """

    PROXY_ERROR = "PROXY_ERROR"
    PROVIDER_UNREACHABLE = "PROVIDER_UNREACHABLE"
    PROVIDER_UNHEALTHY_RESPONSE = "PROVIDER_UNHEALTHY_RESPONSE"
    ALL_PROVIDERS_FAILED = "ALL_PROVIDERS_FAILED"
    BUS_PUBLISH_FAILURE = "BUS_PUBLISH_FAILURE"
    MISSING_REQUEST_KEY = "MISSING_REQUEST_KEY"


class WeatherProxyException(Exception):
    """
    Base exception for all Weather Proxy errors.

    Attributes:
        message: Human-readable error message.
        error_code: Machine-readable error code from ErrorCode enum.
    """

    def __init__(
        self,
        message: str,
        error_code: str = ErrorCode.PROXY_ERROR,
        **kwargs: Any,
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error message.
            error_code: Machine-readable error code.
            **kwargs: Additional attributes to set on the exception.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code

        for key, value in kwargs.items():
            setattr(self, key, value)


# =============================================================================
# Provider Errors
# =============================================================================


class ProviderError(WeatherProxyException):
    """
    Exception for a failed call to a weather provider.

    Attributes:
        provider: Name of the provider (e.g., "openweathermap", "wttr").
        status_code: HTTP status code from the provider (if applicable).
    """

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: Optional[int] = None,
        error_code: str = ErrorCode.PROXY_ERROR,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, error_code, **kwargs)
        self.provider = provider
        self.status_code = status_code


class ProviderUnreachableError(ProviderError):
    """Transport-level failure (connect error, timeout) calling a provider."""

    def __init__(self, message: str, provider: str, **kwargs: Any) -> None:
        super().__init__(
            message,
            provider=provider,
            error_code=ErrorCode.PROVIDER_UNREACHABLE,
            **kwargs,
        )


class ProviderUnhealthyResponseError(ProviderError):
    """
    Provider answered, but not with a usable success response.

    Covers non-200 status codes and 200 responses whose body is not a JSON
    object. Treated identically to ProviderUnreachableError by the engine.
    """

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message,
            provider=provider,
            status_code=status_code,
            error_code=ErrorCode.PROVIDER_UNHEALTHY_RESPONSE,
            **kwargs,
        )


# =============================================================================
# Fetch Outcome
# =============================================================================


class AllProvidersFailedError(WeatherProxyException):
    """
    Every enabled provider failed or was skipped for one fetch.

    Terminal for that fetch only; the request boundary answers with the stub
    payload instead of an error status.

    Attributes:
        key: The request key (city) that could not be served.
        provider_errors: Provider name -> reason it failed or was skipped.
    """

    def __init__(
        self,
        key: str,
        provider_errors: Optional[dict[str, str]] = None,
        message: str = "All providers failed",
        **kwargs: Any,
    ) -> None:
        super().__init__(
            f"{message} for '{key}'",
            ErrorCode.ALL_PROVIDERS_FAILED,
            **kwargs,
        )
        self.key = key
        self.provider_errors = provider_errors or {}


# =============================================================================
# Bus / Request Errors
# =============================================================================


class BusPublishError(WeatherProxyException):
    """
    Status message could not be delivered to the bus.

    Only raised inside the status publisher, which logs and swallows it.

    Attributes:
        channel: The pub/sub channel that was targeted.
    """

    def __init__(self, message: str, channel: str, **kwargs: Any) -> None:
        super().__init__(message, ErrorCode.BUS_PUBLISH_FAILURE, **kwargs)
        self.channel = channel


class MissingRequestKeyError(WeatherProxyException):
    """
    Caller omitted the request key.

    Surfaced as a 400 plain-text response; never a circuit event.

    Attributes:
        field: Name of the missing query parameter.
    """

    def __init__(
        self,
        field: str = "city",
        message: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            message or f"Missing ?{field}= parameter",
            ErrorCode.MISSING_REQUEST_KEY,
            **kwargs,
        )
        self.field = field
