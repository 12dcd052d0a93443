"""
Weather Provider definitions.

A provider is a configured upstream identified by a stable name. Its ordering
(priority), circuit breaker tuning and endpoint rule are fixed at startup; only
the administrative ``enabled`` flag may change while the process runs.
"""

from dataclasses import dataclass, field
from typing import Mapping
from urllib.parse import quote

import httpx

DEFAULT_PROVIDER_TIMEOUT_SECONDS = 5.0
DEFAULT_FAILURE_THRESHOLD = 3
DEFAULT_COOLDOWN_SECONDS = 30.0


@dataclass
class WeatherProvider:
    """
    Configuration for one weather provider.

    Attributes:
        name: Stable identifier (e.g., "openweathermap")
        priority: Position in the fallback order, lower runs first
        url_template: Endpoint with a ``{city}`` placeholder
        query_params: Static query parameters such as API keys (never repr'd)
        enabled: Administratively disabled providers are skipped entirely
        timeout_seconds: Bound on a single call
        failure_threshold: Consecutive failures before the circuit opens
        cooldown_seconds: Seconds the circuit stays open
    """

    name: str
    priority: int
    url_template: str
    query_params: Mapping[str, str] = field(default_factory=dict, repr=False)
    enabled: bool = True
    timeout_seconds: float = DEFAULT_PROVIDER_TIMEOUT_SECONDS
    failure_threshold: int = DEFAULT_FAILURE_THRESHOLD
    cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS

    def build_url(self, city: str) -> httpx.URL:
        """
        Build the request URL for a city.

        Pure function of the key: the city is percent-encoded into the path or
        query, and static query parameters are appended.
        """
        url = httpx.URL(self.url_template.format(city=quote(city, safe="")))
        if self.query_params:
            url = url.copy_merge_params(dict(self.query_params))
        return url
