"""
Tests for structured logging and the request logging middleware helpers.
"""

import io
import json

import pytest

from weather_proxy.api.middleware.logging import redact_sensitive_headers
from weather_proxy.observability.logging import (
    clear_correlation_id,
    configure_logging,
    correlation_id_context,
    get_correlation_id,
    get_logger,
    reset_logging,
    set_correlation_id,
)


@pytest.fixture
def log_stream():
    stream = io.StringIO()
    configure_logging(level="DEBUG", stream=stream, force=True)
    yield stream
    reset_logging()
    configure_logging(force=True)


def _records(stream: io.StringIO) -> list:
    return [json.loads(line) for line in stream.getvalue().splitlines() if line.strip()]


class TestCorrelationId:
    def test_context_sets_and_restores(self) -> None:
        clear_correlation_id()
        with correlation_id_context("req-1"):
            assert get_correlation_id() == "req-1"
        assert get_correlation_id() is None

    def test_set_and_clear(self) -> None:
        set_correlation_id("req-2")
        assert get_correlation_id() == "req-2"
        clear_correlation_id()
        assert get_correlation_id() is None


class TestStructuredOutput:
    def test_get_logger_binds_name(self, log_stream) -> None:
        logger = get_logger("weather_proxy.resilience.fallback_engine")
        logger.info("provider failed", provider="wttr")

        record = _records(log_stream)[-1]
        assert record["logger_name"] == "weather_proxy.resilience.fallback_engine"
        assert record["provider"] == "wttr"

    def test_module_logger_follows_later_configuration(self) -> None:
        logger = get_logger("early")
        stream = io.StringIO()
        configure_logging(level="INFO", stream=stream, force=True)
        try:
            logger.info("after reconfigure")
        finally:
            reset_logging()
            configure_logging(force=True)

        assert _records(stream)[-1]["event"] == "after reconfigure"

    def test_json_line_with_fields(self, log_stream) -> None:
        get_logger("test").warning("circuit opened", provider="wttr", failure_count=3)

        record = _records(log_stream)[-1]
        assert record["event"] == "circuit opened"
        assert record["level"] == "warning"
        assert record["provider"] == "wttr"
        assert record["failure_count"] == 3
        assert "timestamp" in record

    def test_correlation_id_included(self, log_stream) -> None:
        with correlation_id_context("req-xyz"):
            get_logger("test").info("fetching")

        assert _records(log_stream)[-1]["correlation_id"] == "req-xyz"

    def test_emoji_kept_readable(self, log_stream) -> None:
        get_logger("test").info("📡 Status from API Proxy", status="✅ Success from wttr")
        assert "✅ Success from wttr" in log_stream.getvalue()

    def test_level_filtering(self) -> None:
        stream = io.StringIO()
        configure_logging(level="ERROR", stream=stream, force=True)
        try:
            get_logger("test").info("hidden")
            get_logger("test").error("shown")
        finally:
            reset_logging()
            configure_logging(force=True)

        events = [r["event"] for r in _records(stream)]
        assert events == ["shown"]


class TestRedactSensitiveHeaders:
    def test_sensitive_headers_redacted(self) -> None:
        headers = {
            "Authorization": "Bearer abc",
            "X-Api-Key": "secret",
            "Cookie": "session=1",
            "Accept": "application/json",
        }
        redacted = redact_sensitive_headers(headers)

        assert redacted["Authorization"] == "[REDACTED]"
        assert redacted["X-Api-Key"] == "[REDACTED]"
        assert redacted["Cookie"] == "[REDACTED]"
        assert redacted["Accept"] == "application/json"
