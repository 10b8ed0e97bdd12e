"""
Unit tests for the shared error taxonomy, logging and metrics.
"""

import json
import logging
from datetime import datetime

import pytest

from shared.errors import (
    ClientDisconnectedError,
    ConsoleLoadError,
    NotFoundError,
    SentinelFlowException,
    UpstreamTimeoutError,
    UpstreamUnavailableError,
    ValidationError,
)
from shared.logging import configure_logging, get_logger, set_request_id, clear_context
from shared.metrics import MetricsCollector


class TestErrors:
    """Test cases for error status mapping."""

    @pytest.mark.parametrize("error, status_code, code", [
        (ValidationError("bad path"), 400, "VALIDATION_ERROR"),
        (UpstreamUnavailableError(), 502, "UPSTREAM_UNAVAILABLE"),
        (UpstreamTimeoutError(), 504, "UPSTREAM_TIMEOUT"),
        (ClientDisconnectedError(), 499, "CLIENT_DISCONNECTED"),
        (NotFoundError("missing"), 404, "NOT_FOUND"),
    ])
    def test_status_comes_from_class(self, error, status_code, code):
        assert error.status_code == status_code
        assert error.code == code

    def test_not_found_is_a_load_error(self):
        assert isinstance(NotFoundError("missing"), ConsoleLoadError)

    def test_base_exception_defaults_to_500(self):
        error = SentinelFlowException("BOOM", "exploded")

        assert error.status_code == 500
        assert error.details == {}

    def test_response_carries_request_id(self):
        set_request_id("req-7")
        try:
            body = UpstreamTimeoutError().to_response().model_dump()
        finally:
            clear_context()

        assert body["request_id"] == "req-7"
        assert body["code"] == "UPSTREAM_TIMEOUT"


class TestLogging:
    """Test cases for structured log output."""

    def test_timestamp_is_iso_string(self, caplog):
        configure_logging("gateway", "info")
        caplog.set_level(logging.INFO)

        get_logger("gateway.tests").info("upstream call", upstream_status=200)

        record = json.loads(caplog.records[-1].getMessage())
        assert record["event"] == "upstream call"
        assert isinstance(record["timestamp"], str)
        datetime.fromisoformat(record["timestamp"].replace("Z", "+00:00"))

    def test_request_id_is_attached(self, caplog):
        configure_logging("gateway", "info")
        caplog.set_level(logging.INFO)
        set_request_id("req-99")
        try:
            get_logger("gateway.tests").info("correlated")
        finally:
            clear_context()

        record = json.loads(caplog.records[-1].getMessage())
        assert record["request_id"] == "req-99"
        assert record["service"] == "gateway"


class TestMetricsCollector:
    """Test cases for the per-instance metrics registry."""

    def test_instances_do_not_share_a_registry(self):
        first = MetricsCollector("gateway")
        second = MetricsCollector("gateway")

        first.record_upstream_request("GET", 200, 0.01)

        assert b"upstream_requests_total" in first.export()
        assert b'method="GET"' in first.export()
        assert b'method="GET",status_code="200"' not in second.export()
