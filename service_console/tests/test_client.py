"""
Unit tests for the console gateway client.
"""

import httpx
import pytest

from service_console.app.client import ConsoleClient
from service_console.app.models import AlertStatus, Severity
from shared.errors import ConsoleLoadError, NotFoundError
from shared.test_helpers import RecordingUpstream, create_test_alert, create_test_config, json_upstream


def _console(upstream: RecordingUpstream) -> ConsoleClient:
    return ConsoleClient("http://localhost:3000", "/api/sf", transport=upstream.transport())


class TestConsoleClient:
    """Test cases for ConsoleClient."""

    def test_from_config_uses_internal_base_and_mount(self):
        config = create_test_config(internal_base="http://console:8080/", mount_path="sf-api")

        client = ConsoleClient.from_config(config)

        assert client.base_url == "http://console:8080/sf-api"

    @pytest.mark.asyncio
    async def test_list_alerts(self):
        upstream = json_upstream({"alerts": [create_test_alert()]})

        alerts = await _console(upstream).list_alerts()

        assert str(upstream.last.url) == "http://localhost:3000/api/sf/alerts?limit=50"
        assert len(alerts) == 1
        alert = alerts[0]
        assert alert.alert_id == "abc-123"
        assert alert.triage.severity is Severity.HIGH
        assert alert.needs_approval is True

    @pytest.mark.asyncio
    async def test_list_alerts_null_means_empty(self):
        alerts = await _console(json_upstream({"alerts": None})).list_alerts(limit=10)

        assert alerts == []

    @pytest.mark.asyncio
    async def test_list_alerts_missing_key_means_empty(self):
        assert await _console(json_upstream({})).list_alerts() == []

    @pytest.mark.asyncio
    async def test_list_alerts_failure(self):
        upstream = RecordingUpstream(status_code=500, content=b"firestore error")

        with pytest.raises(ConsoleLoadError) as exc_info:
            await _console(upstream).list_alerts()

        assert exc_info.value.message == "failed to load alerts"

    @pytest.mark.asyncio
    async def test_get_alert_with_null_lists(self):
        payload = create_test_alert(status="pending")
        payload["event"]["labels"] = None
        payload["triage"]["reason_tokens"] = None

        alert = await _console(json_upstream(payload)).get_alert("abc-123")

        assert alert.event.labels == []
        assert alert.triage.reason_tokens == []
        assert alert.status is AlertStatus.PENDING
        assert alert.needs_approval is False

    @pytest.mark.asyncio
    async def test_get_alert_not_found(self):
        upstream = RecordingUpstream(status_code=404, content=b"not found")

        with pytest.raises(NotFoundError) as exc_info:
            await _console(upstream).get_alert("missing")

        assert exc_info.value.message == "not found"
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_get_alert_rejects_out_of_range_confidence(self):
        payload = create_test_alert()
        payload["triage"]["confidence"] = 1.7

        with pytest.raises(ConsoleLoadError):
            await _console(json_upstream(payload)).get_alert("abc-123")

    @pytest.mark.asyncio
    async def test_get_metrics(self):
        payload = {"sample_window": 200,
                   "counts": {"Low": 1, "Med": 2, "High": 3, "Awaiting": 1, "Executed": 4, "Pending": 0}}

        snapshot = await _console(json_upstream(payload)).get_metrics()

        assert snapshot.sample_window == 200
        assert snapshot.counts.High == 3
        assert snapshot.counts.Executed == 4

    @pytest.mark.asyncio
    async def test_get_metrics_failure(self):
        with pytest.raises(ConsoleLoadError) as exc_info:
            await _console(RecordingUpstream(status_code=502, content=b"{}")).get_metrics()

        assert exc_info.value.message == "metrics error"

    @pytest.mark.asyncio
    async def test_approve_success(self):
        upstream = json_upstream({"ok": True, "alert_id": "abc-123"})

        result = await _console(upstream).approve("abc-123")

        assert result.ok is True
        assert result.message == "Approved."
        assert upstream.last.method == "POST"
        assert upstream.last.url.path == "/api/sf/alerts/abc-123/approve"
        assert upstream.last.content == b""

    @pytest.mark.asyncio
    async def test_approve_any_2xx_is_success(self):
        result = await _console(RecordingUpstream(status_code=202, content=b"")).approve("abc-123")

        assert result.ok is True
        assert result.status_code == 202

    @pytest.mark.asyncio
    async def test_approve_conflict(self):
        upstream = RecordingUpstream(status_code=409, content=b"alert not awaiting approval")

        result = await _console(upstream).approve("abc-123")

        assert result.ok is False
        assert result.status_code == 409
        assert result.message == "Error: 409"

    @pytest.mark.asyncio
    async def test_gateway_unreachable_is_load_failure(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ConsoleLoadError) as exc_info:
            await _console(RecordingUpstream(responder=refuse)).list_alerts()

        assert exc_info.value.message == "load failed"
