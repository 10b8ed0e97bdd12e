"""
Gateway client used by the console's server-side pages.
"""

from typing import List, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from shared.config import DEFAULT_MOUNT_PATH, GatewayConfig
from shared.errors import ConsoleLoadError, NotFoundError
from shared.logging import get_logger
from service_console.app.models import Alert, AlertsResponse, ApprovalResult, MetricsSnapshot

DEFAULT_ALERT_LIMIT = 50


class ConsoleClient:
    """Reads console data through the gateway mount.

    Any failed fetch surfaces as a page-level "not found" or "load failed"
    error; partial data is never returned.
    """

    def __init__(self, internal_base: str, mount_path: str = DEFAULT_MOUNT_PATH,
                 timeout: float = 5.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = f"{internal_base.rstrip('/')}/{mount_path.strip('/')}"
        self.timeout = timeout
        self.transport = transport
        self.logger = get_logger("console.client")

    @classmethod
    def from_config(cls, config: GatewayConfig,
                    transport: Optional[httpx.AsyncBaseTransport] = None) -> "ConsoleClient":
        return cls(
            config.internal_base,
            config.mount_path,
            timeout=config.upstream_timeout_seconds,
            transport=transport,
        )

    async def list_alerts(self, limit: int = DEFAULT_ALERT_LIMIT) -> List[Alert]:
        """Newest alerts, as listed on the alerts page."""
        response = await self._request("GET", "/alerts", params={"limit": limit})
        if not response.is_success:
            raise ConsoleLoadError("failed to load alerts", details={"status_code": response.status_code})
        return self._parse(AlertsResponse, response, "failed to load alerts").alerts

    async def get_alert(self, alert_id: str) -> Alert:
        """One alert for the detail page."""
        response = await self._request("GET", f"/alerts/{alert_id}")
        if not response.is_success:
            raise NotFoundError(details={"alert_id": alert_id, "status_code": response.status_code})
        return self._parse(Alert, response, "not found")

    async def get_metrics(self) -> MetricsSnapshot:
        """Severity and status counts for the metrics page."""
        response = await self._request("GET", "/metrics")
        if not response.is_success:
            raise ConsoleLoadError("metrics error", details={"status_code": response.status_code})
        return self._parse(MetricsSnapshot, response, "metrics error")

    async def approve(self, alert_id: str) -> ApprovalResult:
        """Trigger the approval action; any 2xx counts as success."""
        try:
            response = await self._request("POST", f"/alerts/{alert_id}/approve")
        except ConsoleLoadError as exc:
            return ApprovalResult(ok=False, status_code=502, message=f"Error: {exc.message}")

        if response.is_success:
            self.logger.info("Alert approved", alert_id=alert_id, status_code=response.status_code)
            return ApprovalResult(ok=True, status_code=response.status_code, message="Approved.")

        self.logger.warning("Alert approval rejected", alert_id=alert_id, status_code=response.status_code)
        return ApprovalResult(
            ok=False,
            status_code=response.status_code,
            message=f"Error: {response.status_code}",
        )

    async def _request(self, method: str, path: str, params: Optional[dict] = None) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                return await client.request(method, url, params=params)
        except httpx.HTTPError as exc:
            self.logger.error("Gateway request failed", method=method, path=path, error=type(exc).__name__)
            raise ConsoleLoadError("load failed", details={"error": type(exc).__name__}) from exc

    def _parse(self, model, response: httpx.Response, message: str):
        try:
            return model.model_validate_json(response.content)
        except PydanticValidationError as exc:
            self.logger.error("Unexpected gateway payload", path=response.request.url.path, errors=exc.error_count())
            raise ConsoleLoadError(message, details={"errors": exc.error_count()}) from exc
