"""
Upstream alerting API client for Gateway.
"""

import asyncio
import time
from typing import Dict, Optional

import httpx

from shared.config import GatewayConfig
from shared.errors import UpstreamTimeoutError, UpstreamUnavailableError, ValidationError
from shared.logging import get_logger
from shared.metrics import MetricsCollector

DEFAULT_CONTENT_TYPE = "application/json"
BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})


class UpstreamClient:
    """Issues forwarded calls against the single configured upstream.

    This is the only component that performs outbound I/O and the only one
    that sees the credential. Calls are never retried: a forwarded approval
    must not be applied twice.
    """

    def __init__(self, config: GatewayConfig, metrics: Optional[MetricsCollector] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.metrics = metrics
        self.transport = transport
        self.timeout = httpx.Timeout(config.upstream_timeout_seconds)
        self.logger = get_logger("gateway.upstream_client")

    def build_headers(self, method: str, content_type: Optional[str] = None) -> Dict[str, str]:
        """Outbound headers; nothing from the inbound request is copied."""
        headers = {
            self.config.credential_header: self.config.api_key.get_secret_value(),
            "Cache-Control": "no-store",
        }
        if method.upper() in BODY_METHODS:
            headers["Content-Type"] = content_type or DEFAULT_CONTENT_TYPE
        return headers

    async def forward(self, method: str, url: str, body: Optional[bytes] = None,
                      content_type: Optional[str] = None) -> httpx.Response:
        """Send one upstream request and return the fully read response."""
        method = method.upper()
        headers = self.build_headers(method, content_type)
        content = (body or b"") if method in BODY_METHODS else None
        try:
            target = httpx.URL(url)
        except httpx.InvalidURL as exc:
            raise ValidationError("Request path does not form a valid upstream URL") from exc
        start_time = time.time()

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                # httpx applies its timeout per phase; wait_for bounds the whole call
                response = await asyncio.wait_for(
                    client.request(method, target, headers=headers, content=content),
                    timeout=self.config.upstream_timeout_seconds,
                )
        except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
            self._record_failure("timeout", method, target, exc)
            raise UpstreamTimeoutError(
                details={"timeout_seconds": self.config.upstream_timeout_seconds}
            ) from exc
        except httpx.TransportError as exc:
            self._record_failure("unavailable", method, target, exc)
            raise UpstreamUnavailableError(details={"error": type(exc).__name__}) from exc

        duration = time.time() - start_time
        if self.metrics:
            self.metrics.record_upstream_request(method, response.status_code, duration)
        self.logger.info(
            "Upstream call completed",
            method=method,
            path=target.path,
            status_code=response.status_code,
            duration_ms=round(duration * 1000, 2)
        )
        return response

    def _record_failure(self, error_type: str, method: str, target: httpx.URL, exc: Exception) -> None:
        if self.metrics:
            self.metrics.record_upstream_error(error_type)
        self.logger.error(
            "Upstream call failed",
            method=method,
            path=target.path,
            error_type=error_type,
            error=type(exc).__name__
        )
