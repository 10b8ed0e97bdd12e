"""
Console gateway service for SentinelFlow.

Forwards every request under the mount to the upstream alerting API with the
server-held credential attached, and relays the upstream answer unchanged.
"""

import asyncio
import sys
from typing import Awaitable, Optional

import httpx
from fastapi import Request, Response

from shared.base_service import BaseService, SERVICE_VERSION
from shared.config import GatewayConfig, load_config
from shared.errors import ClientDisconnectedError, ConfigurationError, ValidationError
from shared.logging import configure_logging, get_logger
from service_gateway.app.adapters.upstream_client import UpstreamClient
from service_gateway.app.domain.forwarding import (
    build_upstream_url,
    encoded_capture,
    raw_query,
    relay_response,
    split_path,
)

# sysexits.h EX_CONFIG
EXIT_CONFIG_ERROR = 78


class GatewayService(BaseService):
    """Console gateway service implementation."""

    def __init__(self, config: Optional[GatewayConfig] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__("gateway", config or load_config())
        self.upstream_client = UpstreamClient(self.config, metrics=self.metrics, transport=transport)

        self._setup_gateway_routes()

        # Expose service instance via app state for introspection/testing
        self.app.state.gateway_service = self

    def _setup_gateway_routes(self):
        """Set up the root banner and the wildcard forwarding routes."""
        mount = self.config.mount_path

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "gateway",
                "message": "SentinelFlow - Console Gateway",
                "version": SERVICE_VERSION,
                "mount": mount,
            }

        @self.app.api_route(mount, methods=["GET", "POST"], include_in_schema=False)
        async def forward_bare_mount(request: Request):
            """The mount alone names no upstream resource."""
            raise ValidationError(
                "At least one path segment is required after the gateway mount",
                details={"path": request.url.path}
            )

        @self.app.get(f"{mount}/{{path:path}}")
        async def forward_get(path: str, request: Request) -> Response:
            """Forward a read to the upstream."""
            return await self.forward(request, path)

        @self.app.post(f"{mount}/{{path:path}}")
        async def forward_post(path: str, request: Request) -> Response:
            """Forward a write to the upstream."""
            return await self.forward(request, path)

    async def forward(self, request: Request, path: str) -> Response:
        """Reconstruct the upstream URL, forward, and relay the answer."""
        segments = split_path(encoded_capture(request.scope, self.config.mount_path, path))
        if not segments:
            raise ValidationError(
                "At least one path segment is required after the gateway mount",
                details={"path": request.url.path}
            )

        url = build_upstream_url(self.config.api_base, segments, raw_query(request.scope))

        body = None
        content_type = None
        if request.method == "POST":
            body = await request.body()
            content_type = request.headers.get("content-type")

        upstream = await self._until_disconnect(
            request,
            self.upstream_client.forward(request.method, url, body=body, content_type=content_type)
        )
        return relay_response(upstream)

    async def _until_disconnect(self, request: Request, call: Awaitable[httpx.Response]) -> httpx.Response:
        """Await the upstream call, cancelling it if the caller goes away."""
        upstream_task = asyncio.ensure_future(call)
        watcher_task = asyncio.ensure_future(self._wait_for_disconnect(request))
        try:
            done, _ = await asyncio.wait(
                {upstream_task, watcher_task},
                return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (upstream_task, watcher_task):
                if not task.done():
                    task.cancel()
            await asyncio.gather(upstream_task, watcher_task, return_exceptions=True)

        if upstream_task in done:
            return upstream_task.result()

        self.metrics.record_upstream_error("client_disconnected")
        raise ClientDisconnectedError(details={"path": request.url.path})

    async def _wait_for_disconnect(self, request: Request) -> None:
        while not await request.is_disconnected():
            await asyncio.sleep(self.config.disconnect_poll_interval)


def create_app(config: Optional[GatewayConfig] = None,
               transport: Optional[httpx.AsyncBaseTransport] = None):
    """Create FastAPI application."""
    service = GatewayService(config=config, transport=transport)
    return service.app


def main() -> None:
    """Console script entry point; refuses to serve without configuration."""
    try:
        service = GatewayService()
    except ConfigurationError as exc:
        configure_logging("gateway")
        get_logger("gateway").error(
            "Refusing to start",
            code=exc.code,
            message=exc.message,
            details=exc.details
        )
        sys.exit(EXIT_CONFIG_ERROR)
    service.run()


if __name__ == "__main__":
    main()
