"""
Base service class for SentinelFlow services.
"""

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send
import time
import os

from shared.config import GatewayConfig
from shared.logging import (
    REQUEST_ID_HEADER,
    clear_context,
    configure_logging,
    get_logger,
    set_request_id,
)
from shared.metrics import get_metrics_collector
from shared.errors import SentinelFlowException

SERVICE_VERSION = "1.0.0"


class RequestContextMiddleware:
    """Correlates and times each HTTP request.

    Plain ASGI so that route handlers keep the server's own ``receive`` and
    can observe a client disconnect while they wait on the upstream.
    """

    def __init__(self, app: ASGIApp, service: "BaseService"):
        self.app = app
        self.service = service

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request_id = set_request_id(Headers(scope=scope).get(REQUEST_ID_HEADER))
        status_code = 500
        start_time = time.time()

        async def send_with_request_id(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                MutableHeaders(scope=message).append(REQUEST_ID_HEADER, request_id)
            await send(message)

        try:
            await self.app(scope, receive, send_with_request_id)
        finally:
            duration = time.time() - start_time

            # Label by route template so alert ids do not explode cardinality
            route = scope.get("route")
            endpoint = getattr(route, "path", scope["path"])

            self.service.metrics.record_http_request(
                method=scope["method"],
                endpoint=endpoint,
                status_code=status_code,
                duration=duration
            )

            self.service.logger.info(
                "HTTP request",
                method=scope["method"],
                path=scope["path"],
                status_code=status_code,
                duration_ms=round(duration * 1000, 2)
            )
            clear_context()


class BaseService:
    """Base service class with common functionality."""

    def __init__(self, service_name: str, config: GatewayConfig):
        self.service_name = service_name
        self.config = config
        self.logger = get_logger(service_name)
        self.metrics = get_metrics_collector(service_name)
        self._start_time = time.time()

        # Configure logging
        configure_logging(service_name, self.config.log_level)

        # Create FastAPI app
        self.app = self._create_app()

        # Set up middleware
        self._setup_middleware()

        # Set up routes
        self._setup_routes()

    def _create_app(self) -> FastAPI:
        """Create FastAPI application."""
        return FastAPI(
            title=f"{self.service_name.title()} Service",
            description=f"SentinelFlow - {self.service_name.title()} Service",
            version=SERVICE_VERSION,
            docs_url="/docs" if self.config.env == "local" else None,
            redoc_url="/redoc" if self.config.env == "local" else None,
        )

    def _setup_middleware(self):
        """Set up middleware."""

        # Request correlation and timing middleware
        self.app.add_middleware(RequestContextMiddleware, service=self)

    def _setup_routes(self):
        """Set up common routes."""

        @self.app.get("/health")
        async def health_check():
            """Health check endpoint."""
            self.metrics.record_health_check("ok")
            return {
                "service": self.service_name,
                "status": "ok",
                "uptime_seconds": self._get_uptime(),
                "version": SERVICE_VERSION,
                "commit": os.getenv("GIT_COMMIT", "unknown")
            }

        @self.app.get("/metrics")
        async def metrics_endpoint():
            """Prometheus metrics endpoint."""
            from prometheus_client import CONTENT_TYPE_LATEST
            return Response(
                content=self.metrics.export(),
                media_type=CONTENT_TYPE_LATEST
            )

        # Error handlers
        @self.app.exception_handler(SentinelFlowException)
        async def sentinelflow_exception_handler(request: Request, exc: SentinelFlowException):
            """Handle SentinelFlowException."""
            self.logger.warning(
                "Request failed",
                code=exc.code,
                message=exc.message,
                status_code=exc.status_code,
                details=exc.details
            )
            self.metrics.record_error(exc.code)
            return JSONResponse(
                status_code=exc.status_code,
                content=exc.to_response().model_dump()
            )

        @self.app.exception_handler(Exception)
        async def general_exception_handler(request: Request, exc: Exception):
            """Handle general exceptions."""
            self.logger.error("Unhandled exception", error=str(exc), exc_info=True)
            self.metrics.record_error("INTERNAL_ERROR")
            return JSONResponse(
                status_code=500,
                content={
                    "code": "INTERNAL_ERROR",
                    "message": "Internal server error",
                    "details": {}
                }
            )

    def _get_uptime(self) -> float:
        """Get service uptime in seconds."""
        return time.time() - self._start_time

    def run(self):
        """Run the service."""
        import uvicorn
        uvicorn.run(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level=self.config.log_level.lower()
        )
