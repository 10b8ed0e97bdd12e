"""
Shared error handling for the SentinelFlow console gateway.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel

from shared.logging import request_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class SentinelFlowException(Exception):
    """Base exception for SentinelFlow services."""

    status_code = 500

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class ConfigurationError(SentinelFlowException):
    """Required configuration is absent or invalid at startup."""

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)


class ValidationError(SentinelFlowException):
    """Malformed inbound request, rejected before any upstream call."""

    status_code = 400

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class UpstreamUnavailableError(SentinelFlowException):
    """The upstream could not be reached (refused, DNS, protocol)."""

    status_code = 502

    def __init__(self, message: str = "Upstream unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__("UPSTREAM_UNAVAILABLE", message, details)


class UpstreamTimeoutError(SentinelFlowException):
    """The upstream did not answer within the configured bound."""

    status_code = 504

    def __init__(self, message: str = "Upstream timed out", details: Optional[Dict[str, Any]] = None):
        super().__init__("UPSTREAM_TIMEOUT", message, details)


class ClientDisconnectedError(SentinelFlowException):
    """The caller closed the connection before the forward completed."""

    # nginx convention; the caller never sees it
    status_code = 499

    def __init__(self, message: str = "Client closed request", details: Optional[Dict[str, Any]] = None):
        super().__init__("CLIENT_DISCONNECTED", message, details)


class ConsoleLoadError(SentinelFlowException):
    """A console page could not load its data through the gateway."""

    status_code = 502

    def __init__(self, message: str = "load failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONSOLE_LOAD_ERROR", message, details)


class NotFoundError(ConsoleLoadError):
    """The requested resource does not exist upstream."""

    status_code = 404

    def __init__(self, message: str = "not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.code = "NOT_FOUND"
