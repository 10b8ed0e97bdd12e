"""
Console data layer for SentinelFlow.

The console's server-side pages read alerts and metrics, and trigger
approvals, exclusively through the gateway mount. This package holds the
payload models those pages consume and the client that fetches them.
"""

from .client import ConsoleClient
from .models import Alert, ApprovalResult, MetricsSnapshot

__all__ = [
    "Alert",
    "ApprovalResult",
    "ConsoleClient",
    "MetricsSnapshot",
]
