"""
Adapters package for the Gateway Service.

Contains the HTTP client wrapper for the upstream alerting API. The adapter
encapsulates:

- The upstream base URL and credential header
- The outbound timeout bound
- Mapping of transport failures onto shared errors

Keep adapters thin and side-effect free outside of explicit calls.
"""

from .upstream_client import UpstreamClient

__all__ = [
    "UpstreamClient",
]
