"""
Domain utilities for the Gateway Service.

Holds the transport-independent pieces of a forward: URL reconstruction
from a wildcard capture and verbatim relay of the upstream response.
"""

from .forwarding import (
    DEFAULT_MEDIA_TYPE,
    build_upstream_url,
    encoded_capture,
    raw_query,
    relay_response,
    split_path,
)

__all__ = [
    "DEFAULT_MEDIA_TYPE",
    "build_upstream_url",
    "encoded_capture",
    "raw_query",
    "relay_response",
    "split_path",
]
