"""
Request forwarding helpers for the Gateway.

URL reconstruction and response relay are pure functions: they hold no state
and never look inside the payloads they move.
"""

from typing import Any, List, Mapping, Optional, Sequence
from urllib.parse import quote

import httpx
from fastapi import Response

DEFAULT_MEDIA_TYPE = "application/json"


def encoded_capture(scope: Mapping[str, Any], mount: str, decoded_path: str) -> str:
    """Return the wildcard capture exactly as the caller encoded it.

    Segments stay percent-encoded, so an encoded ``?`` or ``/`` inside a
    segment never turns into a query or an extra segment upstream. When the
    server provides no ``raw_path``, each decoded segment is re-quoted.
    """
    raw_path = scope.get("raw_path")
    prefix = f"{mount}/"
    if raw_path is not None:
        # some transports leave the query on raw_path
        path = raw_path.decode("latin-1").split("?", 1)[0]
        if path.startswith(prefix):
            return path[len(prefix):]
    if not decoded_path:
        return ""
    return "/".join(quote(segment, safe="") for segment in decoded_path.split("/"))


def split_path(path: str) -> List[str]:
    """Split a wildcard capture into its ordered segments.

    An empty capture yields no segments. Segments are kept as captured; no
    ``.``/``..`` normalisation is applied here.
    """
    if not path:
        return []
    return path.split("/")


def raw_query(scope: Mapping[str, Any]) -> str:
    """The inbound query string, undecoded."""
    return scope.get("query_string", b"").decode("latin-1")


def build_upstream_url(base: str, segments: Sequence[str], query: Optional[str] = None) -> str:
    """Build ``<base>/<seg1>/.../<segN>[?<query>]``.

    The query string is appended verbatim. Zero segments target the bare base
    address.
    """
    url = base
    if segments:
        url = f"{base}/{'/'.join(segments)}"
    if query:
        url = f"{url}?{query}"
    return url


def relay_response(upstream: httpx.Response) -> Response:
    """Copy status, body bytes and content-type of an upstream response.

    No other upstream header is relayed and the status is never remapped.
    """
    content_type = upstream.headers.get("content-type") or DEFAULT_MEDIA_TYPE
    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        headers={"content-type": content_type},
    )
