"""
Shareable URLs Backend - Access Log Middleware
===============================================

What:  One access log line per request, tagged with the record it touched.
How:   Classifies the path as collection, metadata or record (extracting the
       record key) and logs method, route kind, key, status, duration and
       request ID.
When:  After RequestIDMiddleware (uses request ID for correlation).

Log levels:
    5xx              → ERROR
    4xx              → WARNING
    OPTIONS (2xx)    → DEBUG  (browser preflights would drown everything else)
    everything else  → INFO

Request bodies are never logged; records carry caller payloads.
"""

import logging
import time
from typing import Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from shareable_urls.middleware.request_id import request_id_var

logger = logging.getLogger("shareable_urls.access")

# Monitoring and documentation endpoints
UNLOGGED_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})


def classify_path(path: str) -> Tuple[str, Optional[str]]:
    """
    Map a request path to (route kind, record key).

        "/"            → ("collection", None)
        "/metadata"    → ("metadata", None)
        "/<key>"       → ("record", "<key>")
    """
    if path == "/":
        return "collection", None
    if path == "/metadata":
        return "metadata", None
    return "record", path[1:]


def access_log_level(method: str, status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    if method == "OPTIONS":
        return logging.DEBUG
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Writes the access log for record traffic."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in UNLOGGED_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        route, record_key = classify_path(path)
        rid = request_id_var.get("")
        status = response.status_code

        logger.log(
            access_log_level(request.method, status),
            "%s %s%s %d %.1fms [%s]",
            request.method,
            route,
            f" {record_key}" if record_key else "",
            status,
            duration_ms,
            rid,
            extra={
                "request_id": rid,
                "route": route,
                "record_key": record_key,
                "status": status,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response
