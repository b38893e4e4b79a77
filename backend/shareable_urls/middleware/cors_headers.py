"""
Shareable URLs Backend - Fixed CORS Header Middleware
======================================================

What:  Adds the same permissive CORS header set to every response.
How:   Overwrites the headers on the way out, after the route handler or
       exception handler has produced the response.

Starlette's CORSMiddleware is not used: it answers preflight requests itself
and only adds headers when an Origin header is present, while this API
routes OPTIONS to its own handlers and always sends the full set.
"""

from typing import Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

ALLOWED_METHODS = "GET, HEAD, PUT, POST, OPTIONS"
ALLOWED_HEADERS = "Content-Type"


def cors_headers(allow_origin: str = "*", max_age: int = 86400) -> Dict[str, str]:
    """Build the header table stamped on every response."""
    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Methods": ALLOWED_METHODS,
        "Access-Control-Allow-Credentials": "true",
        "Access-Control-Max-Age": str(max_age),
        "Access-Control-Allow-Headers": ALLOWED_HEADERS,
    }


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Stamps a fixed CORS header table on each response."""

    def __init__(self, app, allow_origin: str = "*", max_age: int = 86400, **kwargs):
        super().__init__(app, **kwargs)
        self.headers = cors_headers(allow_origin, max_age)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        response.headers.update(self.headers)
        return response
