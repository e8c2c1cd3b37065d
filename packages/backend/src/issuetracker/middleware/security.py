"""Response hardening headers.

Learn: Headers come in three tiers, each applied on top of the last:
1. every response gets BASE_HEADERS (no sniffing, no framing, short referrers)
2. /api/ responses: Cache-Control no-store
3. HSTS, only over HTTPS

Headers a route already set are left alone.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

BASE_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}
API_HEADERS = {"Cache-Control": "no-store"}
HSTS_HEADERS = {"Strict-Transport-Security": "max-age=31536000; includeSubDomains"}


def headers_for(request: Request) -> dict[str, str]:
    """The hardening headers that apply to this request's response."""
    headers = dict(BASE_HEADERS)
    if request.url.path.startswith("/api/"):
        headers.update(API_HEADERS)
    if request.url.scheme == "https":
        headers.update(HSTS_HEADERS)
    return headers


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        for name, value in headers_for(request).items():
            response.headers.setdefault(name, value)
        return response
