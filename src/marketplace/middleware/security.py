"""Security headers middleware.

Learn: Two kinds of responses need protecting here:

- API responses carry session tokens and profile data, so they are
  marked Cache-Control: no-store and must not be framed or sniffed.
- /uploads serves files users uploaded. They are declared images, but
  a browser must never run them as HTML or script, so they get a
  Content-Security-Policy that allows nothing but displaying them.

HSTS is only sent on HTTPS connections.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

UPLOADS_PREFIX = "/uploads/"
UPLOADS_CSP = "default-src 'none'; img-src 'self'; sandbox"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        if request.url.path.startswith(UPLOADS_PREFIX):
            response.headers["Content-Security-Policy"] = UPLOADS_CSP
        else:
            response.headers["Cache-Control"] = "no-store"

        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
        return response
