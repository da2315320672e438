"""
Security middleware: hardening headers and CSRF protection for cookie sessions.
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from taskmaster.core.auth import CSRF_COOKIE, SESSION_COOKIE

SAFE_METHODS = {"GET", "HEAD", "OPTIONS"}

# ---------------------------------------------------------------------------
# Security Headers
# ---------------------------------------------------------------------------

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "Permissions-Policy": "camera=(), geolocation=()",
    "Content-Security-Policy": "default-src 'self'; frame-ancestors 'none';",
}


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        for header, value in SECURITY_HEADERS.items():
            response.headers.setdefault(header, value)
        return response


# ---------------------------------------------------------------------------
# CSRF Protection (Double-Submit Cookie)
# ---------------------------------------------------------------------------


class CSRFMiddleware(BaseHTTPMiddleware):
    """
    Unsafe requests riding on the session cookie must echo the ``tm_csrf``
    cookie in ``X-CSRF-Token``. Bearer-token requests and requests without
    a session cookie (login itself, scripts) pass through.
    """

    @staticmethod
    def _needs_check(request: Request) -> bool:
        return (
            request.method not in SAFE_METHODS
            and "Authorization" not in request.headers
            and SESSION_COOKIE in request.cookies
        )

    async def dispatch(self, request: Request, call_next) -> Response:
        if self._needs_check(request):
            expected = request.cookies.get(CSRF_COOKIE)
            echoed = request.headers.get("X-CSRF-Token")
            if not expected or expected != echoed:
                return JSONResponse(status_code=403, content={"error": "Invalid or missing CSRF token."})
        return await call_next(request)
