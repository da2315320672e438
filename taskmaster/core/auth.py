"""
Authentication for the single-user deployment.

- Credentials come from configuration and are compared in constant time
- Sessions are HS256 JWTs carried in the ``tm_session`` cookie (browser)
  or an ``Authorization: Bearer`` header (scripts)
- ``require_auth`` guards the API router; it is a no-op when auth is disabled
"""

from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timedelta, timezone

import jwt
import structlog
from fastapi import HTTPException, Request

from taskmaster.core.config import Settings

log = structlog.get_logger()

SESSION_COOKIE = "tm_session"
CSRF_COOKIE = "tm_csrf"


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


def verify_credentials(settings: Settings, username: str, password: str) -> bool:
    user_ok = secrets.compare_digest(username.encode(), settings.auth_username.encode())
    password_ok = secrets.compare_digest(password.encode(), settings.auth_password.encode())
    return user_ok and password_ok


# ---------------------------------------------------------------------------
# JWT
# ---------------------------------------------------------------------------


def create_jwt(settings: Settings, *, expires_delta: timedelta | None = None) -> str:
    now = datetime.now(timezone.utc)
    exp = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    payload = {
        "sub": settings.auth_username,
        "authenticated": True,
        "iat": now,
        "exp": exp,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_jwt(settings: Settings, token: str) -> dict:
    """Decode and verify a JWT. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])


def generate_csrf_token() -> str:
    return secrets.token_urlsafe(32)


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def _extract_token(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip()
    return request.cookies.get(SESSION_COOKIE)


def is_authenticated(request: Request) -> bool:
    settings: Settings = request.app.state.settings
    token = _extract_token(request)
    if not token:
        return False
    try:
        payload = decode_jwt(settings, token)
    except jwt.PyJWTError:
        return False
    return bool(payload.get("authenticated"))


async def require_auth(request: Request) -> None:
    """Reject unauthenticated requests with 401 (skipped when auth is disabled)."""
    settings: Settings = request.app.state.settings
    if not settings.auth_enabled:
        return
    if not is_authenticated(request):
        log.info("auth.rejected", path=request.url.path)
        raise HTTPException(status_code=401, detail="Not authenticated")
