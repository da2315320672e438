"""
Authentication endpoints.

- Username/password login against configured credentials
- Logout (clears cookies)
- Session status for the UI
"""

from __future__ import annotations

import structlog
from fastapi import APIRouter, HTTPException, Request, Response
from pydantic import BaseModel

from taskmaster.core.auth import (
    CSRF_COOKIE,
    SESSION_COOKIE,
    create_jwt,
    generate_csrf_token,
    is_authenticated,
    verify_credentials,
)
from taskmaster.core.config import Settings

log = structlog.get_logger()
router = APIRouter()


class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""


class AuthResponse(BaseModel):
    success: bool
    message: str


class SessionStatus(BaseModel):
    authenticated: bool


def _set_session_cookies(response: Response, settings: Settings, token: str, csrf: str) -> None:
    max_age = settings.jwt_expire_minutes * 60
    response.set_cookie(
        key=SESSION_COOKIE,
        value=token,
        httponly=True,
        secure=not settings.debug,
        samesite="lax",
        path="/",
        max_age=max_age,
    )
    response.set_cookie(
        key=CSRF_COOKIE,
        value=csrf,
        httponly=False,  # read by the UI and echoed in X-CSRF-Token
        secure=not settings.debug,
        samesite="lax",
        path="/",
        max_age=max_age,
    )


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, request: Request, response: Response):
    """Check the configured credentials and start a 24h cookie session."""
    settings: Settings = request.app.state.settings
    if not body.username or not body.password:
        raise HTTPException(status_code=400, detail="Username and password are required")

    if not verify_credentials(settings, body.username, body.password):
        log.warning("auth.login_failure", username=body.username)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    _set_session_cookies(response, settings, create_jwt(settings), generate_csrf_token())
    log.info("auth.login_success", username=body.username)
    return AuthResponse(success=True, message="Login successful")


@router.post("/logout", response_model=AuthResponse)
async def logout(response: Response):
    response.delete_cookie(SESSION_COOKIE, path="/")
    response.delete_cookie(CSRF_COOKIE, path="/")
    return AuthResponse(success=True, message="Logged out")


@router.get("/session", response_model=SessionStatus)
async def session_status(request: Request):
    settings: Settings = request.app.state.settings
    if not settings.auth_enabled:
        return SessionStatus(authenticated=True)
    return SessionStatus(authenticated=is_authenticated(request))
