"""
MODULE_DESCRIPTION: Auth Routes - Login, Token Refresh, Logout and Signup

===================================================================================
PURPOSE AND OVERVIEW
===================================================================================

REST endpoints consumed by the client session manager
(storypad_client.session.SessionManager):

    POST /api/signup                  Create an account
    POST /api/login                   Issue access + refresh token, open a session
    POST /api/refresh                 Exchange the refresh token for a new access token
    POST /api/logout                  Invalidate the stored refresh token (bearer)
    GET  /api/test/session-status     Development only: inspect the session window
    POST /api/test/expire-session     Development only: push the session start 25h back

===================================================================================
SESSION MODEL
===================================================================================

A login opens a session window (24h, or 30d with rememberMe) and stores
exactly one refresh token on the user record. /api/refresh only accepts
that stored token, and refuses with `sessionExpired: true` once the window
has elapsed, clearing the stored session. Logging in elsewhere replaces
the stored token, which makes the previous device's refresh fail; there
is no other revocation.

Failure bodies follow the `{"success": false, "message": ...}` shape the
client inspects, rather than FastAPI's `{"detail": ...}`.
"""

from datetime import datetime, timedelta, timezone

import jwt
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from storypad_api.auth.jwt_auth import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    session_expires_at,
)
from storypad_api.auth.passwords import hash_password, verify_password
from storypad_api.config import settings
from storypad_api.dependencies.auth import get_current_user, get_user_store
from storypad_api.models.requests import LoginRequest, RefreshRequest, SignupRequest
from storypad_api.models.responses import (
    ExpireSessionResponse,
    LoginResponse,
    MessageResponse,
    RefreshResponse,
    SessionInfo,
    SessionStatusResponse,
    UserProfile,
)
from storypad_api.store.user_store import UserRecord, UserStore
from storypad_api.utils.debug import print__auth_debug
from storypad_api.utils.durations import format_duration
from storypad_api.utils.errors import log_comprehensive_error

router = APIRouter(prefix="/api")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: datetime) -> str:
    return (
        value.astimezone(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def _failure(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, **extra},
    )


def _parse_session_start(value) -> datetime:
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# ==============================================================================
# LOGIN
# ==============================================================================
@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, store: UserStore = Depends(get_user_store)):
    print__auth_debug(f"Login request: email={body.email} rememberMe={body.rememberMe}")
    try:
        user = store.find_by_email(body.email)
        if user is None or not verify_password(body.password, user.password_hash):
            return _failure(400, "Invalid credentials")

        # Session window depends on "Remember Me"
        if body.rememberMe:
            session_duration = settings.EXTENDED_SESSION_DURATION
            refresh_expiry = settings.EXTENDED_REFRESH_TOKEN_EXPIRY
        else:
            session_duration = settings.SESSION_DURATION
            refresh_expiry = settings.REFRESH_TOKEN_EXPIRY
        print__auth_debug(
            f"Session settings: session={session_duration} refresh={refresh_expiry}"
        )

        now = _utcnow()
        access_token, access_exp = create_access_token(user, now=now)
        refresh_token, refresh_exp = create_refresh_token(
            user, now, session_duration, refresh_expiry, now=now
        )

        user.last_login = now
        user.refresh_token = refresh_token
        user.session_start = now
        user.max_session_duration = session_duration

        return LoginResponse(
            token=access_token,
            refreshToken=refresh_token,
            user=UserProfile(**user.public_profile()),
            expiresAt=_iso(access_exp),
            refreshExpiresAt=_iso(refresh_exp),
            sessionExpiresAt=_iso(session_expires_at(now, session_duration)),
            maxSessionDuration=session_duration,
        )
    except Exception as e:
        log_comprehensive_error("login", e)
        return _failure(500, "Server error")


# ==============================================================================
# TOKEN REFRESH
# ==============================================================================
@router.post("/refresh", response_model=RefreshResponse)
async def refresh(body: RefreshRequest, store: UserStore = Depends(get_user_store)):
    token = body.refreshToken
    if not token:
        return _failure(401, "Refresh token required")

    try:
        decoded = decode_refresh_token(token)
    except jwt.InvalidTokenError:
        return _failure(401, "Invalid refresh token")

    try:
        user = store.get(decoded.get("id"))
        if user is None or user.refresh_token != token:
            print__auth_debug("Refresh rejected: token does not match stored token")
            return _failure(401, "Invalid refresh token")

        # The session window is fixed at login; refreshing never extends it
        session_start = user.session_start or _parse_session_start(
            decoded.get("sessionStart")
        )
        max_duration = (
            user.max_session_duration
            or decoded.get("maxSessionDuration")
            or settings.SESSION_DURATION
        )
        session_expiry = session_expires_at(session_start, max_duration)

        now = _utcnow()
        if now > session_expiry:
            print__auth_debug(f"Session expired for {user.username} at {session_expiry}")
            user.clear_session()
            return _failure(
                401, "Session expired. Please log in again.", sessionExpired=True
            )

        access_token, access_exp = create_access_token(user, now=now)
        return RefreshResponse(
            token=access_token,
            expiresAt=_iso(access_exp),
            sessionExpiresAt=_iso(session_expiry),
            user=UserProfile(**user.public_profile()),
        )
    except Exception as e:
        log_comprehensive_error("token refresh", e)
        return _failure(401, "Invalid refresh token")


# ==============================================================================
# LOGOUT
# ==============================================================================
@router.post("/logout", response_model=MessageResponse)
async def logout(
    current_user: dict = Depends(get_current_user),
    store: UserStore = Depends(get_user_store),
):
    user = store.get(current_user.get("id"))
    if user is not None:
        user.clear_session()
        print__auth_debug(f"Logged out {user.username}")
    return MessageResponse(success=True, message="Logged out successfully")


# ==============================================================================
# SIGNUP
# ==============================================================================
@router.post("/signup", status_code=201, response_model=MessageResponse)
async def signup(body: SignupRequest, store: UserStore = Depends(get_user_store)):
    existing = store.find_by_email(body.email)
    if existing is not None:
        return _failure(400, "Email already registered")
    if store.find_by_username(body.username) is not None:
        return _failure(400, "Username already taken")

    store.add(
        UserRecord(
            username=body.username,
            email=body.email,
            password_hash=hash_password(body.password),
            first_name=body.firstName,
            last_name=body.lastName,
        )
    )
    print__auth_debug(f"Account created for {body.username}")
    return MessageResponse(success=True, message="Account created successfully")


# ==============================================================================
# DEVELOPMENT-ONLY SESSION ENDPOINTS
# ==============================================================================
def _require_dev_endpoints() -> None:
    if not settings.dev_endpoints_enabled():
        raise HTTPException(status_code=404, detail="Not Found")


@router.get(
    "/test/session-status",
    response_model=SessionStatusResponse,
    dependencies=[Depends(_require_dev_endpoints)],
)
async def session_status(
    current_user: dict = Depends(get_current_user),
    store: UserStore = Depends(get_user_store),
):
    user = store.get(current_user.get("id"))
    if user is None:
        return _failure(404, "User not found")

    now = _utcnow()
    session_start = user.session_start or now
    max_duration = user.max_session_duration or settings.SESSION_DURATION
    session_expiry = session_expires_at(session_start, max_duration)
    remaining = session_expiry - now

    return SessionStatusResponse(
        sessionInfo=SessionInfo(
            sessionStart=_iso(session_start),
            sessionExpiry=_iso(session_expiry),
            timeRemaining=int(remaining.total_seconds() * 1000),
            timeRemainingFormatted=format_duration(max(remaining, timedelta(0))),
            isExpired=now > session_expiry,
            maxDuration=max_duration,
            userId=user.id,
        )
    )


@router.post(
    "/test/expire-session",
    response_model=ExpireSessionResponse,
    dependencies=[Depends(_require_dev_endpoints)],
)
async def expire_session(
    current_user: dict = Depends(get_current_user),
    store: UserStore = Depends(get_user_store),
):
    user = store.get(current_user.get("id"))
    if user is None:
        return _failure(404, "User not found")

    user.session_start = _utcnow() - timedelta(
        hours=settings.FORCED_EXPIRY_OFFSET_HOURS
    )
    print__auth_debug(f"Session for {user.username} artificially expired")
    return ExpireSessionResponse(newSessionStart=_iso(user.session_start))
