import traceback
import uuid
from datetime import datetime, timezone
from typing import Optional, Tuple

# Standard imports
import jwt
from fastapi import HTTPException

from storypad_api.config import settings
from storypad_api.store.user_store import UserRecord
from storypad_api.utils.debug import print__token_debug
from storypad_api.utils.durations import parse_duration


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================
# AUTHENTICATION - TOKEN ISSUING
# ============================================================
def create_access_token(
    user: UserRecord, now: Optional[datetime] = None
) -> Tuple[str, datetime]:
    """Sign a short-lived bearer token carrying id, username and email.

    Returns:
        (token, expires_at)
    """
    now = now or _utcnow()
    expires_at = now + parse_duration(settings.ACCESS_TOKEN_EXPIRY)
    payload = {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "iat": now,
        "exp": expires_at,
    }
    token = jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    print__token_debug(f"🔑 Access token issued for {user.username} until {expires_at}")
    return token, expires_at


def create_refresh_token(
    user: UserRecord,
    session_start: datetime,
    max_session_duration: str,
    expiry: str,
    now: Optional[datetime] = None,
) -> Tuple[str, datetime]:
    """Sign a refresh token bound to the session window it was issued for.

    Returns:
        (token, expires_at)
    """
    now = now or _utcnow()
    expires_at = now + parse_duration(expiry)
    payload = {
        "id": user.id,
        "type": "refresh",
        "sessionStart": session_start.isoformat(),
        "maxSessionDuration": max_session_duration,
        # two logins within the same second must still yield distinct tokens
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": expires_at,
    }
    token = jwt.encode(
        payload, settings.JWT_REFRESH_SECRET, algorithm=settings.JWT_ALGORITHM
    )
    print__token_debug(f"🔑 Refresh token issued for {user.username} until {expires_at}")
    return token, expires_at


def session_expires_at(session_start: datetime, max_session_duration: str) -> datetime:
    """Absolute session deadline: session start plus its maximum duration."""
    return session_start + parse_duration(max_session_duration)


# ============================================================
# AUTHENTICATION - JWT VERIFICATION
# ============================================================
def verify_access_token(token: str) -> dict:
    """Decode and validate a bearer token.

    Raises:
        HTTPException(403): malformed, badly signed or expired token
    """
    # JWT tokens must have exactly 3 parts separated by dots (header.payload.signature)
    if len(token.split(".")) != 3:
        print__token_debug("❌ Access token rejected: not a JWT")
        raise HTTPException(status_code=403, detail="Invalid or expired token")

    try:
        payload = jwt.decode(
            token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM]
        )
    except jwt.ExpiredSignatureError:
        print__token_debug("❌ Access token has expired")
        raise HTTPException(status_code=403, detail="Invalid or expired token")
    except jwt.InvalidTokenError as e:
        print__token_debug(f"❌ JWT verification failed: {type(e).__name__}: {e}")
        raise HTTPException(status_code=403, detail="Invalid or expired token")

    if payload.get("type") == "refresh":
        # Refresh tokens are never accepted as bearer tokens
        print__token_debug("❌ Refresh token presented as access token")
        raise HTTPException(status_code=403, detail="Invalid or expired token")

    print__token_debug(f"✅ Access token valid for {payload.get('username')}")
    return payload


def decode_refresh_token(token: str) -> dict:
    """Decode a refresh token.

    Raises:
        jwt.InvalidTokenError: bad signature, expired, or not a refresh token
    """
    try:
        payload = jwt.decode(
            token, settings.JWT_REFRESH_SECRET, algorithms=[settings.JWT_ALGORITHM]
        )
    except jwt.InvalidTokenError:
        print__token_debug(
            f"❌ Refresh token rejected:\n{traceback.format_exc()}"
        )
        raise

    if payload.get("type") != "refresh":
        raise jwt.InvalidTokenError("Not a refresh token")
    return payload
