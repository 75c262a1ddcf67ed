"""Token issuing/verification and password hashing for the auth routes."""

from .jwt_auth import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    session_expires_at,
    verify_access_token,
)
from .passwords import hash_password, verify_password

__all__ = [
    "create_access_token",
    "create_refresh_token",
    "decode_refresh_token",
    "session_expires_at",
    "verify_access_token",
    "hash_password",
    "verify_password",
]
