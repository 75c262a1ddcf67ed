"""
Configuration package for the StoryPad API server.

This package contains settings and constants for the auth routes and the
collaboration relay.
"""

from .settings import (
    ACCESS_TOKEN_EXPIRY,
    BASE_DIR,
    CORS_ALLOWED_ORIGINS,
    EXTENDED_REFRESH_TOKEN_EXPIRY,
    EXTENDED_SESSION_DURATION,
    JWT_ALGORITHM,
    REFRESH_TOKEN_EXPIRY,
    SESSION_DURATION,
    SOCKETIO_PATH,
    dev_endpoints_enabled,
    start_time,
)

__all__ = [
    "ACCESS_TOKEN_EXPIRY",
    "BASE_DIR",
    "CORS_ALLOWED_ORIGINS",
    "EXTENDED_REFRESH_TOKEN_EXPIRY",
    "EXTENDED_SESSION_DURATION",
    "JWT_ALGORITHM",
    "REFRESH_TOKEN_EXPIRY",
    "SESSION_DURATION",
    "SOCKETIO_PATH",
    "dev_endpoints_enabled",
    "start_time",
]
