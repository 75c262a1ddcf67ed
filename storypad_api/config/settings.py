"""
MODULE_DESCRIPTION: API Configuration Settings - Application Constants

===================================================================================
PURPOSE AND OVERVIEW
===================================================================================

Central configuration hub for the StoryPad API and collaboration relay.
Every value is read from the environment (after loading a .env file) at
import time, with development-friendly defaults.

The module manages:
    - Application startup tracking (uptime for /health)
    - JWT signing secrets and token lifetimes
    - Absolute session durations (regular and "remember me")
    - Environment mode (development-only test endpoints)
    - Allowed origins for HTTP CORS and Socket.IO handshakes

===================================================================================
TOKEN AND SESSION LIFETIMES
===================================================================================

Durations use the compact "15m" / "7d" / "24h" notation, parsed by
storypad_api.utils.durations.parse_duration.

    ACCESS_TOKEN_EXPIRY            15m   Bearer token lifetime
    REFRESH_TOKEN_EXPIRY           7d    Refresh token lifetime
    SESSION_DURATION               24h   Absolute session deadline
    EXTENDED_REFRESH_TOKEN_EXPIRY  30d   Refresh lifetime with rememberMe
    EXTENDED_SESSION_DURATION      30d   Session deadline with rememberMe

The session deadline is measured from login and cannot be extended by
refreshing; once it passes, /api/refresh answers with sessionExpired.
"""

import os
import time

# Load environment variables early
from dotenv import load_dotenv

load_dotenv()

# Constants
try:
    from pathlib import Path

    BASE_DIR = Path(__file__).resolve().parents[2]
except NameError:
    BASE_DIR = Path(os.getcwd()).parents[0]

# =======================================================================
# APPLICATION LIFECYCLE TRACKING
# =======================================================================

# Application startup time for uptime tracking
start_time = time.time()

# "development" enables /api/test/* session endpoints
STORYPAD_ENV = os.environ.get("STORYPAD_ENV", "production")

# =======================================================================
# JWT AUTHENTICATION
# =======================================================================

JWT_SECRET = os.environ.get("JWT_SECRET", "storypad-dev-secret")

# Falls back to JWT_SECRET when no dedicated refresh secret is configured
JWT_REFRESH_SECRET = os.environ.get("JWT_REFRESH_SECRET") or JWT_SECRET

JWT_ALGORITHM = "HS256"

# =======================================================================
# TOKEN AND SESSION LIFETIMES
# =======================================================================

ACCESS_TOKEN_EXPIRY = os.environ.get("ACCESS_TOKEN_EXPIRY", "15m")
REFRESH_TOKEN_EXPIRY = os.environ.get("REFRESH_TOKEN_EXPIRY", "7d")
SESSION_DURATION = os.environ.get("SESSION_DURATION", "24h")
EXTENDED_REFRESH_TOKEN_EXPIRY = os.environ.get("EXTENDED_REFRESH_TOKEN_EXPIRY", "30d")
EXTENDED_SESSION_DURATION = os.environ.get("EXTENDED_SESSION_DURATION", "30d")

# How far /api/test/expire-session moves the session start into the past
FORCED_EXPIRY_OFFSET_HOURS = 25

# =======================================================================
# CORS AND SOCKET.IO
# =======================================================================

# Comma-separated list, shared by the HTTP CORS middleware and the
# Socket.IO handshake check
CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.environ.get(
        "CORS_ALLOWED_ORIGINS",
        "http://localhost:3000,http://localhost:5173",
    ).split(",")
    if origin.strip()
]

# Path the Socket.IO endpoint is mounted under
SOCKETIO_PATH = os.environ.get("SOCKETIO_PATH", "socket.io")

PORT = int(os.environ.get("PORT", "5000"))


def dev_endpoints_enabled() -> bool:
    """True when the development-only session test routes are exposed."""
    return STORYPAD_ENV == "development"
