"""
MODULE_DESCRIPTION: CORS and Compression Middleware Setup

Registers Cross-Origin Resource Sharing for the browser frontends and
Brotli compression for larger JSON responses. The allowed origins come
from CORS_ALLOWED_ORIGINS (comma-separated) via storypad_api.config and
are the same list the Socket.IO server accepts for its handshake.
"""

from brotli_asgi import BrotliMiddleware
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storypad_api.config import settings
from storypad_api.utils.debug import print__startup_debug

# ==============================================================================
# MIDDLEWARE SETUP - CORS AND BROTLI
# ==============================================================================


def setup_cors_middleware(app: FastAPI):
    """Setup CORS middleware for the FastAPI application.

    Args:
        app: The FastAPI application instance

    Configuration:
        - allow_origins: From CORS_ALLOWED_ORIGINS env var
        - allow_credentials: True - Enables cookies and auth headers
        - allow_methods: GET, POST, PUT, DELETE, OPTIONS
        - allow_headers: Content-Type and Authorization
    """
    allowed_origins = settings.CORS_ALLOWED_ORIGINS
    print__startup_debug(f"📋 CORS allowed origins: {allowed_origins}")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,  # Required for JWT auth with cookies/headers
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )


def setup_brotli_middleware(app: FastAPI):
    """Setup Brotli compression middleware for the FastAPI application.

    Only responses of at least 1000 bytes are compressed, and only for
    clients sending `Accept-Encoding: br`.
    """
    print__startup_debug("📋 Registering Brotli compression middleware...")
    app.add_middleware(BrotliMiddleware, minimum_size=1000)
