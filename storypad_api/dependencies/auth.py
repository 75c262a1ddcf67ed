"""
MODULE_DESCRIPTION: Authentication Dependencies - Bearer Token Verification for FastAPI

===================================================================================
PURPOSE AND OVERVIEW
===================================================================================

FastAPI dependency functions used by protected StoryPad routes.

`get_current_user` extracts the bearer token from the Authorization header,
verifies it with `verify_access_token` and returns the decoded payload
(`id`, `username`, `email`, `iat`, `exp`).

Authentication Flow:
    1. Extract Authorization header from incoming request
    2. Missing header or empty token -> 401 "Access token required"
    3. Verify signature and expiry -> 403 "Invalid or expired token"
    4. Return decoded user info

`get_user_store` hands route handlers the process-wide `UserStore`
attached to `app.state` at application creation.
"""

import traceback

from fastapi import Header, HTTPException, Request

from storypad_api.auth.jwt_auth import verify_access_token
from storypad_api.store.user_store import UserStore
from storypad_api.utils.debug import print__token_debug
from storypad_api.utils.errors import log_comprehensive_error


def get_current_user(authorization: str = Header(None)) -> dict:
    """Extract and verify the bearer token from the Authorization header.

    Raises:
        HTTPException(401): header missing or no token after "Bearer"
        HTTPException(403): token fails verification
    """
    try:
        print__token_debug("🔑 AUTHENTICATION START: Beginning user authentication process")

        # =======================================================================
        # HEADER PRESENCE CHECK
        # =======================================================================
        if not authorization:
            print__token_debug("❌ AUTH ERROR: No authorization header provided")
            raise HTTPException(status_code=401, detail="Access token required")

        # =======================================================================
        # TOKEN EXTRACTION - second part of "Bearer <token>"
        # =======================================================================
        auth_parts = authorization.split(" ", 1)
        if len(auth_parts) != 2 or not auth_parts[1].strip():
            print__token_debug(
                f"❌ AUTH ERROR: Malformed authorization header - parts: {len(auth_parts)}"
            )
            raise HTTPException(status_code=401, detail="Access token required")

        token = auth_parts[1].strip()
        print__token_debug(
            f"🔍 AUTH TOKEN: Token extracted successfully (length: {len(token)})"
        )

        # =======================================================================
        # JWT VERIFICATION
        # =======================================================================
        user_info = verify_access_token(token)
        print__token_debug(
            f"✅ AUTH SUCCESS: User authenticated successfully - {user_info.get('username', 'Unknown')}"
        )
        return user_info

    except HTTPException as he:
        print__token_debug(f"❌ AUTH HTTP EXCEPTION: {he.status_code} - {he.detail}")
        raise
    except Exception as e:
        print__token_debug(f"❌ AUTH TRACE: Full traceback:\n{traceback.format_exc()}")
        log_comprehensive_error("authentication", e)
        raise HTTPException(status_code=403, detail="Invalid or expired token")


def get_user_store(request: Request) -> UserStore:
    return request.app.state.user_store
