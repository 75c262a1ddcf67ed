"""
MODULE_DESCRIPTION: Session / Token Manager - Client-Side Session Lifecycle

===================================================================================
PURPOSE AND OVERVIEW
===================================================================================

Keeps a valid bearer token available to the rest of the client without
re-authenticating on every start, and warns before the absolute session
deadline. One SessionManager is constructed at application start and
passed to whatever needs a token (REST calls, the collaborative editor's
current user).

State lives in a SessionStorage (storypad_client.storage) under the same
keys the web client uses in localStorage. Network calls go through an
httpx.AsyncClient created without a timeout: a hung refresh request stalls
the caller until the transport gives up.

===================================================================================
TIMERS
===================================================================================

Both timers are asyncio tasks owned by the manager; start()/stop() arm and
cancel them, login() and successful refreshes re-arm them.

1. Refresh timer
   - Fires TOKEN_REFRESH_MARGIN (5 min) before the access token expires
   - Not armed when that moment has already passed

2. Session check
   - Runs every SESSION_CHECK_INTERVAL (5 min)
   - Less than SESSION_WARNING_THRESHOLD (10 min) left: dispatches
     "sessionWarning" with {"minutesLeft": n}
   - Deadline passed: clears session data silently, no event

===================================================================================
FAILURE POLICY
===================================================================================

- Refresh refused with sessionExpired -> clear session data, no redirect
- Any other refresh failure, network errors included -> full logout
- No retry and no backoff
- logout() always wipes storage and redirects to /login, whatever the
  server answered
"""

import asyncio
import json
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import httpx

from storypad_client import config
from storypad_client.debug import print__session_debug
from storypad_client.storage import (
    MAX_SESSION_DURATION_KEY,
    REFRESH_EXPIRES_AT_KEY,
    REFRESH_TOKEN_KEY,
    SESSION_EXPIRES_AT_KEY,
    TOKEN_EXPIRES_AT_KEY,
    TOKEN_KEY,
    USER_ID_KEY,
    USER_KEY,
    USERNAME_KEY,
    MemoryStorage,
)

SESSION_WARNING_EVENT = "sessionWarning"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp ("...Z" included); naive values are UTC."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class SessionManager:
    """Access/refresh token bookkeeping with proactive refresh and expiry polling."""

    def __init__(
        self,
        storage=None,
        api_base_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        on_redirect: Optional[Callable[[str], None]] = None,
        clock: Optional[Callable[[], datetime]] = None,
        refresh_margin: float = config.TOKEN_REFRESH_MARGIN,
        session_check_interval: float = config.SESSION_CHECK_INTERVAL,
        warning_threshold: float = config.SESSION_WARNING_THRESHOLD,
    ) -> None:
        self.storage = storage if storage is not None else MemoryStorage()
        self.api_base_url = (api_base_url or config.API_BASE_URL).rstrip("/")
        self._http = http_client
        self._owns_http = http_client is None
        self._on_redirect = on_redirect
        self._clock = clock or _utcnow
        self.refresh_margin = refresh_margin
        self.session_check_interval = session_check_interval
        self.warning_threshold = warning_threshold

        self._listeners: Dict[str, List[Callable[[dict], Any]]] = defaultdict(list)
        self._refresh_task: Optional[asyncio.Task] = None
        self._session_check_task: Optional[asyncio.Task] = None

        self.session_expired = False
        self.last_redirect: Optional[str] = None

    # ==========================================================================
    # LIFECYCLE
    # ==========================================================================
    @property
    def http(self) -> httpx.AsyncClient:
        if self._http is None:
            # No timeout: a stalled refresh waits as long as the transport does
            self._http = httpx.AsyncClient(timeout=None)
        return self._http

    def start(self) -> None:
        """Arm the refresh timer and the session check. Needs a running loop."""
        self.setup_token_refresh()
        self.setup_session_check()

    def stop(self) -> None:
        self._cancel(self._refresh_task)
        self._refresh_task = None
        self._cancel(self._session_check_task)
        self._session_check_task = None

    async def aclose(self) -> None:
        timers = [
            task
            for task in (self._refresh_task, self._session_check_task)
            if task is not None and task is not asyncio.current_task()
        ]
        self.stop()
        for task in timers:
            try:
                await task
            except asyncio.CancelledError:
                pass

        if self._owns_http and self._http is not None:
            await self._http.aclose()
            self._http = None

    @staticmethod
    def _cancel(task: Optional[asyncio.Task]) -> None:
        # A timer callback that ends up re-arming or stopping timers must not
        # cancel the task it is running in.
        if task is None or task.done():
            return
        try:
            current = asyncio.current_task()
        except RuntimeError:
            current = None
        if task is not current:
            task.cancel()

    # ==========================================================================
    # EVENTS AND NAVIGATION
    # ==========================================================================
    def add_event_listener(self, event: str, callback: Callable[[dict], Any]) -> None:
        self._listeners[event].append(callback)

    def remove_event_listener(self, event: str, callback: Callable[[dict], Any]) -> None:
        if callback in self._listeners[event]:
            self._listeners[event].remove(callback)

    def dispatch_event(self, event: str, detail: dict) -> None:
        for callback in list(self._listeners[event]):
            callback(detail)

    def _redirect(self, path: str) -> None:
        print__session_debug(f"↪️ Redirecting to {path}")
        self.last_redirect = path
        if self._on_redirect is not None:
            self._on_redirect(path)

    # ==========================================================================
    # TOKEN ACCESS
    # ==========================================================================
    def _seconds_until(self, key: str) -> Optional[float]:
        moment = parse_timestamp(self.storage.get_item(key))
        if moment is None:
            return None
        return (moment - self._clock()).total_seconds()

    def is_authenticated(self) -> bool:
        if not self.storage.get_item(TOKEN_KEY):
            return False
        remaining = self._seconds_until(TOKEN_EXPIRES_AT_KEY)
        return remaining is not None and remaining > 0

    def get_user(self) -> Optional[dict]:
        raw = self.storage.get_item(USER_KEY)
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            return None

    async def get_valid_token(self) -> Optional[str]:
        """Cached access token, refreshed first when it expires within the margin."""
        token = self.storage.get_item(TOKEN_KEY)
        if not token:
            return None

        remaining = self._seconds_until(TOKEN_EXPIRES_AT_KEY)
        if remaining is None or remaining < self.refresh_margin:
            print__session_debug("🔄 Access token close to expiry - refreshing first")
            return await self.refresh_token()

        return token

    # ==========================================================================
    # REFRESH
    # ==========================================================================
    async def refresh_token(self) -> Optional[str]:
        refresh_token = self.storage.get_item(REFRESH_TOKEN_KEY)
        if not refresh_token:
            await self.logout()
            return None

        try:
            response = await self.http.post(
                f"{self.api_base_url}/api/refresh",
                json={"refreshToken": refresh_token},
            )
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            print__session_debug(f"❌ Token refresh failed: {type(e).__name__}: {e}")
            await self.logout()
            return None

        if not isinstance(data, dict):
            print__session_debug("❌ Token refresh returned an unexpected body")
            await self.logout()
            return None

        if data.get("success"):
            self.storage.set_item(TOKEN_KEY, data["token"])
            self.storage.set_item(TOKEN_EXPIRES_AT_KEY, data["expiresAt"])
            self.storage.set_item(SESSION_EXPIRES_AT_KEY, data["sessionExpiresAt"])
            self.storage.set_item(USER_KEY, json.dumps(data.get("user")))
            print__session_debug(f"✅ Token refreshed, expires at {data['expiresAt']}")

            self.setup_token_refresh()
            return data["token"]

        if data.get("sessionExpired"):
            print__session_debug("⌛ Session expired on the server - clearing silently")
            self.handle_session_expiry()
        else:
            print__session_debug(f"❌ Refresh refused: {data.get('message')}")
            await self.logout()
        return None

    def setup_token_refresh(self) -> None:
        """Schedule a refresh `refresh_margin` seconds before the token expires."""
        self._cancel(self._refresh_task)
        self._refresh_task = None

        remaining = self._seconds_until(TOKEN_EXPIRES_AT_KEY)
        if remaining is None:
            return

        delay = remaining - self.refresh_margin
        if delay > 0:
            self._refresh_task = asyncio.get_running_loop().create_task(
                self._refresh_after(delay)
            )
            print__session_debug(f"⏰ Token refresh scheduled in {delay:.0f}s")

    async def _refresh_after(self, delay: float) -> None:
        await asyncio.sleep(delay)
        await self.refresh_token()

    # ==========================================================================
    # SESSION DEADLINE
    # ==========================================================================
    def setup_session_check(self) -> None:
        self._cancel(self._session_check_task)
        self._session_check_task = asyncio.get_running_loop().create_task(
            self._session_check_loop()
        )

    async def _session_check_loop(self) -> None:
        while True:
            await asyncio.sleep(self.session_check_interval)
            self.check_session_validity()

    def check_session_validity(self) -> None:
        remaining = self._seconds_until(SESSION_EXPIRES_AT_KEY)
        if remaining is None:
            return

        if 0 < remaining < self.warning_threshold:
            self.show_session_warning(int(remaining // 60))

        # Expiry is silent: state is cleared, nothing is dispatched
        if remaining <= 0:
            self.session_expired = True
            self.clear_session_data()

    def show_session_warning(self, minutes_left: int) -> None:
        print__session_debug(f"⚠️ Session expires in {minutes_left} minute(s)")
        self.dispatch_event(SESSION_WARNING_EVENT, {"minutesLeft": minutes_left})

    def handle_session_expiry(self) -> None:
        self.session_expired = True
        self.clear_session_data()

    def clear_session_data(self) -> None:
        """Drop the access token, its expiry, the session deadline and the user."""
        for key in (TOKEN_KEY, TOKEN_EXPIRES_AT_KEY, SESSION_EXPIRES_AT_KEY, USER_KEY):
            self.storage.remove_item(key)

    async def check_session(self) -> bool:
        """Validate the stored refresh token on application load."""
        refresh_token = self.storage.get_item(REFRESH_TOKEN_KEY)
        remaining = self._seconds_until(REFRESH_EXPIRES_AT_KEY)

        if not refresh_token or remaining is None:
            await self.logout()
            return False

        if remaining <= 0:
            await self.logout()
            return False

        self.setup_token_refresh()
        return True

    # ==========================================================================
    # LOGIN / LOGOUT
    # ==========================================================================
    async def login(self, credentials: dict) -> dict:
        try:
            response = await self.http.post(
                f"{self.api_base_url}/api/login", json=credentials
            )
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            print__session_debug(f"❌ Login error: {type(e).__name__}: {e}")
            return {"success": False, "message": "Network error"}

        if not isinstance(data, dict) or not data.get("success"):
            message = data.get("message") if isinstance(data, dict) else None
            return {"success": False, "message": message}

        user = data.get("user") or {}
        self.storage.set_item(TOKEN_KEY, data["token"])
        self.storage.set_item(REFRESH_TOKEN_KEY, data["refreshToken"])
        self.storage.set_item(TOKEN_EXPIRES_AT_KEY, data["expiresAt"])
        self.storage.set_item(REFRESH_EXPIRES_AT_KEY, data["refreshExpiresAt"])
        self.storage.set_item(SESSION_EXPIRES_AT_KEY, data["sessionExpiresAt"])
        if data.get("maxSessionDuration") is not None:
            self.storage.set_item(MAX_SESSION_DURATION_KEY, data["maxSessionDuration"])
        self.storage.set_item(USER_KEY, json.dumps(user))
        if user.get("username") is not None:
            self.storage.set_item(USERNAME_KEY, user["username"])
        if user.get("id") is not None:
            self.storage.set_item(USER_ID_KEY, user["id"])

        self.session_expired = False
        print__session_debug(f"✅ Logged in as {user.get('username')}")

        self.setup_token_refresh()
        self.setup_session_check()
        return {"success": True, "user": user}

    async def logout(self) -> None:
        """Best-effort server logout, then wipe storage, stop timers, go to login."""
        try:
            token = self.storage.get_item(TOKEN_KEY)
            if token:
                await self.http.post(
                    f"{self.api_base_url}/api/logout",
                    headers={"Authorization": f"Bearer {token}"},
                )
        except httpx.HTTPError as e:
            print__session_debug(f"❌ Logout error: {type(e).__name__}: {e}")
        finally:
            self.storage.clear()
            self.stop()
            self._redirect(config.LOGIN_PATH)

    # ==========================================================================
    # DEVELOPMENT ENDPOINTS
    # ==========================================================================
    async def check_session_status(self) -> Optional[dict]:
        """Server-side view of the session window (development servers only)."""
        try:
            token = await self.get_valid_token()
            if not token:
                return None

            response = await self.http.get(
                f"{self.api_base_url}/api/test/session-status",
                headers={"Authorization": f"Bearer {token}"},
            )
            if response.is_success:
                return response.json().get("sessionInfo")
        except (httpx.HTTPError, ValueError) as e:
            print__session_debug(f"❌ Failed to check session status: {e}")
        return None

    async def force_expire_session(self) -> Optional[dict]:
        try:
            token = await self.get_valid_token()
            if not token:
                return None

            await self.http.post(
                f"{self.api_base_url}/api/test/expire-session",
                headers={"Authorization": f"Bearer {token}"},
            )
            return {"success": True, "message": "Session force expired"}
        except httpx.HTTPError as e:
            print__session_debug(f"❌ Failed to expire session: {e}")
            return {"success": False, "message": "Failed to expire session"}
