"""Test helpers and utilities for the test suite."""

import inspect
import json
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import jwt
from dotenv import load_dotenv

load_dotenv()

from socketio.exceptions import BadNamespaceError, ConnectionError as SocketConnectionError

from storypad_api.config import settings
from storypad_api.realtime.relay import CollaborationRelay
from storypad_api.realtime.rooms import RoomRegistry


def print_test_status(message: str):
    """Print test status messages with timestamp."""
    timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    print(f"[{timestamp}] {message}")


def iso_in(seconds: float, now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp `seconds` from now, in the API's "Z" form."""
    now = now or datetime.now(timezone.utc)
    moment = now + timedelta(seconds=seconds)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def create_test_jwt_token(
    user_id: str = "test-user-id",
    username: str = "test_user",
    email: str = "test_user@example.com",
    expires_in: timedelta = timedelta(minutes=15),
    secret: Optional[str] = None,
    token_type: Optional[str] = None,
) -> str:
    """Create an access-token-shaped JWT signed with the configured secret."""
    now = datetime.now(timezone.utc)
    payload = {
        "id": user_id,
        "username": username,
        "email": email,
        "iat": now,
        "exp": now + expires_in,
    }
    if token_type:
        payload["type"] = token_type
    return jwt.encode(
        payload, secret or settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM
    )


def unique_account(prefix: str = "writer") -> Dict[str, str]:
    """Signup body with a username/email no other test uses."""
    tag = uuid.uuid4().hex[:8]
    return {
        "firstName": "Test",
        "lastName": "Writer",
        "username": f"{prefix}_{tag}",
        "email": f"{prefix}_{tag}@example.com",
        "password": "correct horse battery staple",
    }


# ==============================================================================
# SOCKET.IO STAND-INS
# ==============================================================================
async def _call(handler: Callable, *args):
    result = handler(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


class FakeSocketServer:
    """Records what the relay asks a python-socketio AsyncServer to do.

    Implements the subset the relay uses (on, enter_room, emit) and keeps
    room membership so room broadcasts can be resolved to concrete sids.
    """

    def __init__(self) -> None:
        self.handlers: Dict[str, Callable] = {}
        self.rooms: Dict[str, set] = {}
        self.emitted: List[Dict[str, Any]] = []
        self.deliver: Optional[Callable[[str, str, Any], Any]] = None

    def on(self, event: str, handler: Callable = None):
        self.handlers[event] = handler

    async def enter_room(self, sid: str, room: str, namespace: str = None) -> None:
        self.rooms.setdefault(room, set()).add(sid)

    def leave_all_rooms(self, sid: str) -> None:
        for members in self.rooms.values():
            members.discard(sid)

    def recipients(self, room: str = None, to: str = None, skip_sid: str = None) -> List[str]:
        if to is not None:
            return [to]
        return sorted(sid for sid in self.rooms.get(room, set()) if sid != skip_sid)

    async def emit(
        self,
        event: str,
        data: Any = None,
        to: str = None,
        room: str = None,
        skip_sid: str = None,
        namespace: str = None,
    ) -> None:
        targets = self.recipients(room=room, to=to, skip_sid=skip_sid)
        self.emitted.append(
            {
                "event": event,
                "data": data,
                "room": room,
                "to": to,
                "skip_sid": skip_sid,
                "recipients": targets,
            }
        )
        if self.deliver is not None:
            for sid in targets:
                await self.deliver(sid, event, data)

    async def trigger(self, event: str, sid: str, *args) -> Any:
        """Invoke a registered handler as python-socketio would."""
        return await _call(self.handlers[event], sid, *args)

    def events(self, name: str) -> List[Dict[str, Any]]:
        return [e for e in self.emitted if e["event"] == name]


class LoopbackHub:
    """In-process relay that LoopbackClients connect to instead of a network."""

    def __init__(self, registry: Optional[RoomRegistry] = None) -> None:
        self.server = FakeSocketServer()
        self.relay = CollaborationRelay(self.server, registry or RoomRegistry())
        self.clients: Dict[str, "LoopbackClient"] = {}
        self.server.deliver = self._deliver
        self.refuse_connections = False
        self._counter = 0

    @property
    def registry(self) -> RoomRegistry:
        return self.relay.registry

    def client_factory(self) -> "LoopbackClient":
        return LoopbackClient(self)

    def _next_sid(self) -> str:
        self._counter += 1
        return f"sid-{self._counter}"

    async def _deliver(self, sid: str, event: str, data: Any) -> None:
        client = self.clients.get(sid)
        if client is not None and client.connected:
            # JSON round trip like the real transport
            await client.dispatch(event, json.loads(json.dumps(data)))

    async def attach(self, client: "LoopbackClient") -> str:
        if self.refuse_connections:
            raise SocketConnectionError("Connection refused by the server")
        sid = self._next_sid()
        self.clients[sid] = client
        await self.server.trigger("connect", sid, {"REMOTE_ADDR": "127.0.0.1"})
        return sid

    async def detach(self, sid: str) -> None:
        await self.server.trigger("disconnect", sid, "client disconnect")
        self.server.leave_all_rooms(sid)
        self.clients.pop(sid, None)


class LoopbackClient:
    """socketio.AsyncClient look-alike bound to a LoopbackHub."""

    def __init__(self, hub: LoopbackHub) -> None:
        self.hub = hub
        self.handlers: Dict[str, Callable] = {}
        self.connected = False
        self.sid: Optional[str] = None
        self.connect_calls: List[Tuple[str, Any]] = []
        self.sent: List[Tuple[str, Any]] = []

    def on(self, event: str, handler: Callable = None):
        self.handlers[event] = handler

    def get_sid(self, namespace: str = None) -> Optional[str]:
        return self.sid

    async def connect(self, url: str, transports: Any = None, **kwargs) -> None:
        self.connect_calls.append((url, transports))
        self.sid = await self.hub.attach(self)
        self.connected = True
        await self.dispatch("connect")

    async def emit(self, event: str, data: Any = None, **kwargs) -> None:
        self.sent.append((event, data))
        if not self.connected:
            raise BadNamespaceError("/ is not a connected namespace.")
        await self.hub.server.trigger(event, self.sid, json.loads(json.dumps(data)))

    async def disconnect(self) -> None:
        if not self.connected:
            return
        self.connected = False
        await self.hub.detach(self.sid)
        await self.dispatch("disconnect", "client disconnect")

    async def dispatch(self, event: str, *args) -> None:
        handler = self.handlers.get(event)
        if handler is not None:
            await _call(handler, *args)


# ==============================================================================
# HTTP STAND-INS
# ==============================================================================
class ScriptedAuthAPI:
    """httpx.MockTransport backend answering /api/* with scripted replies."""

    def __init__(self) -> None:
        self.replies: Dict[str, Tuple[int, Any, Optional[Exception]]] = {}
        self.calls: List[Dict[str, Any]] = []

    def reply(
        self,
        path: str,
        status_code: int = 200,
        json_body: Any = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.replies[path] = (status_code, json_body, error)

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.calls.append(
            {
                "method": request.method,
                "path": request.url.path,
                "json": body,
                "authorization": request.headers.get("Authorization"),
            }
        )
        if request.url.path not in self.replies:
            return httpx.Response(404, json={"detail": "Not Found"})

        status_code, json_body, error = self.replies[request.url.path]
        if error is not None:
            raise error
        return httpx.Response(status_code, json=json_body)

    def count(self, path: str) -> int:
        return len([c for c in self.calls if c["path"] == path])

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


def refresh_success_body(expires_in: float = 15 * 60, session_in: float = 23 * 3600) -> dict:
    return {
        "success": True,
        "token": "refreshed-access-token",
        "expiresAt": iso_in(expires_in),
        "sessionExpiresAt": iso_in(session_in),
        "user": {"id": "u1", "username": "alice", "email": "alice@example.com"},
    }


def login_success_body() -> dict:
    return {
        "success": True,
        "message": "Login successful",
        "token": "login-access-token",
        "refreshToken": "login-refresh-token",
        "user": {"id": "u1", "username": "alice", "email": "alice@example.com"},
        "expiresAt": iso_in(15 * 60),
        "refreshExpiresAt": iso_in(7 * 24 * 3600),
        "sessionExpiresAt": iso_in(24 * 3600),
        "maxSessionDuration": "24h",
    }
