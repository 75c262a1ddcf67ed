"""
MODULE_DESCRIPTION: Collaborative Editor - Per-Chapter Live Text Buffer

===================================================================================
PURPOSE AND OVERVIEW
===================================================================================

One CollaborativeEditor holds the text of one chapter of one story and keeps
it in step with every other editor of that story through the collaboration
relay. It is UI-agnostic: the host feeds local edits in through
handle_text_change()/handle_cursor_change() and is told about remote edits
through the on_change callback.

State machine:

    DISCONNECTED --mount()--> CONNECTING --connect--> JOINED
         ^                                               |
         +------------- unmount() / disconnect ----------+

===================================================================================
CONTENT SEMANTICS
===================================================================================

Every message carries the whole chapter text. A remote text-change for this
chapter replaces the local buffer outright, so when two people type at once
the last message to arrive at each receiver wins and the other edit is lost.
Nothing detects or reports this.

A remote text-change raises a short-lived remote-change flag (100 ms). While
it is up, local edits update the buffer but are not re-broadcast. Each
remote change schedules its own reset, so an earlier reset can lower the
flag raised by a later change.

===================================================================================
CONNECTION POLICY
===================================================================================

- No automatic reconnection: a failed or dropped connection leaves the
  editor DISCONNECTED until it is mounted again
- Transports tried in order: websocket, polling
- Cursor positions are advisory and only feed the cursor badges
"""

import asyncio
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

import socketio
from socketio.exceptions import ConnectionError as SocketConnectionError

from storypad_client import config
from storypad_client.debug import print__editor_debug

USER_COLORS = [
    "#3B82F6",
    "#EF4444",
    "#10B981",
    "#F59E0B",
    "#8B5CF6",
    "#EC4899",
    "#06B6D4",
    "#84CC16",
]


def get_user_color(user_id: Optional[str]) -> str:
    """Badge colour for a collaborator, stable per first character of the id."""
    if not user_id:
        return USER_COLORS[0]
    return USER_COLORS[ord(str(user_id)[0]) % len(USER_COLORS)]


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    JOINED = "joined"


def _default_client_factory() -> socketio.AsyncClient:
    return socketio.AsyncClient(reconnection=False)


class CollaborativeEditor:
    """Live buffer for one chapter, synchronised over the collaboration relay."""

    def __init__(
        self,
        story_id: Optional[str],
        chapter_index: int,
        current_user: Optional[dict],
        value: str = "",
        on_change: Optional[Callable[[str], Any]] = None,
        socket_url: Optional[str] = None,
        client_factory: Optional[Callable[[], Any]] = None,
        remote_change_reset_delay: float = config.REMOTE_CHANGE_RESET_DELAY,
    ) -> None:
        self.story_id = story_id
        self.chapter_index = chapter_index
        self.current_user = current_user
        self.value = value
        self.on_change = on_change
        self.socket_url = socket_url or config.SOCKET_URL
        self.remote_change_reset_delay = remote_change_reset_delay
        self._client_factory = client_factory or _default_client_factory

        self.socket = None
        self.state = ConnectionState.DISCONNECTED
        self.active_users: List[dict] = []
        self.cursors: Dict[str, dict] = {}
        self.is_remote_change = False
        self._reset_handles: List[asyncio.TimerHandle] = []

    # ==========================================================================
    # DERIVED VIEW STATE
    # ==========================================================================
    @property
    def connected(self) -> bool:
        return self.socket is not None and bool(self.socket.connected)

    @property
    def status_label(self) -> str:
        return "Connected" if self.connected else "Disconnected"

    @property
    def someone_typing(self) -> bool:
        return self.is_remote_change

    @property
    def others_label(self) -> str:
        count = len(self.active_users)
        if count == 0:
            return ""
        return f"{count} other{'' if count == 1 else 's'} online"

    # ==========================================================================
    # LIFECYCLE
    # ==========================================================================
    async def mount(self) -> bool:
        """Connect and join the story room. Returns False when nothing connected."""
        if not self.story_id or self.story_id == "new" or not self.current_user:
            print__editor_debug(
                f"🔌 Skipping Socket.IO connection - missing data: "
                f"story={self.story_id!r} user={self.current_user!r}"
            )
            return False

        print__editor_debug(f"🔌 Connecting to Socket.IO at {self.socket_url}...")
        self.socket = self._client_factory()
        self._register_handlers(self.socket)
        self.state = ConnectionState.CONNECTING

        try:
            await self.socket.connect(
                self.socket_url, transports=list(config.SOCKET_TRANSPORTS)
            )
        except SocketConnectionError as e:
            print__editor_debug(f"❌ Socket.IO connection error: {e}")
            self.state = ConnectionState.DISCONNECTED
            return False

        return True

    async def unmount(self) -> None:
        print__editor_debug("🔌 Disconnecting from Socket.IO")
        for handle in self._reset_handles:
            handle.cancel()
        self._reset_handles.clear()

        if self.socket is not None:
            await self.socket.disconnect()
        self.state = ConnectionState.DISCONNECTED

    def _register_handlers(self, sock: Any) -> None:
        sock.on("connect", self._on_connect)
        sock.on("connect_error", self._on_connect_error)
        sock.on("disconnect", self._on_disconnect)
        sock.on("text-change", self._on_remote_text_change)
        sock.on("cursor-change", self._on_remote_cursor_change)
        sock.on("user-joined", self._on_user_joined)
        sock.on("user-left", self._on_user_left)
        sock.on("active-users", self._on_active_users)

    # ==========================================================================
    # SOCKET EVENTS
    # ==========================================================================
    async def _on_connect(self) -> None:
        print__editor_debug("✅ Connected to Socket.IO server")
        await self.socket.emit(
            "join-story",
            {
                "storyId": self.story_id,
                "username": self.current_user.get("username"),
                "userId": self.current_user.get("id"),
            },
        )
        self.state = ConnectionState.JOINED

    def _on_connect_error(self, data: Any = None) -> None:
        print__editor_debug(f"❌ Socket.IO connection error: {data}")

    def _on_disconnect(self, reason: Any = None) -> None:
        print__editor_debug(f"🔌 Disconnected ({reason})")
        self.state = ConnectionState.DISCONNECTED

    def _on_remote_text_change(self, data: dict) -> None:
        if data.get("chapterIndex") != self.chapter_index:
            return

        print__editor_debug(f"📝 Received text change from {data.get('username')}")
        self.is_remote_change = True
        self._set_value(data.get("content", ""))

        handle = asyncio.get_running_loop().call_later(
            self.remote_change_reset_delay, self._clear_remote_change
        )
        self._reset_handles.append(handle)

    def _clear_remote_change(self) -> None:
        self.is_remote_change = False
        # Resets share one delay, so they fire in scheduling order
        if self._reset_handles:
            self._reset_handles.pop(0)

    def _on_remote_cursor_change(self, data: dict) -> None:
        if data.get("chapterIndex") != self.chapter_index:
            return
        self.cursors[data.get("socketId")] = {
            "position": data.get("position"),
            "username": data.get("username"),
            "userId": data.get("userId"),
            "color": get_user_color(data.get("userId")),
        }

    def _on_user_joined(self, user: dict) -> None:
        print__editor_debug(f"👤 User joined: {user.get('username')}")
        self.active_users = [
            u for u in self.active_users if u.get("userId") != user.get("userId")
        ]
        self.active_users.append(user)

    def _on_user_left(self, user: dict) -> None:
        print__editor_debug(f"👋 User left: {user.get('username')}")
        self.active_users = [
            u for u in self.active_users if u.get("userId") != user.get("userId")
        ]
        self.cursors.pop(user.get("socketId"), None)

    def _on_active_users(self, users: list) -> None:
        own_id = self.current_user.get("id") if self.current_user else None
        self.active_users = [u for u in users if u.get("userId") != own_id]

    # ==========================================================================
    # LOCAL EDITS
    # ==========================================================================
    def _set_value(self, value: str) -> None:
        self.value = value
        if self.on_change is not None:
            self.on_change(value)

    async def handle_text_change(self, value: str) -> None:
        """Apply a local edit and publish the full chapter text."""
        self._set_value(value)

        if not self.is_remote_change and self.connected:
            print__editor_debug("📤 Sending text change to others")
            await self.socket.emit(
                "text-change",
                {
                    "content": value,
                    "chapterIndex": self.chapter_index,
                    "storyId": self.story_id,
                },
            )

    async def handle_cursor_change(self, position: int) -> None:
        if self.connected:
            await self.socket.emit(
                "cursor-change",
                {
                    "position": position,
                    "chapterIndex": self.chapter_index,
                    "storyId": self.story_id,
                },
            )
