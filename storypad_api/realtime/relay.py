"""
MODULE_DESCRIPTION: Collaboration Relay - Socket.IO Room Broadcaster

===================================================================================
PURPOSE AND OVERVIEW
===================================================================================

Fans real-time editing events out between the sockets editing the same
story. Each story id is a Socket.IO room; membership is tracked in a
RoomRegistry owned by the server process and handed to the relay.

Events handled (client -> server):

    join-story     {storyId, username, userId}
    text-change    {content, chapterIndex, storyId}
    cursor-change  {position, chapterIndex, storyId}
    disconnect

Events emitted (server -> client):

    active-users   [{userId, username}]             to the joining socket only
    user-joined    {userId, username, socketId}     to the rest of the room
    user-left      {userId, username, socketId}     to the rest of the room
    text-change    payload + {userId, username}     to the rest of the room
    cursor-change  payload + {userId, username, socketId}

===================================================================================
BROADCAST SEMANTICS
===================================================================================

- The sender identity attached to text/cursor events comes from the
  registry record of the sending connection, never from the payload.
- Events from a connection that has not joined a room are dropped silently.
- Content is always the full chapter text. There is no ordering, no
  acknowledgement and no merge: whichever text-change reaches a receiver
  last becomes its buffer.
- Duplicate connections of one user are not collapsed; peers see one
  user-joined/user-left per connection.
- There is no session resume: a dropped socket must join again.
"""

from typing import Any, Optional

from storypad_api.realtime.rooms import RoomRegistry
from storypad_api.utils.debug import print__relay_debug


class CollaborationRelay:
    """Binds the relay's event handlers to a Socket.IO server."""

    def __init__(self, sio: Any, registry: Optional[RoomRegistry] = None) -> None:
        self.sio = sio
        self.registry = registry if registry is not None else RoomRegistry()
        self._register_handlers()

    def _register_handlers(self) -> None:
        self.sio.on("connect", self.on_connect)
        self.sio.on("join-story", self.on_join_story)
        self.sio.on("text-change", self.on_text_change)
        self.sio.on("cursor-change", self.on_cursor_change)
        self.sio.on("disconnect", self.on_disconnect)

    # ==========================================================================
    # CONNECTION LIFECYCLE
    # ==========================================================================
    async def on_connect(self, sid: str, environ: dict, auth: Any = None) -> None:
        print__relay_debug(f"📡 User connected: {sid}")

    async def on_disconnect(self, sid: str, reason: Any = None) -> None:
        member = self.registry.leave(sid)
        if member is None:
            print__relay_debug(f"📡 Unjoined socket disconnected: {sid}")
            return

        print__relay_debug(f"👋 {member.username} left story {member.story_id}")
        await self.sio.emit(
            "user-left",
            {
                "userId": member.user_id,
                "username": member.username,
                "socketId": sid,
            },
            room=member.story_id,
            skip_sid=sid,
        )

    # ==========================================================================
    # ROOM MEMBERSHIP
    # ==========================================================================
    async def on_join_story(self, sid: str, data: Any) -> None:
        if not isinstance(data, dict) or not data.get("storyId"):
            print__relay_debug(f"⚠️ join-story without storyId from {sid} ignored")
            return

        story_id = data["storyId"]
        username = data.get("username")
        user_id = data.get("userId")

        await self.sio.enter_room(sid, story_id)
        self.registry.join(sid, story_id, username, user_id)
        print__relay_debug(f"👤 {username} joined story {story_id}")

        # Notify others that user joined
        await self.sio.emit(
            "user-joined",
            {"userId": user_id, "username": username, "socketId": sid},
            room=story_id,
            skip_sid=sid,
        )

        # Current members for the newcomer, excluding its own user id
        await self.sio.emit(
            "active-users",
            self.registry.peers_for(story_id, exclude_user_id=user_id),
            to=sid,
        )

    # ==========================================================================
    # CONTENT AND CURSOR FAN-OUT
    # ==========================================================================
    async def on_text_change(self, sid: str, data: Any) -> None:
        member = self.registry.lookup(sid)
        if member is None or not isinstance(data, dict):
            return

        print__relay_debug(
            f"📝 Text change from {member.username} in story {member.story_id}"
        )
        await self.sio.emit(
            "text-change",
            {**data, "userId": member.user_id, "username": member.username},
            room=member.story_id,
            skip_sid=sid,
        )

    async def on_cursor_change(self, sid: str, data: Any) -> None:
        member = self.registry.lookup(sid)
        if member is None or not isinstance(data, dict):
            return

        self.registry.record_cursor(sid, data)
        await self.sio.emit(
            "cursor-change",
            {
                **data,
                "userId": member.user_id,
                "username": member.username,
                "socketId": sid,
            },
            room=member.story_id,
            skip_sid=sid,
        )
