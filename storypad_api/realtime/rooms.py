"""
Room registry for the collaboration relay.

Holds the two volatile maps the relay works from, keyed by Socket.IO
connection id (sid):

    active_users      sid -> RoomMember(story_id, username, user_id)
    cursor_positions  sid -> last cursor-change payload from that sid

Entries are per connection, not per user: the same user in two tabs
occupies two entries. Nothing is persisted, so a server restart empties
every room, and the registry lives in one process only.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass
class RoomMember:
    story_id: str
    username: Optional[str]
    user_id: Optional[str]

    def as_peer(self) -> dict:
        """Entry shape used in the `active-users` snapshot."""
        return {"userId": self.user_id, "username": self.username}


class RoomRegistry:
    """Membership and cursor state for every story room on this relay."""

    def __init__(self) -> None:
        self.active_users: Dict[str, RoomMember] = {}
        self.cursor_positions: Dict[str, dict] = {}

    def join(
        self, sid: str, story_id: str, username: Optional[str], user_id: Optional[str]
    ) -> RoomMember:
        # A second join from the same sid replaces the record; the previous
        # room is not left.
        member = RoomMember(story_id=story_id, username=username, user_id=user_id)
        self.active_users[sid] = member
        return member

    def lookup(self, sid: str) -> Optional[RoomMember]:
        return self.active_users.get(sid)

    def peers_for(self, story_id: str, exclude_user_id: Optional[str]) -> List[dict]:
        """Members of a story whose user id differs from `exclude_user_id`.

        Not de-duplicated: a user connected twice is listed twice.
        """
        return [
            member.as_peer()
            for member in self.active_users.values()
            if member.story_id == story_id and member.user_id != exclude_user_id
        ]

    def record_cursor(self, sid: str, payload: dict) -> None:
        self.cursor_positions[sid] = payload

    def leave(self, sid: str) -> Optional[RoomMember]:
        """Drop a connection from both maps, returning its membership if any."""
        member = self.active_users.pop(sid, None)
        self.cursor_positions.pop(sid, None)
        return member

    def room_sizes(self) -> Dict[str, int]:
        sizes: Dict[str, int] = {}
        for member in self.active_users.values():
            sizes[member.story_id] = sizes.get(member.story_id, 0) + 1
        return sizes

    def __len__(self) -> int:
        return len(self.active_users)

    def __contains__(self, sid: str) -> bool:
        return sid in self.active_users
