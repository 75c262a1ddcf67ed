"""Real-time collaboration: room registry and Socket.IO relay."""

from .relay import CollaborationRelay
from .rooms import RoomMember, RoomRegistry

__all__ = ["CollaborationRelay", "RoomMember", "RoomRegistry"]
