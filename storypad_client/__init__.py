"""
StoryPad client core: the session/token manager and the collaborative editor.
"""

from storypad_client.editor import (
    USER_COLORS,
    CollaborativeEditor,
    ConnectionState,
    get_user_color,
)
from storypad_client.session import SESSION_WARNING_EVENT, SessionManager
from storypad_client.storage import FileStorage, MemoryStorage

__all__ = [
    "CollaborativeEditor",
    "ConnectionState",
    "FileStorage",
    "MemoryStorage",
    "SESSION_WARNING_EVENT",
    "SessionManager",
    "USER_COLORS",
    "get_user_color",
]
