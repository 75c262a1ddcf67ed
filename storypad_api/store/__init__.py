from .user_store import UserRecord, UserStore

__all__ = ["UserRecord", "UserStore"]
