from .auth import get_current_user, get_user_store

__all__ = ["get_current_user", "get_user_store"]
