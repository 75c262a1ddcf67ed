"""
In-memory user records backing the auth routes.

Stands in for the document database of the full application: records hold
the profile fields returned to clients plus the single refresh token and
session window that /api/refresh validates against. Nothing is persisted;
a restart drops every account and every session.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional


@dataclass
class UserRecord:
    username: str
    email: str
    password_hash: str
    first_name: str = ""
    last_name: str = ""
    profile_picture: Optional[str] = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex[:24])
    refresh_token: Optional[str] = None
    session_start: Optional[datetime] = None
    max_session_duration: Optional[str] = None
    last_login: Optional[datetime] = None

    def public_profile(self) -> dict:
        """Profile shape returned by /api/login and /api/refresh."""
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "profilePicture": self.profile_picture,
        }

    def clear_session(self) -> None:
        self.refresh_token = None
        self.session_start = None
        self.max_session_duration = None


class UserStore:
    """Users keyed by id with lookups by email and username."""

    def __init__(self) -> None:
        self._users: Dict[str, UserRecord] = {}

    def __len__(self) -> int:
        return len(self._users)

    def add(self, user: UserRecord) -> UserRecord:
        if self.find_by_email(user.email) is not None:
            raise ValueError("Email already registered")
        if self.find_by_username(user.username) is not None:
            raise ValueError("Username already taken")
        self._users[user.id] = user
        return user

    def get(self, user_id: str) -> Optional[UserRecord]:
        return self._users.get(user_id)

    def find_by_email(self, email: str) -> Optional[UserRecord]:
        for user in self._users.values():
            if user.email == email:
                return user
        return None

    def find_by_username(self, username: str) -> Optional[UserRecord]:
        for user in self._users.values():
            if user.username == username:
                return user
        return None
