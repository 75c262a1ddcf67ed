"""Pydantic request and response models for the StoryPad API."""

from .requests import LoginRequest, RefreshRequest, SignupRequest
from .responses import (
    ExpireSessionResponse,
    LoginResponse,
    MessageResponse,
    RefreshResponse,
    SessionInfo,
    SessionStatusResponse,
    UserProfile,
)

__all__ = [
    "LoginRequest",
    "RefreshRequest",
    "SignupRequest",
    "ExpireSessionResponse",
    "LoginResponse",
    "MessageResponse",
    "RefreshResponse",
    "SessionInfo",
    "SessionStatusResponse",
    "UserProfile",
]
