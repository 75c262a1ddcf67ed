from typing import Optional

from pydantic import BaseModel


# ============================================================
# RESPONSE MODELS
# ============================================================
class UserProfile(BaseModel):
    id: str
    username: str
    email: str
    firstName: str = ""
    lastName: str = ""
    profilePicture: Optional[str] = None


class LoginResponse(BaseModel):
    """Everything the client session manager stores after a login.

    All timestamps are ISO-8601 strings in UTC.
    """

    success: bool = True
    message: str = "Login successful"
    token: str
    refreshToken: str
    user: UserProfile
    expiresAt: str
    refreshExpiresAt: str
    sessionExpiresAt: str
    maxSessionDuration: str


class RefreshResponse(BaseModel):
    success: bool = True
    token: str
    expiresAt: str
    sessionExpiresAt: str
    user: UserProfile


class MessageResponse(BaseModel):
    success: bool
    message: str


class SessionInfo(BaseModel):
    sessionStart: str
    sessionExpiry: str
    timeRemaining: int
    timeRemainingFormatted: str
    isExpired: bool
    maxDuration: str
    userId: str


class SessionStatusResponse(BaseModel):
    success: bool = True
    sessionInfo: SessionInfo


class ExpireSessionResponse(BaseModel):
    success: bool = True
    message: str = "Session artificially expired"
    newSessionStart: str

