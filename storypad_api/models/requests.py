from typing import Optional

from pydantic import BaseModel, Field, field_validator


# ============================================================
# REQUEST MODELS
# ============================================================
class LoginRequest(BaseModel):
    """Credentials posted to /api/login.

    rememberMe selects the extended refresh-token lifetime and session
    duration.
    """

    email: str = Field(..., min_length=1, examples=["writer@example.com"])
    password: str = Field(..., min_length=1)
    rememberMe: bool = Field(
        False, description="Use the extended (30 day) session window"
    )

    @field_validator("email")
    @classmethod
    def validate_email(cls, v):
        return v.strip()


class RefreshRequest(BaseModel):
    """Body of /api/refresh.

    The token is optional at the schema level so that a missing token gets
    the route's own 401 answer instead of a validation error.
    """

    refreshToken: Optional[str] = None


class SignupRequest(BaseModel):
    firstName: str = Field("", max_length=100)
    lastName: str = Field("", max_length=100)
    username: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1)

    @field_validator("username", "email")
    @classmethod
    def validate_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Field cannot be empty or only whitespace")
        return v.strip()
