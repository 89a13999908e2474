"""Pydantic schemas for admin authentication."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class AuthModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LoginRequest(AuthModel):
    """Identity check before commenting."""

    nickname: str = Field(..., max_length=50)
    email: str = Field(..., max_length=200)
    password: str | None = None


class LoginResponse(AuthModel):
    success: bool
    is_admin: bool
    message: str | None = None


class LogoutResponse(AuthModel):
    success: bool = True
    message: str = "Logged out successfully"


class AdminIdentity(AuthModel):
    """Admin identity carried by the auth cookie."""

    nickname: str
    email: str
    website: str | None = None
    avatar: str | None = None


class MeResponse(AuthModel):
    """Login state of the caller."""

    is_logged_in: bool
    is_admin: bool
    nickname: str | None = None
    email: str | None = None
    website: str | None = None
    avatar: str | None = None
