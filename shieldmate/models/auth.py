"""Request/response schemas of the authentication endpoints."""

from pydantic import BaseModel
from sqlmodel import SQLModel, Field

from .enums import UserRole


class Token(BaseModel):
    access_token: str
    refresh_token: str | None = None
    token_type: str = "bearer"


class TokenRefreshRequest(BaseModel):
    refresh_token: str


class UserRegister(SQLModel):
    """Self-service sign-up; super admins are only seeded, never registered."""

    username: str = Field(max_length=50)
    email: str = Field(max_length=255)
    first_name: str = Field(default="", max_length=50)
    last_name: str = Field(default="", max_length=50)
    password: str = Field(min_length=8)
    role: UserRole = UserRole.VOLUNTEER
