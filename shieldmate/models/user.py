from datetime import datetime
from typing import TYPE_CHECKING
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, DateTime
from .enums import UserRole
from .mission import utc_now

if TYPE_CHECKING:
    from shieldmate.models.organization import OrganizationMember


class UserBase(SQLModel):
    username: str = Field(unique=True, index=True, max_length=50)
    email: str = Field(unique=True, index=True, max_length=255)
    first_name: str = Field(default="", max_length=50)
    last_name: str = Field(default="", max_length=50)
    role: UserRole = Field(default=UserRole.VOLUNTEER, index=True)


class User(UserBase, table=True):
    id_user: int | None = Field(default=None, primary_key=True)
    hashed_password: str
    date_creation: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    memberships: list["OrganizationMember"] = Relationship(back_populates="user")

    @property
    def display_name(self) -> str:
        full_name = f"{self.first_name} {self.last_name}".strip()
        return full_name or self.username


class UserCreate(UserBase):
    password: str = Field(min_length=8)


class UserPublic(SQLModel):
    id_user: int
    username: str
    first_name: str
    last_name: str
    role: UserRole
