from datetime import datetime, timezone
from typing import TYPE_CHECKING
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, DateTime, UniqueConstraint
from .enums import MemberRole, OrganizationStatus

if TYPE_CHECKING:
    from shieldmate.models.user import User
    from shieldmate.models.mission import Mission


class OrganizationBase(SQLModel):
    name: str = Field(max_length=120)
    description: str | None = Field(default=None, max_length=2000)
    contact_email: str | None = Field(default=None, max_length=255)
    website_url: str | None = Field(default=None, max_length=255)


class Organization(OrganizationBase, table=True):
    id_org: int | None = Field(default=None, primary_key=True)
    status: OrganizationStatus = Field(
        default=OrganizationStatus.PENDING_VERIFICATION, index=True
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    members: list["OrganizationMember"] = Relationship(
        back_populates="organization",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
    missions: list["Mission"] = Relationship(back_populates="organization")


class OrganizationMember(SQLModel, table=True):
    __tablename__ = "organization_member"
    __table_args__ = (
        UniqueConstraint("id_org", "id_user", name="uq_organization_member_org_user"),
    )

    id_member: int | None = Field(default=None, primary_key=True)
    id_org: int = Field(foreign_key="organization.id_org", index=True)
    id_user: int = Field(foreign_key="user.id_user", index=True)
    role: MemberRole = Field(default=MemberRole.TEAM_MEMBER)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    organization: "Organization" = Relationship(back_populates="members")
    user: "User" = Relationship(back_populates="memberships")


class OrganizationCreate(OrganizationBase):
    pass


class OrganizationPublic(OrganizationBase):
    id_org: int
    status: OrganizationStatus


class OrganizationStatusUpdate(SQLModel):
    status: OrganizationStatus


class MemberAdd(SQLModel):
    id_user: int
    role: MemberRole = MemberRole.TEAM_MEMBER


class MemberPublic(SQLModel):
    id_org: int
    id_user: int
    role: MemberRole
