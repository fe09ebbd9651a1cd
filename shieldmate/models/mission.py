from datetime import datetime, timezone
from typing import TYPE_CHECKING
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, DateTime
from .enums import DifficultyLevel, MissionStatus

if TYPE_CHECKING:
    from shieldmate.models.organization import Organization
    from shieldmate.models.template import MissionTemplate
    from shieldmate.models.application import Application


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class MissionBase(SQLModel):
    title: str = Field(max_length=150)
    description: str = Field(max_length=3000)
    id_template: int = Field(foreign_key="mission_template.id_template")
    estimated_hours: int | None = None
    difficulty_level: DifficultyLevel | None = None


class Mission(MissionBase, table=True):
    id_mission: int | None = Field(default=None, primary_key=True)
    # Owner is fixed at creation
    id_org: int = Field(foreign_key="organization.id_org", index=True)
    status: MissionStatus = Field(default=MissionStatus.OPEN, index=True)

    # Closure negotiation: closed_at is set iff status == completed
    closure_initiator_id: int | None = Field(default=None, foreign_key="user.id_user")
    closure_initiated_at: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    closed_at: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )

    organization: "Organization" = Relationship(back_populates="missions")
    template: "MissionTemplate" = Relationship(back_populates="missions")
    applications: list["Application"] = Relationship(
        back_populates="mission",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


class MissionCreate(SQLModel):
    title: str = Field(min_length=1, max_length=150)
    description: str = Field(min_length=1, max_length=3000)
    id_template: int
    # Falls back to the template values when omitted
    estimated_hours: int | None = Field(default=None, ge=1)
    difficulty_level: DifficultyLevel | None = None


class MissionPublic(MissionBase):
    """Public-safe view used by mission discovery."""

    id_mission: int
    id_org: int
    status: MissionStatus
    organization_name: str
    skills: list[str] = []


class MissionDetail(MissionPublic):
    """Full view for the two parties of a mission."""

    closure_initiator_id: int | None = None
    closure_initiated_at: datetime | None = None
    closed_at: datetime | None = None
    accepted_volunteer_id: int | None = None
    created_at: datetime
