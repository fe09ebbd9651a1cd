from datetime import datetime
from typing import TYPE_CHECKING
from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, DateTime, UniqueConstraint
from .enums import ApplicationDecision, ApplicationStatus
from .mission import utc_now

if TYPE_CHECKING:
    from shieldmate.models.mission import Mission
    from shieldmate.models.user import User


class Application(SQLModel, table=True):
    __tablename__ = "mission_application"
    __table_args__ = (
        UniqueConstraint(
            "id_mission", "id_volunteer", name="uq_mission_application_volunteer"
        ),
    )

    id_application: int | None = Field(default=None, primary_key=True)
    id_mission: int = Field(foreign_key="mission.id_mission", index=True)
    id_volunteer: int = Field(foreign_key="user.id_user", index=True)
    application_message: str | None = Field(default=None, max_length=2000)
    status: ApplicationStatus = Field(default=ApplicationStatus.PENDING, index=True)
    applied_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    decided_at: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )

    mission: "Mission" = Relationship(back_populates="applications")
    volunteer: "User" = Relationship()


class ApplicationCreate(SQLModel):
    application_message: str = Field(min_length=1, max_length=2000)


class ApplicationDecisionRequest(SQLModel):
    decision: ApplicationDecision


class ApplicationPublic(SQLModel):
    id_application: int
    id_mission: int
    id_volunteer: int
    application_message: str | None
    status: ApplicationStatus
    applied_at: datetime
    decided_at: datetime | None = None
