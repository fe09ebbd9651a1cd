"""Notification models for the per-user activity feed."""

from datetime import datetime, timezone
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime, ForeignKey
from enum import Enum


class NotificationType(str, Enum):
    """Events a user is notified about."""

    APPLICATION_RECEIVED = "application_received"
    APPLICATION_ACCEPTED = "application_accepted"
    APPLICATION_REJECTED = "application_rejected"
    CLOSURE_PROPOSED = "closure_proposed"
    CLOSURE_CONFIRMED = "closure_confirmed"
    CLOSURE_DISPUTED = "closure_disputed"
    MISSION_AUTO_COMPLETED = "mission_auto_completed"


class NotificationBase(SQLModel):
    """Base notification fields."""

    notification_type: NotificationType
    message: str = Field(max_length=500)
    link_url: str | None = Field(default=None, max_length=255)
    related_mission_id: int | None = Field(default=None)
    is_read: bool = Field(default=False)


class Notification(NotificationBase, table=True):
    """Database notification model."""

    id_notification: int | None = Field(default=None, primary_key=True)
    id_user: int = Field(
        sa_column=Column(
            ForeignKey(
                "user.id_user",
                ondelete="CASCADE",
                name="notification_id_user_fkey",
            ),
            nullable=False,
            index=True,
        )
    )
    related_mission_id: int | None = Field(
        default=None,
        sa_column=Column(
            ForeignKey(
                "mission.id_mission",
                ondelete="CASCADE",
                name="notification_related_mission_id_fkey",
            ),
            nullable=True,
        ),
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
    )


class NotificationPublic(NotificationBase):
    """Public notification response."""

    id_notification: int
    created_at: datetime


class NotificationCreate(SQLModel):
    """Schema for creating notifications (internal use)."""

    id_user: int
    notification_type: NotificationType
    message: str = Field(max_length=500)
    link_url: str | None = None
    related_mission_id: int | None = None


class NotificationMarkRead(SQLModel):
    """Schema for marking notifications as read."""

    notification_ids: list[int] = Field(min_length=1)
