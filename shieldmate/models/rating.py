from datetime import datetime
from sqlmodel import SQLModel, Field
from sqlalchemy import CheckConstraint, Column, DateTime, UniqueConstraint
from .mission import utc_now


class RatingBase(SQLModel):
    rated_user_id: int = Field(foreign_key="user.id_user", index=True)
    rating: int = Field(ge=1, le=5)
    review_text: str | None = Field(default=None, max_length=2000)


class Rating(RatingBase, table=True):
    """Feedback one party leaves about the other once a mission is completed."""

    __tablename__ = "mission_rating"
    __table_args__ = (
        UniqueConstraint("id_mission", "rater_user_id", name="uq_mission_rating_rater"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="ck_mission_rating_range"),
    )

    id_rating: int | None = Field(default=None, primary_key=True)
    id_mission: int = Field(foreign_key="mission.id_mission", index=True)
    rater_user_id: int = Field(foreign_key="user.id_user")
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )


class RatingCreate(RatingBase):
    pass


class RatingPublic(RatingBase):
    id_rating: int
    id_mission: int
    rater_user_id: int
    created_at: datetime


class RatingSummary(SQLModel):
    id_user: int
    average: float | None
    count: int
