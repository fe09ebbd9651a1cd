"""Rating service: mutual feedback once a mission is completed."""

from sqlmodel import Session, select, func
from sqlalchemy.exc import IntegrityError

from shieldmate.models.enums import MissionStatus
from shieldmate.models.mission import Mission
from shieldmate.models.rating import Rating, RatingCreate, RatingSummary
from shieldmate.services.participants import require_party, resolve_party
from shieldmate.services.utils import get_or_404
from shieldmate.exceptions import (
    AlreadyRatedError,
    MissionNotCompletedError,
    ValidationError,
)
from shieldmate.utils.logger import logger


def _find_rating(session: Session, mission_id: int, rater_id: int) -> Rating | None:
    return session.exec(
        select(Rating).where(
            Rating.id_mission == mission_id,
            Rating.rater_user_id == rater_id,
        )
    ).first()


def submit_rating(
    session: Session, mission_id: int, rater_id: int, rating_in: RatingCreate
) -> Rating:
    """
    Rate the other party of a completed mission.

    Each participant rates once per mission: the volunteer rates an
    organization member, an organization member rates the volunteer.

    Parameters:
        session: Database session.
        mission_id: Completed mission being rated.
        rater_id: Acting user.
        rating_in: Rated user, score (1 to 5) and optional review.

    Returns:
        Rating: The stored rating.

    Raises:
        NotFoundError: If the mission does not exist.
        MissionNotCompletedError: If the mission is not completed yet.
        InsufficientPermissionsError: If the rater is not a participant.
        ValidationError: If the rated user is not the counterpart, or the score is out of range.
        AlreadyRatedError: If the rater already rated this mission.
    """
    mission = get_or_404(session, Mission, mission_id)
    if mission.status != MissionStatus.COMPLETED:
        raise MissionNotCompletedError(mission_id, mission.status.value)

    rater_party = require_party(session, mission, rater_id, "rate this mission")

    if rating_in.rated_user_id == rater_id:
        raise ValidationError("You cannot rate yourself", field="rated_user_id")
    if resolve_party(session, mission, rating_in.rated_user_id) != rater_party.counterpart:
        raise ValidationError(
            "The rated user must be the other party of the mission",
            field="rated_user_id",
        )
    if not 1 <= rating_in.rating <= 5:
        raise ValidationError("Rating must be between 1 and 5", field="rating")

    if _find_rating(session, mission_id, rater_id):
        raise AlreadyRatedError(mission_id, rater_id)

    rating = Rating.model_validate(
        rating_in, update={"id_mission": mission_id, "rater_user_id": rater_id}
    )
    session.add(rating)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise AlreadyRatedError(mission_id, rater_id)
    session.refresh(rating)

    logger.info(
        f"Mission {mission_id}: user {rater_id} rated user "
        f"{rating.rated_user_id} {rating.rating}/5"
    )
    return rating


def list_mission_ratings(session: Session, mission_id: int) -> list[Rating]:
    """
    Ratings left on a mission, oldest first.

    Raises:
        NotFoundError: If the mission does not exist.
    """
    get_or_404(session, Mission, mission_id)
    statement = (
        select(Rating)
        .where(Rating.id_mission == mission_id)
        .order_by(Rating.id_rating)  # type: ignore
    )
    return list(session.exec(statement).all())


def get_user_rating_summary(session: Session, user_id: int) -> RatingSummary:
    """Average score and number of ratings received by a user."""
    average, count = session.exec(
        select(func.avg(Rating.rating), func.count(Rating.id_rating)).where(  # type: ignore
            Rating.rated_user_id == user_id
        )
    ).one()
    return RatingSummary(
        id_user=user_id,
        average=round(float(average), 2) if average is not None else None,
        count=count,
    )
