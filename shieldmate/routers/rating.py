"""Rating router: feedback between the parties of a completed mission."""

from typing import Annotated
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from shieldmate.database.database import get_session
from shieldmate.core.dependencies import get_current_user
from shieldmate.models.rating import RatingCreate, RatingPublic, RatingSummary
from shieldmate.models.user import User
from shieldmate.services import mission as mission_service
from shieldmate.services import rating as rating_service
from shieldmate.utils.validation import ensure_id

router = APIRouter(tags=["ratings"])


@router.post(
    "/missions/{mission_id}/ratings",
    response_model=RatingPublic,
    status_code=status.HTTP_201_CREATED,
)
def submit_rating(
    mission_id: int,
    rating_in: RatingCreate,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """
    Rate the other party of a completed mission.

    Raises:
        403 InsufficientPermissionsError: If the caller is not a party of the mission.
        409 MissionNotCompletedError: If the mission is not completed.
        409 AlreadyRatedError: If the caller already rated this mission.
        422 ValidationError: If the rated user is not the other party.
    """
    return rating_service.submit_rating(
        session, mission_id, ensure_id(current_user.id_user, "User"), rating_in
    )


@router.get("/missions/{mission_id}/ratings", response_model=list[RatingPublic])
def list_mission_ratings(
    mission_id: int,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """
    Ratings left on a mission.

    Raises:
        404 NotFoundError: If the mission doesn't exist or isn't visible to the caller.
    """
    mission_service.get_visible_mission(session, mission_id, current_user)
    return rating_service.list_mission_ratings(session, mission_id)


@router.get("/users/{user_id}/rating-summary", response_model=RatingSummary)
def get_rating_summary(
    user_id: int,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Average score and number of ratings a user received."""
    return rating_service.get_user_rating_summary(session, user_id)
