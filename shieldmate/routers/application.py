"""Application router: apply to missions and decide on applications."""

from typing import Annotated
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from shieldmate.database.database import get_session
from shieldmate.core.dependencies import get_current_user
from shieldmate.models.application import (
    ApplicationCreate,
    ApplicationDecisionRequest,
    ApplicationPublic,
)
from shieldmate.models.enums import ApplicationStatus
from shieldmate.models.user import User
from shieldmate.services import application as application_service
from shieldmate.utils.validation import ensure_id

router = APIRouter(tags=["applications"])


@router.post(
    "/missions/{mission_id}/applications",
    response_model=ApplicationPublic,
    status_code=status.HTTP_201_CREATED,
)
async def submit_application(
    mission_id: int,
    application_in: ApplicationCreate,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """
    Apply to an open mission.

    ### Authorization:
    - Volunteer accounts only

    Raises:
        403 InsufficientPermissionsError: If the caller is not a volunteer.
        404 NotFoundError: If the mission doesn't exist.
        409 InvalidTransitionError: If the mission is no longer open.
        409 DuplicateApplicationError: If the caller already applied.
    """
    return await application_service.submit_application(
        session,
        mission_id,
        ensure_id(current_user.id_user, "User"),
        application_in.application_message,
    )


@router.get(
    "/missions/{mission_id}/applications", response_model=list[ApplicationPublic]
)
def list_mission_applications(
    mission_id: int,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
    application_status: ApplicationStatus | None = Query(
        default=None, alias="status", description="Filter by application status"
    ),
):
    """
    List the applications received by a mission.

    ### Authorization:
    - Member of the organization that posted the mission
    """
    return application_service.list_mission_applications(
        session,
        mission_id,
        ensure_id(current_user.id_user, "User"),
        status=application_status,
    )


@router.post("/applications/{application_id}/decision", response_model=ApplicationPublic)
async def decide_application(
    application_id: int,
    decision_in: ApplicationDecisionRequest,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """
    Accept or reject a pending application.

    Accepting starts the mission and rejects every other pending application.

    Raises:
        403 InsufficientPermissionsError: If the caller is not a member of the organization.
        404 NotFoundError: If the application doesn't exist.
        409 InvalidTransitionError: If the application or mission status changed meanwhile.
    """
    return await application_service.decide_application(
        session,
        application_id,
        decision_in.decision,
        ensure_id(current_user.id_user, "User"),
    )


@router.get("/applications/mine", response_model=list[ApplicationPublic])
def list_my_applications(
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
):
    """Applications submitted by the caller, newest first."""
    return application_service.list_volunteer_applications(
        session, ensure_id(current_user.id_user, "User")
    )
