"""Mission router: discovery, creation and closure negotiation."""

from typing import Annotated
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from shieldmate.database.database import get_session
from shieldmate.core.dependencies import get_current_user
from shieldmate.models.enums import UserRole
from shieldmate.models.mission import MissionCreate, MissionDetail, MissionPublic
from shieldmate.models.user import User
from shieldmate.services import closure as closure_service
from shieldmate.services import mission as mission_service
from shieldmate.services import organization as organization_service
from shieldmate.utils.validation import ensure_id

router = APIRouter(prefix="/missions", tags=["missions"])


@router.get("/", response_model=list[MissionPublic])
def list_open_missions(
    session: Annotated[Session, Depends(get_session)],
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    limit: int = Query(
        default=100, ge=1, le=100, description="Pagination limit (max 100)"
    ),
) -> list[MissionPublic]:
    """
    Public endpoint to discover missions that accept applications.

    No authentication required. Only `open` missions are listed, with the
    organization name, estimated hours, difficulty and required skills.
    """
    missions = mission_service.list_open_missions(session, offset=offset, limit=limit)
    return [mission_service.to_mission_public(m) for m in missions]


@router.post("/", response_model=MissionDetail, status_code=status.HTTP_201_CREATED)
def create_mission(
    mission_in: MissionCreate,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> MissionDetail:
    """
    Post a new mission for the caller's organization.

    ### Authorization:
    - Member of an approved organization

    Raises:
        403 InsufficientPermissionsError: If the caller's organization is missing or not approved.
        404 NotFoundError: If the template doesn't exist.
    """
    user_id = ensure_id(current_user.id_user, "User")
    mission = mission_service.create_mission(session, mission_in, user_id)
    return mission_service.to_mission_detail(session, mission)


@router.get("/mine", response_model=list[MissionDetail])
def list_my_missions(
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> list[MissionDetail]:
    """
    Missions the caller takes part in.

    Volunteers get the missions they were accepted on; organization members
    get every mission of their organization.
    """
    user_id = ensure_id(current_user.id_user, "User")
    if current_user.role == UserRole.VOLUNTEER:
        missions = mission_service.list_volunteer_missions(session, user_id)
    else:
        organization = organization_service.get_user_organization(session, user_id)
        if organization is None:
            return []
        missions = mission_service.list_organization_missions(
            session, ensure_id(organization.id_org, "Organization")
        )
    return [mission_service.to_mission_detail(session, m) for m in missions]


@router.get("/{mission_id}", response_model=MissionDetail)
def get_mission_details(
    mission_id: int,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> MissionDetail:
    """
    Get a mission.

    Open missions are visible to every authenticated user; once a volunteer
    is accepted, only the two parties can see the mission.

    Raises:
        404 NotFoundError: If the mission doesn't exist or isn't visible to the caller.
    """
    mission = mission_service.get_visible_mission(session, mission_id, current_user)
    return mission_service.to_mission_detail(session, mission)


@router.post("/{mission_id}/closure/propose", response_model=MissionDetail)
async def propose_closure(
    mission_id: int,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> MissionDetail:
    """
    Mark an in-progress mission as complete and ask the other party to confirm.

    The other party has 3 days to confirm or dispute; after that the mission
    is completed automatically.

    Raises:
        403 InsufficientPermissionsError: If the caller is not a party of the mission.
        409 InvalidTransitionError: If the mission is not in progress.
        409 NoAcceptedVolunteerError: If nobody was accepted on the mission.
    """
    mission = await closure_service.propose_closure(
        session, mission_id, ensure_id(current_user.id_user, "User")
    )
    return mission_service.to_mission_detail(session, mission)


@router.post("/{mission_id}/closure/confirm", response_model=MissionDetail)
def confirm_closure(
    mission_id: int,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> MissionDetail:
    """
    Confirm the other party's closure proposal; the mission is completed.

    Raises:
        403 InsufficientPermissionsError: If the caller proposed the closure or is not a party.
        409 InvalidTransitionError: If the mission is not pending closure.
    """
    mission = closure_service.confirm_closure(
        session, mission_id, ensure_id(current_user.id_user, "User")
    )
    return mission_service.to_mission_detail(session, mission)


@router.post("/{mission_id}/closure/dispute", response_model=MissionDetail)
def dispute_closure(
    mission_id: int,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> MissionDetail:
    """
    Refuse the other party's closure proposal; the mission goes back to in progress.

    Raises:
        403 InsufficientPermissionsError: If the caller proposed the closure or is not a party.
        409 InvalidTransitionError: If the mission is not pending closure.
    """
    mission = closure_service.dispute_closure(
        session, mission_id, ensure_id(current_user.id_user, "User")
    )
    return mission_service.to_mission_detail(session, mission)
