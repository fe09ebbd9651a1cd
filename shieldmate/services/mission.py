"""Mission service module: creation and read access to missions."""

from sqlmodel import Session, select
from sqlalchemy.orm import selectinload

from shieldmate.models.application import Application
from shieldmate.models.enums import (
    ApplicationStatus,
    MissionStatus,
    OrganizationStatus,
    UserRole,
)
from shieldmate.models.mission import Mission, MissionCreate, MissionDetail, MissionPublic
from shieldmate.models.template import MissionTemplate
from shieldmate.models.user import User
from shieldmate.services import organization as organization_service
from shieldmate.services.participants import get_accepted_application, resolve_party
from shieldmate.exceptions import InsufficientPermissionsError, NotFoundError
from shieldmate.utils.logger import logger


def create_mission(
    session: Session, mission_in: MissionCreate, creator_id: int
) -> Mission:
    """
    Create a new `open` mission for the creator's organization.

    Estimated hours and difficulty are copied from the template when the
    request leaves them out.

    Parameters:
        session: Database session.
        mission_in: Mission creation data.
        creator_id: User creating the mission.

    Returns:
        Mission: The created mission.

    Raises:
        InsufficientPermissionsError: If the creator is not a member of an approved organization.
        NotFoundError: If the template does not exist.
    """
    organization = organization_service.get_user_organization(session, creator_id)
    if organization is None or organization.status != OrganizationStatus.APPROVED:
        raise InsufficientPermissionsError("create a mission")

    template = session.get(MissionTemplate, mission_in.id_template)
    if not template:
        raise NotFoundError("MissionTemplate", mission_in.id_template)

    mission_data = mission_in.model_dump()
    if mission_data["estimated_hours"] is None:
        mission_data["estimated_hours"] = template.estimated_hours
    if mission_data["difficulty_level"] is None:
        mission_data["difficulty_level"] = template.difficulty_level

    mission = Mission.model_validate(
        mission_data,
        update={"id_org": organization.id_org, "status": MissionStatus.OPEN},
    )
    session.add(mission)
    session.commit()
    session.refresh(mission)
    logger.info(
        f"Mission {mission.id_mission} created by user {creator_id} "
        f"for organization {organization.id_org}"
    )
    return mission


def get_mission(session: Session, mission_id: int) -> Mission | None:
    """
    Retrieve a mission by ID.

    Returns:
        Mission | None: The mission record or None if not found.
    """
    return session.get(Mission, mission_id)


def get_mission_or_404(session: Session, mission_id: int) -> Mission:
    """
    Retrieve a mission by ID or fail.

    Raises:
        NotFoundError: If no mission exists with this ID.
    """
    mission = session.get(Mission, mission_id)
    if not mission:
        raise NotFoundError("Mission", mission_id)
    return mission


def get_visible_mission(session: Session, mission_id: int, user: User) -> Mission:
    """
    Retrieve a mission the user is allowed to see.

    Open missions are visible to everybody. Once a volunteer is accepted, only
    the two parties and super admins can see the mission; everybody else gets
    the same error as for a missing mission.

    Raises:
        NotFoundError: If the mission does not exist or is hidden from the user.
    """
    mission = get_mission_or_404(session, mission_id)
    if mission.status == MissionStatus.OPEN or user.role == UserRole.SUPER_ADMIN:
        return mission
    if resolve_party(session, mission, user.id_user) is None:  # type: ignore
        raise NotFoundError("Mission", mission_id)
    return mission


def _with_relations(statement):
    return statement.options(
        selectinload(Mission.organization),  # type: ignore
        selectinload(Mission.template).selectinload(MissionTemplate.skills),  # type: ignore
    )


def list_open_missions(
    session: Session, *, offset: int = 0, limit: int = 100
) -> list[Mission]:
    """
    List missions volunteers can still apply to, newest first.

    Only `open` missions are part of the public surface.
    """
    statement = (
        _with_relations(select(Mission))
        .where(Mission.status == MissionStatus.OPEN)
        .order_by(Mission.id_mission.desc())  # type: ignore
        .offset(offset)
        .limit(limit)
    )
    return list(session.exec(statement).all())


def list_organization_missions(session: Session, org_id: int) -> list[Mission]:
    """All missions posted by an organization, whatever their status."""
    statement = (
        _with_relations(select(Mission))
        .where(Mission.id_org == org_id)
        .order_by(Mission.id_mission.desc())  # type: ignore
    )
    return list(session.exec(statement).all())


def list_volunteer_missions(session: Session, user_id: int) -> list[Mission]:
    """Missions on which the user holds the accepted application."""
    statement = (
        _with_relations(select(Mission))
        .join(Application, Application.id_mission == Mission.id_mission)  # type: ignore
        .where(
            Application.id_volunteer == user_id,
            Application.status == ApplicationStatus.ACCEPTED,
        )
        .order_by(Mission.id_mission.desc())  # type: ignore
    )
    return list(session.exec(statement).all())


def to_mission_public(mission: Mission) -> MissionPublic:
    """
    Convert a Mission to its discovery view.

    Parameters:
        mission: Mission instance; organization and template are lazy-loaded if needed.
    """
    return MissionPublic(
        **mission.model_dump(),
        organization_name=mission.organization.name,
        skills=[skill.name for skill in mission.template.skills],
    )


def to_mission_detail(session: Session, mission: Mission) -> MissionDetail:
    """Convert a Mission to the full view, including the accepted volunteer."""
    accepted = get_accepted_application(session, mission.id_mission)  # type: ignore
    return MissionDetail(
        **mission.model_dump(),
        organization_name=mission.organization.name,
        skills=[skill.name for skill in mission.template.skills],
        accepted_volunteer_id=accepted.id_volunteer if accepted else None,
    )
