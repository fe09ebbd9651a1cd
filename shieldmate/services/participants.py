"""Who takes part in a mission, and on which side.

A mission has two parties: the volunteer holding its sole accepted
application, and the organization that posted it (any of its members acts on
the organization's behalf). The lifecycle services use these helpers as an
opaque capability check.
"""

from sqlmodel import Session, select

from shieldmate.models.application import Application
from shieldmate.models.enums import ApplicationStatus, ClosureParty
from shieldmate.models.mission import Mission
from shieldmate.models.organization import OrganizationMember
from shieldmate.exceptions import InsufficientPermissionsError, NoAcceptedVolunteerError
from shieldmate.utils.validation import ensure_id


def get_accepted_application(session: Session, mission_id: int) -> Application | None:
    """Return the accepted application of the mission, or None if nobody was accepted yet."""
    return session.exec(
        select(Application).where(
            Application.id_mission == mission_id,
            Application.status == ApplicationStatus.ACCEPTED,
        )
    ).first()


def require_accepted_volunteer_id(session: Session, mission: Mission) -> int:
    """
    Return the user id of the mission's accepted volunteer.

    Raises:
        NoAcceptedVolunteerError: If the mission has no accepted application.
    """
    mission_id = ensure_id(mission.id_mission, "Mission")
    application = get_accepted_application(session, mission_id)
    if application is None:
        raise NoAcceptedVolunteerError(mission_id)
    return application.id_volunteer


def is_organization_member(session: Session, org_id: int, user_id: int) -> bool:
    return (
        session.exec(
            select(OrganizationMember.id_member).where(
                OrganizationMember.id_org == org_id,
                OrganizationMember.id_user == user_id,
            )
        ).first()
        is not None
    )


def get_organization_member_ids(session: Session, org_id: int) -> list[int]:
    """User ids of every member of the organization, owners first."""
    members = session.exec(
        select(OrganizationMember)
        .where(OrganizationMember.id_org == org_id)
        .order_by(OrganizationMember.id_member)  # type: ignore
    ).all()
    return [m.id_user for m in members]


def resolve_party(
    session: Session, mission: Mission, user_id: int
) -> ClosureParty | None:
    """
    Tell which side of the mission the user is on.

    Returns:
        ClosureParty.VOLUNTEER for the accepted volunteer, ClosureParty.ORGANIZATION
        for any member of the owning organization, None for everybody else.
    """
    mission_id = ensure_id(mission.id_mission, "Mission")
    accepted = get_accepted_application(session, mission_id)
    if accepted is not None and accepted.id_volunteer == user_id:
        return ClosureParty.VOLUNTEER
    if is_organization_member(session, mission.id_org, user_id):
        return ClosureParty.ORGANIZATION
    return None


def require_party(
    session: Session, mission: Mission, user_id: int, action: str
) -> ClosureParty:
    """
    Like resolve_party, but refuse non-participants.

    Raises:
        InsufficientPermissionsError: If the user is neither the accepted volunteer nor an org member.
    """
    party = resolve_party(session, mission, user_id)
    if party is None:
        raise InsufficientPermissionsError(action)
    return party


def get_party_user_ids(
    session: Session, mission: Mission, party: ClosureParty
) -> list[int]:
    """
    Users who speak for `party` on this mission.

    Raises:
        NoAcceptedVolunteerError: If the volunteer side is requested but nobody was accepted.
    """
    if party is ClosureParty.VOLUNTEER:
        return [require_accepted_volunteer_id(session, mission)]
    return get_organization_member_ids(session, mission.id_org)
