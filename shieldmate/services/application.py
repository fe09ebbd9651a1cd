"""Application service: volunteers apply to missions, organizations decide.

Accepting an application is the only way a mission leaves `open`. Every status
change goes through a conditional update so that two concurrent decisions on
the same mission cannot both win.
"""

from datetime import datetime
from sqlmodel import Session, select
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from shieldmate.models.application import Application
from shieldmate.models.enums import (
    ApplicationDecision,
    ApplicationStatus,
    MissionStatus,
    UserRole,
)
from shieldmate.models.mission import Mission, utc_now
from shieldmate.models.notification import NotificationType
from shieldmate.models.user import User
from shieldmate.services import notification as notification_service
from shieldmate.services.email import send_mission_emails
from shieldmate.services.participants import (
    get_organization_member_ids,
    is_organization_member,
)
from shieldmate.services.user import get_users_by_ids
from shieldmate.services.utils import conditional_update, get_or_404
from shieldmate.core.telemetry import record_transition
from shieldmate.exceptions import (
    DuplicateApplicationError,
    InsufficientPermissionsError,
    InvalidTransitionError,
)
from shieldmate.utils.logger import logger


def get_application(session: Session, application_id: int) -> Application | None:
    return session.get(Application, application_id)


def _find_application(
    session: Session, mission_id: int, volunteer_id: int
) -> Application | None:
    return session.exec(
        select(Application).where(
            Application.id_mission == mission_id,
            Application.id_volunteer == volunteer_id,
        )
    ).first()


async def submit_application(
    session: Session,
    mission_id: int,
    volunteer_id: int,
    message: str | None = None,
) -> Application:
    """
    Apply to an open mission.

    Has no effect on the mission status. The organization's members are
    notified and emailed after the application is stored.

    Args:
        session: Database session
        mission_id: Mission to apply to
        volunteer_id: Applying user
        message: Cover message shown to the organization

    Returns:
        Application: The new `pending` application

    Raises:
        NotFoundError: If the user or the mission does not exist
        InsufficientPermissionsError: If the user is not a volunteer
        InvalidTransitionError: If the mission is no longer open
        DuplicateApplicationError: If the volunteer already applied
    """
    volunteer = get_or_404(session, User, volunteer_id)
    if volunteer.role != UserRole.VOLUNTEER:
        raise InsufficientPermissionsError("apply to missions")

    mission = get_or_404(session, Mission, mission_id)
    if mission.status != MissionStatus.OPEN:
        raise InvalidTransitionError(
            "Mission", mission_id, "apply", mission.status.value
        )

    if _find_application(session, mission_id, volunteer_id):
        raise DuplicateApplicationError(mission_id, volunteer_id)

    application = Application(
        id_mission=mission_id,
        id_volunteer=volunteer_id,
        application_message=message,
    )
    session.add(application)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise DuplicateApplicationError(mission_id, volunteer_id)
    session.refresh(application)

    logger.info(
        f"Application {application.id_application} submitted by user "
        f"{volunteer_id} for mission {mission_id}"
    )

    member_ids = get_organization_member_ids(session, mission.id_org)
    notification_service.notify(
        session,
        member_ids,
        NotificationType.APPLICATION_RECEIVED,
        f"{volunteer.display_name} applied to your mission '{mission.title}'.",
        mission_id=mission_id,
    )
    await send_mission_emails(
        "application_received",
        get_users_by_ids(session, member_ids),
        {
            "mission_title": mission.title,
            "mission_id": mission_id,
            "volunteer_name": volunteer.display_name,
        },
    )
    return application


def _refuse(
    session: Session, resource: str, record: Mission | Application, action: str
) -> InvalidTransitionError:
    """Roll back, then build the error with the status that won the race."""
    session.rollback()
    identifier = (
        record.id_mission if isinstance(record, Mission) else record.id_application
    )
    logger.warning(
        f"Lost race on {resource} {identifier} while trying to {action}; "
        f"status is now '{record.status.value}'"
    )
    return InvalidTransitionError(resource, identifier, action, record.status.value)  # type: ignore


async def decide_application(
    session: Session,
    application_id: int,
    decision: ApplicationDecision,
    decider_id: int,
    now: datetime | None = None,
) -> Application:
    """
    Accept or reject a pending application on behalf of the organization.

    Accepting moves the mission `open -> in_progress`, marks the application
    `accepted` and rejects every other pending application of the mission,
    all in one transaction. Notifications and emails follow the commit.

    Args:
        session: Database session
        application_id: Application to decide
        decision: accept or reject
        decider_id: Acting user, must be a member of the owning organization
        now: Decision timestamp (UTC), defaults to the current time

    Returns:
        Application: The decided application

    Raises:
        NotFoundError: If the application does not exist
        InsufficientPermissionsError: If the decider is not an organization member
        InvalidTransitionError: If the application or the mission changed status first
    """
    now = now or utc_now()
    application = get_or_404(session, Application, application_id)
    mission = get_or_404(session, Mission, application.id_mission)

    if not is_organization_member(session, mission.id_org, decider_id):
        raise InsufficientPermissionsError("decide on applications for this mission")

    action = f"{decision.value} application"
    if application.status != ApplicationStatus.PENDING:
        raise InvalidTransitionError(
            "Application", application_id, action, application.status.value
        )

    if decision == ApplicationDecision.REJECT:
        rows = conditional_update(
            session,
            Application,
            Application.id_application,
            application_id,
            ApplicationStatus.PENDING,
            {"status": ApplicationStatus.REJECTED, "decided_at": now},
        )
        if rows == 0:
            raise _refuse(session, "Application", application, action)
        session.commit()
        session.refresh(application)
        record_transition("reject_application")
        logger.info(f"Application {application_id} rejected by user {decider_id}")

        notification_service.notify(
            session,
            [application.id_volunteer],
            NotificationType.APPLICATION_REJECTED,
            f"Your application to '{mission.title}' was not accepted.",
            mission_id=mission.id_mission,
        )
        return application

    mission_id = application.id_mission
    rows = conditional_update(
        session,
        Mission,
        Mission.id_mission,
        mission_id,
        MissionStatus.OPEN,
        {"status": MissionStatus.IN_PROGRESS, "updated_at": now},
    )
    if rows == 0:
        raise _refuse(session, "Mission", mission, action)

    rows = conditional_update(
        session,
        Application,
        Application.id_application,
        application_id,
        ApplicationStatus.PENDING,
        {"status": ApplicationStatus.ACCEPTED, "decided_at": now},
    )
    if rows == 0:
        raise _refuse(session, "Application", application, action)

    rejected_volunteer_ids = list(
        session.execute(
            update(Application)
            .where(
                Application.id_mission == mission_id,  # type: ignore
                Application.id_application != application_id,  # type: ignore
                Application.status == ApplicationStatus.PENDING,  # type: ignore
            )
            .values(status=ApplicationStatus.REJECTED, decided_at=now)
            .returning(Application.id_volunteer)
            .execution_options(synchronize_session=False)
        ).scalars()
    )
    session.commit()
    session.refresh(application)
    session.refresh(mission)

    record_transition("accept_application")
    record_transition("reject_application", len(rejected_volunteer_ids))
    logger.info(
        f"Application {application_id} accepted by user {decider_id}; mission "
        f"{mission_id} is in progress, {len(rejected_volunteer_ids)} sibling(s) rejected"
    )

    notification_service.notify(
        session,
        [application.id_volunteer],
        NotificationType.APPLICATION_ACCEPTED,
        f"Your application to '{mission.title}' was accepted.",
        mission_id=mission_id,
    )
    notification_service.notify(
        session,
        rejected_volunteer_ids,
        NotificationType.APPLICATION_REJECTED,
        f"Another volunteer was selected for '{mission.title}'.",
        mission_id=mission_id,
    )
    await send_mission_emails(
        "application_accepted",
        get_users_by_ids(session, [application.id_volunteer]),
        {"mission_title": mission.title, "mission_id": mission_id},
    )
    return application


def list_mission_applications(
    session: Session,
    mission_id: int,
    requester_id: int,
    status: ApplicationStatus | None = None,
) -> list[Application]:
    """
    List the applications received by a mission.

    Raises:
        NotFoundError: If the mission does not exist
        InsufficientPermissionsError: If the requester is not an organization member
    """
    mission = get_or_404(session, Mission, mission_id)
    if not is_organization_member(session, mission.id_org, requester_id):
        raise InsufficientPermissionsError("view applications for this mission")

    statement = select(Application).where(Application.id_mission == mission_id)
    if status is not None:
        statement = statement.where(Application.status == status)
    statement = statement.order_by(Application.id_application)  # type: ignore
    return list(session.exec(statement).all())


def list_volunteer_applications(
    session: Session, volunteer_id: int
) -> list[Application]:
    """All applications submitted by a volunteer, newest first."""
    statement = (
        select(Application)
        .where(Application.id_volunteer == volunteer_id)
        .order_by(Application.id_application.desc())  # type: ignore
    )
    return list(session.exec(statement).all())
