"""Closure negotiation for missions.

Once a mission is in progress either party may propose closing it. The other
party then confirms (mission completed) or disputes (back to in progress). A
proposal nobody answers within CLOSURE_TIMEOUT is completed by the scheduled
sweep.

    in_progress --propose--> pending_closure --confirm--> completed
         ^                        |    \\
         +-------dispute----------+     +--sweep (after 72h)--> completed

Every transition is one conditional update on the mission row; when it
matches nothing, a concurrent request got there first and the caller gets
InvalidTransitionError. Notifications and emails are sent after the commit
and never undo a transition.
"""

from datetime import datetime, timedelta
from sqlmodel import Session
from sqlalchemy import update

from shieldmate.models.enums import ClosureParty, MissionStatus
from shieldmate.models.mission import Mission, utc_now
from shieldmate.models.notification import NotificationType
from shieldmate.services import notification as notification_service
from shieldmate.services.email import send_mission_emails
from shieldmate.services.participants import (
    get_party_user_ids,
    require_accepted_volunteer_id,
    require_party,
    resolve_party,
)
from shieldmate.services.user import get_users_by_ids
from shieldmate.services.utils import conditional_update, get_or_404
from shieldmate.core.telemetry import record_transition
from shieldmate.database.database import engine
from shieldmate.exceptions import InsufficientPermissionsError, InvalidTransitionError
from shieldmate.utils.logger import logger

CLOSURE_TIMEOUT = timedelta(days=3)


def _transition(
    session: Session,
    mission: Mission,
    expected_status: MissionStatus,
    values: dict,
    action: str,
) -> None:
    """Run the conditional update and commit, or roll back and refuse."""
    rows = conditional_update(
        session,
        Mission,
        Mission.id_mission,
        mission.id_mission,  # type: ignore
        expected_status,
        values,
    )
    if rows == 0:
        session.rollback()
        logger.warning(
            f"Cannot {action} on mission {mission.id_mission}: expected "
            f"'{expected_status.value}', found '{mission.status.value}'"
        )
        raise InvalidTransitionError(
            "Mission", mission.id_mission, action, mission.status.value  # type: ignore
        )
    session.commit()
    session.refresh(mission)


def _initiator_party(session: Session, mission: Mission) -> ClosureParty:
    """
    Side of the user who proposed the closure.

    An initiator that is no longer a participant (for example, removed from
    the organization) is treated as the organization.
    """
    if mission.closure_initiator_id is None:
        return ClosureParty.ORGANIZATION
    party = resolve_party(session, mission, mission.closure_initiator_id)
    return party or ClosureParty.ORGANIZATION


def _require_counterpart(
    session: Session, mission: Mission, user_id: int, action: str
) -> None:
    """
    Ensure the user answers for the side opposite to the closure initiator.

    Raises:
        InvalidTransitionError: If the mission is not pending closure.
        InsufficientPermissionsError: If the user is not a participant, or is on the initiator's side.
    """
    if mission.status != MissionStatus.PENDING_CLOSURE:
        raise InvalidTransitionError(
            "Mission", mission.id_mission, action, mission.status.value  # type: ignore
        )
    party = require_party(session, mission, user_id, action)
    if party != _initiator_party(session, mission).counterpart:
        raise InsufficientPermissionsError(
            f"{action}: the other party must answer a closure proposal"
        )


async def propose_closure(
    session: Session,
    mission_id: int,
    proposer_id: int,
    now: datetime | None = None,
) -> Mission:
    """
    Propose closing an in-progress mission.

    Args:
        session: Database session
        mission_id: Mission to close
        proposer_id: Accepted volunteer or organization member
        now: Proposal timestamp (UTC), defaults to the current time

    Returns:
        Mission: The mission, now `pending_closure`

    Raises:
        NotFoundError: If the mission does not exist
        InvalidTransitionError: If the mission is not in progress
        NoAcceptedVolunteerError: If nobody was accepted on the mission
        InsufficientPermissionsError: If the proposer is not a participant
    """
    now = now or utc_now()
    action = "propose closure"
    mission = get_or_404(session, Mission, mission_id)
    if mission.status != MissionStatus.IN_PROGRESS:
        raise InvalidTransitionError(
            "Mission", mission_id, action, mission.status.value
        )
    require_accepted_volunteer_id(session, mission)
    party = require_party(session, mission, proposer_id, action)

    _transition(
        session,
        mission,
        MissionStatus.IN_PROGRESS,
        {
            "status": MissionStatus.PENDING_CLOSURE,
            "closure_initiator_id": proposer_id,
            "closure_initiated_at": now,
            "updated_at": now,
        },
        action,
    )
    record_transition("propose_closure")
    logger.info(
        f"Closure of mission {mission_id} proposed by user {proposer_id} ({party.value})"
    )

    recipient_ids = get_party_user_ids(session, mission, party.counterpart)
    notification_service.notify(
        session,
        recipient_ids,
        NotificationType.CLOSURE_PROPOSED,
        f"The {party.value} marked '{mission.title}' as complete. "
        "Please confirm or dispute within 3 days.",
        mission_id=mission_id,
    )
    await send_mission_emails(
        "closure_initiated",
        get_users_by_ids(session, recipient_ids),
        {
            "mission_title": mission.title,
            "mission_id": mission_id,
            "initiator_type": party.value,
        },
    )
    return mission


def confirm_closure(
    session: Session,
    mission_id: int,
    confirmer_id: int,
    now: datetime | None = None,
) -> Mission:
    """
    Confirm a closure proposal; the mission is completed.

    Raises:
        NotFoundError: If the mission does not exist
        InsufficientPermissionsError: If the confirmer is not on the counterpart side
        InvalidTransitionError: If the mission is not pending closure
    """
    now = now or utc_now()
    action = "confirm closure"
    mission = get_or_404(session, Mission, mission_id)
    _require_counterpart(session, mission, confirmer_id, action)
    initiator_id = mission.closure_initiator_id

    _transition(
        session,
        mission,
        MissionStatus.PENDING_CLOSURE,
        {"status": MissionStatus.COMPLETED, "closed_at": now, "updated_at": now},
        action,
    )
    record_transition("confirm_closure")
    logger.info(f"Closure of mission {mission_id} confirmed by user {confirmer_id}")

    if initiator_id is not None:
        notification_service.notify(
            session,
            [initiator_id],
            NotificationType.CLOSURE_CONFIRMED,
            f"'{mission.title}' is completed. You can now leave a rating.",
            mission_id=mission_id,
        )
    return mission


def dispute_closure(
    session: Session,
    mission_id: int,
    disputer_id: int,
    now: datetime | None = None,
) -> Mission:
    """
    Refuse a closure proposal; the mission goes back to in progress.

    The initiator and initiation time are cleared so a later proposal starts
    a fresh 72-hour window.

    Raises:
        NotFoundError: If the mission does not exist
        InsufficientPermissionsError: If the disputer is not on the counterpart side
        InvalidTransitionError: If the mission is not pending closure
    """
    now = now or utc_now()
    action = "dispute closure"
    mission = get_or_404(session, Mission, mission_id)
    _require_counterpart(session, mission, disputer_id, action)
    initiator_id = mission.closure_initiator_id

    _transition(
        session,
        mission,
        MissionStatus.PENDING_CLOSURE,
        {
            "status": MissionStatus.IN_PROGRESS,
            "closure_initiator_id": None,
            "closure_initiated_at": None,
            "updated_at": now,
        },
        action,
    )
    record_transition("dispute_closure")
    logger.info(f"Closure of mission {mission_id} disputed by user {disputer_id}")

    if initiator_id is not None:
        notification_service.notify(
            session,
            [initiator_id],
            NotificationType.CLOSURE_DISPUTED,
            f"Your request to close '{mission.title}' was disputed. "
            "The mission is back in progress.",
            mission_id=mission_id,
        )
    return mission


async def run_enforcement_sweep(
    session: Session | None = None, now: datetime | None = None
) -> list[int]:
    """
    Complete every mission whose closure proposal went unanswered for CLOSURE_TIMEOUT.

    A single UPDATE guarded by `status = pending_closure` both selects and
    closes the missions, so a confirm or dispute racing with the sweep leaves
    exactly one winner. Safe to run any number of times.

    Args:
        session: Database session; a short-lived one is opened when omitted
        now: Reference time (UTC), defaults to the current time

    Returns:
        list[int]: IDs of the missions completed by this run
    """
    if session is None:
        with Session(engine) as own_session:
            return await run_enforcement_sweep(own_session, now)

    now = now or utc_now()
    cutoff = now - CLOSURE_TIMEOUT

    closed_ids = list(
        session.execute(
            update(Mission)
            .where(
                Mission.status == MissionStatus.PENDING_CLOSURE,  # type: ignore
                Mission.closure_initiated_at <= cutoff,  # type: ignore
            )
            .values(status=MissionStatus.COMPLETED, closed_at=now, updated_at=now)
            .returning(Mission.id_mission)
            .execution_options(synchronize_session=False)
        ).scalars()
    )
    session.commit()

    record_transition("auto_close", len(closed_ids))
    logger.info(f"Closure sweep completed {len(closed_ids)} mission(s)")

    for mission_id in closed_ids:
        await _notify_auto_completed(session, mission_id)
    return closed_ids


async def _notify_auto_completed(session: Session, mission_id: int) -> None:
    """Tell both parties a mission was auto-completed; never raises."""
    try:
        mission = get_or_404(session, Mission, mission_id)
        recipient_ids = get_party_user_ids(
            session, mission, ClosureParty.VOLUNTEER
        ) + get_party_user_ids(session, mission, ClosureParty.ORGANIZATION)
    except Exception:
        logger.exception(f"Failed to resolve recipients for auto-completed mission {mission_id}")
        return

    notification_service.notify(
        session,
        recipient_ids,
        NotificationType.MISSION_AUTO_COMPLETED,
        f"'{mission.title}' was completed automatically after 3 days without "
        "a response. You can now leave a rating.",
        mission_id=mission_id,
    )
    await send_mission_emails(
        "mission_auto_completed",
        get_users_by_ids(session, recipient_ids),
        {"mission_title": mission.title, "mission_id": mission_id},
    )
