"""Tests for the closure handshake and the timeout sweep."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch, AsyncMock
import pytest
from sqlmodel import Session

from shieldmate.models.application import Application
from shieldmate.models.enums import ApplicationStatus, MissionStatus
from shieldmate.models.mission import Mission
from shieldmate.models.notification import NotificationType
from shieldmate.services import closure as closure_service
from shieldmate.services import notification as notification_service
from shieldmate.exceptions import (
    InsufficientPermissionsError,
    InvalidTransitionError,
    NoAcceptedVolunteerError,
    NotFoundError,
)

T0 = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


def _naive(value: datetime) -> datetime:
    """SQLite hands datetimes back without tzinfo."""
    return value.replace(tzinfo=None)


def _types(session: Session, user_id: int) -> list[NotificationType]:
    return [
        n.notification_type
        for n in notification_service.get_user_notifications(session, user_id)
    ]


class TestProposeClosure:
    @pytest.mark.asyncio
    async def test_volunteer_proposes(
        self, session: Session, in_progress_mission, volunteer, org_owner, team_member
    ):
        mission = await closure_service.propose_closure(
            session, in_progress_mission.id_mission, volunteer.id_user, now=T0
        )

        assert mission.status == MissionStatus.PENDING_CLOSURE
        assert mission.closure_initiator_id == volunteer.id_user
        assert _naive(mission.closure_initiated_at) == _naive(T0)
        assert mission.closed_at is None

        # The whole organization is asked to answer
        assert _types(session, org_owner.id_user) == [NotificationType.CLOSURE_PROPOSED]
        assert _types(session, team_member.id_user) == [NotificationType.CLOSURE_PROPOSED]
        assert _types(session, volunteer.id_user) == []

    @pytest.mark.asyncio
    async def test_organization_member_proposes(
        self, session: Session, in_progress_mission, volunteer, team_member
    ):
        mission = await closure_service.propose_closure(
            session, in_progress_mission.id_mission, team_member.id_user, now=T0
        )

        assert mission.closure_initiator_id == team_member.id_user
        assert _types(session, volunteer.id_user) == [NotificationType.CLOSURE_PROPOSED]

    @pytest.mark.asyncio
    async def test_proposal_sends_review_emails(
        self, session: Session, in_progress_mission, volunteer, org_owner, team_member
    ):
        with patch(
            "shieldmate.services.closure.send_mission_emails", new_callable=AsyncMock
        ) as mock_emails:
            await closure_service.propose_closure(
                session, in_progress_mission.id_mission, volunteer.id_user, now=T0
            )

        template_name, recipients, context = mock_emails.await_args.args
        assert template_name == "closure_initiated"
        assert {u.id_user for u in recipients} == {org_owner.id_user, team_member.id_user}
        assert context["initiator_type"] == "volunteer"

    @pytest.mark.asyncio
    async def test_outsider_cannot_propose(
        self, session: Session, in_progress_mission, other_volunteer
    ):
        with pytest.raises(InsufficientPermissionsError):
            await closure_service.propose_closure(
                session, in_progress_mission.id_mission, other_volunteer.id_user
            )
        session.refresh(in_progress_mission)
        assert in_progress_mission.status == MissionStatus.IN_PROGRESS

    @pytest.mark.asyncio
    async def test_open_mission_is_refused(
        self, session: Session, open_mission, org_owner
    ):
        with pytest.raises(InvalidTransitionError) as exc_info:
            await closure_service.propose_closure(
                session, open_mission.id_mission, org_owner.id_user
            )
        assert exc_info.value.current_status == MissionStatus.OPEN.value

        session.refresh(open_mission)
        assert open_mission.status == MissionStatus.OPEN
        assert open_mission.closure_initiator_id is None

    @pytest.mark.asyncio
    async def test_in_progress_mission_without_volunteer(
        self, session: Session, mission_factory, org_owner
    ):
        mission = mission_factory("Orphan mission")
        mission.status = MissionStatus.IN_PROGRESS
        session.add(mission)
        session.commit()

        with pytest.raises(NoAcceptedVolunteerError):
            await closure_service.propose_closure(
                session, mission.id_mission, org_owner.id_user
            )

    @pytest.mark.asyncio
    async def test_second_proposal_is_refused(
        self, session: Session, in_progress_mission, volunteer, org_owner
    ):
        await closure_service.propose_closure(
            session, in_progress_mission.id_mission, volunteer.id_user, now=T0
        )
        with pytest.raises(InvalidTransitionError) as exc_info:
            await closure_service.propose_closure(
                session, in_progress_mission.id_mission, org_owner.id_user
            )
        assert exc_info.value.current_status == MissionStatus.PENDING_CLOSURE.value

        session.refresh(in_progress_mission)
        assert in_progress_mission.closure_initiator_id == volunteer.id_user

    @pytest.mark.asyncio
    async def test_propose_unknown_mission(self, session: Session, volunteer):
        with pytest.raises(NotFoundError):
            await closure_service.propose_closure(session, 99999, volunteer.id_user)


class TestConfirmClosure:
    @pytest.mark.asyncio
    async def test_happy_path(
        self, session: Session, in_progress_mission, volunteer, org_owner
    ):
        await closure_service.propose_closure(
            session, in_progress_mission.id_mission, volunteer.id_user, now=T0
        )
        confirmed_at = T0 + timedelta(hours=5)

        mission = closure_service.confirm_closure(
            session, in_progress_mission.id_mission, org_owner.id_user, now=confirmed_at
        )

        assert mission.status == MissionStatus.COMPLETED
        assert _naive(mission.closed_at) == _naive(confirmed_at)
        assert NotificationType.CLOSURE_CONFIRMED in _types(session, volunteer.id_user)

    @pytest.mark.asyncio
    async def test_any_member_confirms_for_the_organization(
        self, session: Session, in_progress_mission, volunteer, team_member
    ):
        await closure_service.propose_closure(
            session, in_progress_mission.id_mission, volunteer.id_user, now=T0
        )
        mission = closure_service.confirm_closure(
            session, in_progress_mission.id_mission, team_member.id_user
        )
        assert mission.status == MissionStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_initiator_cannot_confirm_own_proposal(
        self, session: Session, in_progress_mission, volunteer
    ):
        await closure_service.propose_closure(
            session, in_progress_mission.id_mission, volunteer.id_user, now=T0
        )
        with pytest.raises(InsufficientPermissionsError):
            closure_service.confirm_closure(
                session, in_progress_mission.id_mission, volunteer.id_user
            )
        session.refresh(in_progress_mission)
        assert in_progress_mission.status == MissionStatus.PENDING_CLOSURE

    @pytest.mark.asyncio
    async def test_initiator_side_cannot_confirm(
        self, session: Session, in_progress_mission, org_owner, team_member
    ):
        """A colleague of the initiator is on the same side."""
        await closure_service.propose_closure(
            session, in_progress_mission.id_mission, org_owner.id_user, now=T0
        )
        with pytest.raises(InsufficientPermissionsError):
            closure_service.confirm_closure(
                session, in_progress_mission.id_mission, team_member.id_user
            )

    def test_confirm_without_proposal(
        self, session: Session, in_progress_mission, org_owner
    ):
        with pytest.raises(InvalidTransitionError):
            closure_service.confirm_closure(
                session, in_progress_mission.id_mission, org_owner.id_user
            )

    @pytest.mark.asyncio
    async def test_confirm_twice(
        self, session: Session, in_progress_mission, volunteer, org_owner
    ):
        await closure_service.propose_closure(
            session, in_progress_mission.id_mission, volunteer.id_user, now=T0
        )
        closure_service.confirm_closure(
            session, in_progress_mission.id_mission, org_owner.id_user
        )
        with pytest.raises(InvalidTransitionError) as exc_info:
            closure_service.confirm_closure(
                session, in_progress_mission.id_mission, org_owner.id_user
            )
        assert exc_info.value.current_status == MissionStatus.COMPLETED.value


class TestDisputeClosure:
    @pytest.mark.asyncio
    async def test_dispute_path(
        self, session: Session, in_progress_mission, volunteer, org_owner
    ):
        await closure_service.propose_closure(
            session, in_progress_mission.id_mission, org_owner.id_user, now=T0
        )

        mission = closure_service.dispute_closure(
            session, in_progress_mission.id_mission, volunteer.id_user
        )

        assert mission.status == MissionStatus.IN_PROGRESS
        assert mission.closure_initiator_id is None
        assert mission.closure_initiated_at is None
        assert mission.closed_at is None
        assert NotificationType.CLOSURE_DISPUTED in _types(session, org_owner.id_user)

    @pytest.mark.asyncio
    async def test_dispute_resets_initiator_for_next_round(
        self, session: Session, in_progress_mission, volunteer, org_owner
    ):
        await closure_service.propose_closure(
            session, in_progress_mission.id_mission, org_owner.id_user, now=T0
        )
        closure_service.dispute_closure(
            session, in_progress_mission.id_mission, volunteer.id_user
        )

        # The volunteer may now propose, and the organization answers
        later = T0 + timedelta(days=1)
        mission = await closure_service.propose_closure(
            session, in_progress_mission.id_mission, volunteer.id_user, now=later
        )
        assert mission.closure_initiator_id == volunteer.id_user
        assert _naive(mission.closure_initiated_at) == _naive(later)

        mission = closure_service.confirm_closure(
            session, in_progress_mission.id_mission, org_owner.id_user
        )
        assert mission.status == MissionStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_initiator_cannot_dispute(
        self, session: Session, in_progress_mission, volunteer
    ):
        await closure_service.propose_closure(
            session, in_progress_mission.id_mission, volunteer.id_user, now=T0
        )
        with pytest.raises(InsufficientPermissionsError):
            closure_service.dispute_closure(
                session, in_progress_mission.id_mission, volunteer.id_user
            )

    def test_dispute_without_proposal(
        self, session: Session, in_progress_mission, volunteer
    ):
        with pytest.raises(InvalidTransitionError):
            closure_service.dispute_closure(
                session, in_progress_mission.id_mission, volunteer.id_user
            )


class TestEnforcementSweep:
    @pytest.mark.asyncio
    async def test_timeout_path(
        self, session: Session, in_progress_mission, volunteer, org_owner, team_member
    ):
        await closure_service.propose_closure(
            session, in_progress_mission.id_mission, volunteer.id_user, now=T0
        )
        sweep_time = T0 + timedelta(hours=73)

        closed = await closure_service.run_enforcement_sweep(session, now=sweep_time)

        assert closed == [in_progress_mission.id_mission]
        session.refresh(in_progress_mission)
        assert in_progress_mission.status == MissionStatus.COMPLETED
        assert _naive(in_progress_mission.closed_at) == _naive(sweep_time)
        for user in (volunteer, org_owner, team_member):
            assert NotificationType.MISSION_AUTO_COMPLETED in _types(session, user.id_user)

    @pytest.mark.asyncio
    async def test_proposal_inside_window_is_left_alone(
        self, session: Session, in_progress_mission, volunteer
    ):
        await closure_service.propose_closure(
            session, in_progress_mission.id_mission, volunteer.id_user, now=T0
        )

        closed = await closure_service.run_enforcement_sweep(
            session, now=T0 + timedelta(hours=71)
        )

        assert closed == []
        session.refresh(in_progress_mission)
        assert in_progress_mission.status == MissionStatus.PENDING_CLOSURE

    @pytest.mark.asyncio
    async def test_window_boundary_is_inclusive(
        self, session: Session, in_progress_mission, volunteer
    ):
        await closure_service.propose_closure(
            session, in_progress_mission.id_mission, volunteer.id_user, now=T0
        )
        closed = await closure_service.run_enforcement_sweep(
            session, now=T0 + closure_service.CLOSURE_TIMEOUT
        )
        assert closed == [in_progress_mission.id_mission]

    @pytest.mark.asyncio
    async def test_sweep_is_idempotent(
        self, session: Session, in_progress_mission, volunteer
    ):
        await closure_service.propose_closure(
            session, in_progress_mission.id_mission, volunteer.id_user, now=T0
        )
        sweep_time = T0 + timedelta(days=4)

        first = await closure_service.run_enforcement_sweep(session, now=sweep_time)
        session.refresh(in_progress_mission)
        closed_at = in_progress_mission.closed_at
        second = await closure_service.run_enforcement_sweep(
            session, now=sweep_time + timedelta(days=1)
        )

        assert first == [in_progress_mission.id_mission]
        assert second == []
        session.refresh(in_progress_mission)
        assert in_progress_mission.closed_at == closed_at

    @pytest.mark.asyncio
    async def test_sweep_ignores_other_statuses(
        self, session: Session, mission_factory, in_progress_mission
    ):
        still_open = mission_factory("Nobody applied yet")

        closed = await closure_service.run_enforcement_sweep(
            session, now=T0 + timedelta(days=30)
        )

        assert closed == []
        session.refresh(still_open)
        assert still_open.status == MissionStatus.OPEN

    @pytest.mark.asyncio
    async def test_sweep_closes_only_expired_missions(
        self, session: Session, mission_factory, volunteer, other_volunteer
    ):
        stale = mission_factory("Stale proposal")
        fresh = mission_factory("Fresh proposal")
        for mission, user in ((stale, volunteer), (fresh, other_volunteer)):
            session.add(
                Application(
                    id_mission=mission.id_mission,
                    id_volunteer=user.id_user,
                    status=ApplicationStatus.ACCEPTED,
                )
            )
            mission.status = MissionStatus.IN_PROGRESS
            session.add(mission)
        session.commit()

        await closure_service.propose_closure(
            session, stale.id_mission, volunteer.id_user, now=T0
        )
        await closure_service.propose_closure(
            session, fresh.id_mission, other_volunteer.id_user, now=T0 + timedelta(days=2)
        )

        closed = await closure_service.run_enforcement_sweep(
            session, now=T0 + timedelta(days=3, hours=1)
        )

        assert closed == [stale.id_mission]
        assert session.get(Mission, fresh.id_mission).status == MissionStatus.PENDING_CLOSURE

    @pytest.mark.asyncio
    async def test_confirm_after_sweep_is_refused(
        self, session: Session, in_progress_mission, volunteer, org_owner
    ):
        """The sweep and a late confirm race: exactly one of them wins."""
        await closure_service.propose_closure(
            session, in_progress_mission.id_mission, volunteer.id_user, now=T0
        )
        await closure_service.run_enforcement_sweep(session, now=T0 + timedelta(days=3))

        with pytest.raises(InvalidTransitionError):
            closure_service.confirm_closure(
                session, in_progress_mission.id_mission, org_owner.id_user
            )

    @pytest.mark.asyncio
    async def test_notification_failure_does_not_undo_sweep(
        self, session: Session, in_progress_mission, volunteer
    ):
        await closure_service.propose_closure(
            session, in_progress_mission.id_mission, volunteer.id_user, now=T0
        )

        with patch(
            "shieldmate.services.notification.create_notification",
            side_effect=RuntimeError("notification store down"),
        ):
            closed = await closure_service.run_enforcement_sweep(
                session, now=T0 + timedelta(days=4)
            )

        assert closed == [in_progress_mission.id_mission]
        session.refresh(in_progress_mission)
        assert in_progress_mission.status == MissionStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_sweep_records_metric(
        self, session: Session, in_progress_mission, volunteer
    ):
        await closure_service.propose_closure(
            session, in_progress_mission.id_mission, volunteer.id_user, now=T0
        )
        with patch("shieldmate.services.closure.record_transition") as mock_record:
            await closure_service.run_enforcement_sweep(
                session, now=T0 + timedelta(days=4)
            )
        mock_record.assert_called_once_with("auto_close", 1)
