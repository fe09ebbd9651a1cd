"""Tests for mission creation and listings."""

import pytest
from sqlmodel import Session

from shieldmate.models.application import Application
from shieldmate.models.enums import (
    ApplicationStatus,
    DifficultyLevel,
    MissionStatus,
    OrganizationStatus,
    UserRole,
)
from shieldmate.models.mission import MissionCreate
from shieldmate.models.organization import OrganizationCreate
from shieldmate.services import mission as mission_service
from shieldmate.services import organization as organization_service
from shieldmate.exceptions import InsufficientPermissionsError, NotFoundError


def _mission_in(template, **overrides) -> MissionCreate:
    data = {
        "title": "Set up MFA",
        "description": "Enable two-factor authentication on staff accounts",
        "id_template": template.id_template,
    }
    data.update(overrides)
    return MissionCreate(**data)


class TestCreateMission:
    def test_create_mission_copies_template_defaults(
        self, session: Session, organization, org_owner, template
    ):
        mission = mission_service.create_mission(
            session, _mission_in(template), org_owner.id_user
        )

        assert mission.id_mission is not None
        assert mission.id_org == organization.id_org
        assert mission.status == MissionStatus.OPEN
        assert mission.estimated_hours == 12
        assert mission.closure_initiator_id is None
        assert mission.closed_at is None

    def test_create_mission_keeps_explicit_values(
        self, session: Session, organization, team_member, template
    ):
        mission = mission_service.create_mission(
            session,
            _mission_in(
                template, estimated_hours=3, difficulty_level=DifficultyLevel.EXPERT
            ),
            team_member.id_user,
        )

        assert mission.estimated_hours == 3
        assert mission.difficulty_level == DifficultyLevel.EXPERT

    def test_pending_organization_cannot_post(
        self, session: Session, user_factory, template
    ):
        owner = user_factory(UserRole.ORGANIZATION_OWNER)
        organization_service.create_organization(
            session, OrganizationCreate(name="Unverified shelter"), owner.id_user
        )

        with pytest.raises(InsufficientPermissionsError):
            mission_service.create_mission(session, _mission_in(template), owner.id_user)

    def test_rejected_organization_cannot_post(
        self, session: Session, organization, org_owner, template
    ):
        organization_service.set_organization_status(
            session, organization.id_org, OrganizationStatus.REJECTED
        )
        with pytest.raises(InsufficientPermissionsError):
            mission_service.create_mission(
                session, _mission_in(template), org_owner.id_user
            )

    def test_volunteer_cannot_post(self, session: Session, volunteer, template):
        with pytest.raises(InsufficientPermissionsError):
            mission_service.create_mission(
                session, _mission_in(template), volunteer.id_user
            )

    def test_unknown_template(self, session: Session, organization, org_owner, template):
        with pytest.raises(NotFoundError):
            mission_service.create_mission(
                session, _mission_in(template, id_template=99999), org_owner.id_user
            )


class TestMissionListings:
    def test_only_open_missions_are_listed(
        self, session: Session, mission_factory, in_progress_mission
    ):
        visible = mission_factory("Still open")

        missions = mission_service.list_open_missions(session)

        assert [m.id_mission for m in missions] == [visible.id_mission]

    def test_open_missions_pagination(self, session: Session, mission_factory):
        created = [mission_factory(f"Mission {i}") for i in range(3)]

        page = mission_service.list_open_missions(session, offset=1, limit=1)

        assert [m.id_mission for m in page] == [created[1].id_mission]

    def test_list_organization_missions(
        self, session: Session, organization, mission_factory, in_progress_mission
    ):
        other = mission_factory("Second mission")

        missions = mission_service.list_organization_missions(session, organization.id_org)

        assert {m.id_mission for m in missions} == {
            in_progress_mission.id_mission,
            other.id_mission,
        }

    def test_list_volunteer_missions(
        self, session: Session, mission_factory, in_progress_mission, volunteer
    ):
        applied_only = mission_factory("Applied but pending")
        session.add(
            Application(
                id_mission=applied_only.id_mission,
                id_volunteer=volunteer.id_user,
                status=ApplicationStatus.PENDING,
            )
        )
        session.commit()

        missions = mission_service.list_volunteer_missions(session, volunteer.id_user)

        assert [m.id_mission for m in missions] == [in_progress_mission.id_mission]


class TestMissionViews:
    def test_to_mission_public(self, session: Session, open_mission):
        public = mission_service.to_mission_public(open_mission)

        assert public.organization_name == "Food Bank Network"
        assert public.skills == ["Network security"]
        assert public.status == MissionStatus.OPEN

    def test_to_mission_detail_includes_accepted_volunteer(
        self, session: Session, in_progress_mission, volunteer
    ):
        detail = mission_service.to_mission_detail(session, in_progress_mission)

        assert detail.accepted_volunteer_id == volunteer.id_user
        assert detail.status == MissionStatus.IN_PROGRESS

    def test_get_mission_or_404(self, session: Session):
        assert mission_service.get_mission(session, 99999) is None
        with pytest.raises(NotFoundError):
            mission_service.get_mission_or_404(session, 99999)


class TestMissionVisibility:
    def test_open_mission_is_visible_to_everybody(
        self, session: Session, open_mission, other_volunteer
    ):
        mission = mission_service.get_visible_mission(
            session, open_mission.id_mission, other_volunteer
        )
        assert mission.id_mission == open_mission.id_mission

    def test_started_mission_is_hidden_from_outsiders(
        self, session: Session, in_progress_mission, other_volunteer
    ):
        with pytest.raises(NotFoundError):
            mission_service.get_visible_mission(
                session, in_progress_mission.id_mission, other_volunteer
            )

    def test_started_mission_is_visible_to_parties(
        self, session: Session, in_progress_mission, volunteer, team_member, super_admin
    ):
        for user in (volunteer, team_member, super_admin):
            mission = mission_service.get_visible_mission(
                session, in_progress_mission.id_mission, user
            )
            assert mission.status == MissionStatus.IN_PROGRESS
