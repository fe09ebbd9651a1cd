"""Shared fixtures for benchmark tests."""

import uuid
import pytest
from sqlmodel import Session

from shieldmate.models.application import Application
from shieldmate.models.enums import ApplicationStatus, MissionStatus, UserRole


@pytest.fixture(name="started_mission_factory")
def started_mission_factory_fixture(session: Session, mission_factory, user_factory):
    """
    Create in-progress missions, each with its own accepted volunteer.

    Returns:
        Callable[[], tuple[Mission, User]]: factory returning the mission and its volunteer.
    """

    def create():
        volunteer = user_factory(UserRole.VOLUNTEER)
        mission = mission_factory(f"Bench mission {uuid.uuid4().hex[:8]}")
        session.add(
            Application(
                id_mission=mission.id_mission,
                id_volunteer=volunteer.id_user,
                status=ApplicationStatus.ACCEPTED,
            )
        )
        mission.status = MissionStatus.IN_PROGRESS
        session.add(mission)
        session.commit()
        return mission, volunteer

    return create
