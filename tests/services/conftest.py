"""Shared fixtures for service tests."""

import pytest
from sqlmodel import Session

from shieldmate.models.enums import MissionStatus
from shieldmate.models.mission import Mission, utc_now


# Session, users and missions are inherited from root conftest.py


@pytest.fixture(name="completed_mission")
def completed_mission_fixture(session: Session, in_progress_mission: Mission) -> Mission:
    """Mission whose closure was already agreed on."""
    in_progress_mission.status = MissionStatus.COMPLETED
    in_progress_mission.closed_at = utc_now()
    session.add(in_progress_mission)
    session.commit()
    session.refresh(in_progress_mission)
    return in_progress_mission
