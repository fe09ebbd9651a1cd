"""Performance benchmarks for the closure handshake and sweep."""

import asyncio
from datetime import datetime, timedelta, timezone
from pytest_codspeed import BenchmarkFixture
from sqlmodel import Session

from shieldmate.services import closure as closure_service

T0 = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


def test_propose_dispute_cycle_performance(
    benchmark: BenchmarkFixture, session: Session, started_mission_factory, org_owner
):
    """Benchmark one closure round that ends in a dispute (repeatable)."""
    mission, volunteer = started_mission_factory()

    @benchmark
    def propose_and_dispute():
        asyncio.run(
            closure_service.propose_closure(
                session, mission.id_mission, volunteer.id_user, now=T0
            )
        )
        return closure_service.dispute_closure(
            session, mission.id_mission, org_owner.id_user
        )


def test_sweep_scan_performance(
    benchmark: BenchmarkFixture, session: Session, started_mission_factory
):
    """Benchmark a sweep over proposals that are all still inside the window."""
    for _ in range(20):
        mission, volunteer = started_mission_factory()
        asyncio.run(
            closure_service.propose_closure(
                session, mission.id_mission, volunteer.id_user, now=T0
            )
        )

    @benchmark
    def sweep():
        closed = asyncio.run(
            closure_service.run_enforcement_sweep(session, now=T0 + timedelta(hours=1))
        )
        assert closed == []
        return closed
