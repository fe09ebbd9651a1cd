from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from shieldmate.database.database import get_session
from shieldmate.core.dependencies import get_current_super_admin
from shieldmate.models.organization import OrganizationPublic, OrganizationStatusUpdate
from shieldmate.models.template import (
    MissionTemplateCreate,
    MissionTemplatePublic,
    SkillCreate,
    SkillPublic,
)
from shieldmate.services import closure as closure_service
from shieldmate.services import organization as organization_service
from shieldmate.services import template as template_service
from shieldmate.utils.logger import logger

router = APIRouter(
    prefix="/internal/admin",
    tags=["Internal Admin"],
    include_in_schema=False,
    dependencies=[Depends(get_current_super_admin)],
)


@router.post("/organizations/{org_id}/status", response_model=OrganizationPublic)
def set_organization_status(
    org_id: int,
    status_in: OrganizationStatusUpdate,
    session: Annotated[Session, Depends(get_session)],
):
    """Record the verification outcome of an organization."""
    return organization_service.set_organization_status(
        session, org_id, status_in.status
    )


@router.post(
    "/skills", response_model=SkillPublic, status_code=status.HTTP_201_CREATED
)
def create_skill(
    skill_in: SkillCreate,
    session: Annotated[Session, Depends(get_session)],
):
    return template_service.create_skill(session, skill_in)


@router.post(
    "/templates",
    response_model=MissionTemplatePublic,
    status_code=status.HTTP_201_CREATED,
)
def create_template(
    template_in: MissionTemplateCreate,
    session: Annotated[Session, Depends(get_session)],
):
    template = template_service.create_template(session, template_in)
    return MissionTemplatePublic.model_validate(template)


@router.post("/missions/enforce-closure", response_model=dict)
async def enforce_mission_closure(
    session: Annotated[Session, Depends(get_session)],
):
    """
    Run the closure sweep now instead of waiting for the daily job.

    Returns the IDs of the missions completed by this run.
    """
    closed_ids = await closure_service.run_enforcement_sweep(session)
    logger.info(f"Manual closure sweep completed missions {closed_ids}")
    return {"closed_count": len(closed_ids), "mission_ids": closed_ids}
