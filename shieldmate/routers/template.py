"""Public template router for browsing mission templates."""

from typing import Annotated
from fastapi import APIRouter, Depends
from sqlmodel import Session

from shieldmate.database.database import get_session
from shieldmate.models.template import MissionTemplatePublic
from shieldmate.services import template as template_service

router = APIRouter(prefix="/templates", tags=["templates"])


@router.get("/", response_model=list[MissionTemplatePublic])
def get_all_templates(
    session: Annotated[Session, Depends(get_session)],
) -> list[MissionTemplatePublic]:
    """
    Retrieve all mission templates with their required skills.

    Public endpoint - no authentication required. Organizations pick a
    template when posting a mission.

    Templates are returned alphabetically by title.
    """
    templates = template_service.list_templates(session)
    return [MissionTemplatePublic.model_validate(t) for t in templates]
