"""Import every table model so SQLModel.metadata is complete for create_all and Alembic."""

from shieldmate.models.user import User
from shieldmate.models.organization import Organization, OrganizationMember
from shieldmate.models.template import Skill, MissionTemplate, MissionTemplateSkill
from shieldmate.models.mission import Mission
from shieldmate.models.application import Application
from shieldmate.models.rating import Rating
from shieldmate.models.notification import Notification

__all__ = [
    "User",
    "Organization",
    "OrganizationMember",
    "Skill",
    "MissionTemplate",
    "MissionTemplateSkill",
    "Mission",
    "Application",
    "Rating",
    "Notification",
]
