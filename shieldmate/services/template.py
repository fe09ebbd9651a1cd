"""Skill and mission template service."""

from sqlmodel import Session, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from shieldmate.models.template import (
    MissionTemplate,
    MissionTemplateCreate,
    Skill,
    SkillCreate,
)
from shieldmate.exceptions import AlreadyExistsError, NotFoundError


def create_skill(session: Session, skill_in: SkillCreate) -> Skill:
    """
    Create a skill.

    Raises:
        AlreadyExistsError: If a skill with the same name exists.
    """
    skill = Skill.model_validate(skill_in)
    session.add(skill)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise AlreadyExistsError("Skill", "name", skill_in.name)
    session.refresh(skill)
    return skill


def create_template(
    session: Session, template_in: MissionTemplateCreate
) -> MissionTemplate:
    """
    Create a mission template with its required skills.

    Raises:
        NotFoundError: If any skill ID does not exist.
    """
    skills = []
    for skill_id in template_in.skill_ids:
        skill = session.get(Skill, skill_id)
        if not skill:
            raise NotFoundError("Skill", skill_id)
        skills.append(skill)

    template = MissionTemplate.model_validate(
        template_in.model_dump(exclude={"skill_ids"})
    )
    template.skills = skills
    session.add(template)
    session.commit()
    session.refresh(template)
    return template


def get_template(session: Session, template_id: int) -> MissionTemplate | None:
    return session.get(MissionTemplate, template_id)


def list_templates(session: Session) -> list[MissionTemplate]:
    statement = (
        select(MissionTemplate)
        .options(selectinload(MissionTemplate.skills))  # type: ignore
        .order_by(MissionTemplate.title)
    )
    return list(session.exec(statement).all())
