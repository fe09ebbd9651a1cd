"""Mission templates and the skills they require."""

from typing import TYPE_CHECKING
from sqlmodel import SQLModel, Field, Relationship
from .enums import DifficultyLevel

if TYPE_CHECKING:
    from shieldmate.models.mission import Mission


class MissionTemplateSkill(SQLModel, table=True):
    __tablename__ = "mission_template_skill"

    id_template: int = Field(
        foreign_key="mission_template.id_template", primary_key=True
    )
    id_skill: int = Field(foreign_key="skill.id_skill", primary_key=True)


class SkillBase(SQLModel):
    name: str = Field(unique=True, index=True, max_length=80)


class Skill(SkillBase, table=True):
    id_skill: int | None = Field(default=None, primary_key=True)
    templates: list["MissionTemplate"] = Relationship(
        back_populates="skills", link_model=MissionTemplateSkill
    )


class SkillCreate(SkillBase):
    pass


class SkillPublic(SkillBase):
    id_skill: int


class MissionTemplateBase(SQLModel):
    title: str = Field(max_length=150)
    description: str = Field(max_length=3000)
    estimated_hours: int | None = Field(default=None, ge=1)
    difficulty_level: DifficultyLevel | None = None


class MissionTemplate(MissionTemplateBase, table=True):
    __tablename__ = "mission_template"

    id_template: int | None = Field(default=None, primary_key=True)
    skills: list["Skill"] = Relationship(
        back_populates="templates", link_model=MissionTemplateSkill
    )
    missions: list["Mission"] = Relationship(back_populates="template")


class MissionTemplateCreate(MissionTemplateBase):
    skill_ids: list[int] = Field(default_factory=list)


class MissionTemplatePublic(MissionTemplateBase):
    id_template: int
    skills: list[SkillPublic] = []
