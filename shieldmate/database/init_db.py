from sqlmodel import Session, select
from loguru import logger
from sqlalchemy.exc import IntegrityError

from shieldmate.core.config import get_settings
from shieldmate.core.security import get_password_hash
from shieldmate.models.enums import DifficultyLevel, UserRole
from shieldmate.models.template import MissionTemplate, Skill
from shieldmate.models.user import User
from shieldmate.exceptions import AlreadyExistsError

STARTER_SKILLS = [
    "Web development",
    "Database administration",
    "Network security",
    "Cloud infrastructure",
    "Data analysis",
    "UX design",
    "IT support",
    "Digital marketing",
]

STARTER_TEMPLATES = [
    {
        "title": "Website refresh",
        "description": "Modernise the organization's website and make it accessible.",
        "estimated_hours": 20,
        "difficulty_level": DifficultyLevel.INTERMEDIATE,
        "skills": ["Web development", "UX design"],
    },
    {
        "title": "Security audit",
        "description": "Review accounts, backups and network exposure; write a remediation plan.",
        "estimated_hours": 12,
        "difficulty_level": DifficultyLevel.ADVANCED,
        "skills": ["Network security", "IT support"],
    },
    {
        "title": "Donor database cleanup",
        "description": "Deduplicate and normalise donor records, set up regular exports.",
        "estimated_hours": 8,
        "difficulty_level": DifficultyLevel.BEGINNER,
        "skills": ["Database administration", "Data analysis"],
    },
]


def init_db(session: Session) -> None:
    """
    Ensure the configured super admin exists, then seed the starter catalogue.

    If FIRST_SUPERUSER_EMAIL, FIRST_SUPERUSER_USERNAME, or FIRST_SUPERUSER_PASSWORD
    is not set, the super admin is skipped with a warning.

    Raises:
        AlreadyExistsError: If a unique constraint prevents creating the super admin.
    """
    settings = get_settings()
    if (
        not settings.FIRST_SUPERUSER_EMAIL
        or not settings.FIRST_SUPERUSER_PASSWORD.get_secret_value()
        or not settings.FIRST_SUPERUSER_USERNAME
    ):
        logger.warning("First superuser not configured. Skipping creation.")
    else:
        superuser = session.exec(
            select(User).where(
                (User.username == settings.FIRST_SUPERUSER_USERNAME)
                | (User.email == settings.FIRST_SUPERUSER_EMAIL)
            )
        ).first()

        if not superuser:
            superuser = User(
                email=settings.FIRST_SUPERUSER_EMAIL,
                username=settings.FIRST_SUPERUSER_USERNAME,
                hashed_password=get_password_hash(
                    settings.FIRST_SUPERUSER_PASSWORD.get_secret_value()
                ),
                first_name="Initial",
                last_name="Admin",
                role=UserRole.SUPER_ADMIN,
            )
            try:
                session.add(superuser)
                session.commit()
                logger.info("First superuser created successfully")
            except IntegrityError:
                session.rollback()
                logger.error("First superuser already exists (constraint violation)")
                raise AlreadyExistsError(
                    "User", "username or email", settings.FIRST_SUPERUSER_USERNAME
                )
        else:
            logger.info("First superuser already exists")

    init_catalogue(session)


def init_catalogue(session: Session) -> None:
    """
    Ensure the starter skills and mission templates exist.

    Idempotent: existing skills and templates (matched by name/title) are left untouched.
    """
    skills: dict[str, Skill] = {}
    for name in STARTER_SKILLS:
        skill = session.exec(select(Skill).where(Skill.name == name)).first()
        if not skill:
            skill = Skill(name=name)
            session.add(skill)
        skills[name] = skill

    created_count = 0
    for data in STARTER_TEMPLATES:
        existing = session.exec(
            select(MissionTemplate).where(MissionTemplate.title == data["title"])
        ).first()
        if existing:
            continue
        template = MissionTemplate(
            title=data["title"],
            description=data["description"],
            estimated_hours=data["estimated_hours"],
            difficulty_level=data["difficulty_level"],
        )
        template.skills = [skills[name] for name in data["skills"]]
        session.add(template)
        created_count += 1

    session.commit()
    if created_count > 0:
        logger.info(f"Created {created_count} new mission templates")
    else:
        logger.info("All mission templates already exist")
