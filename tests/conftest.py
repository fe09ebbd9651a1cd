import os

# The engine is created at import time from these settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only-min-32-chars")

import uuid  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from shieldmate.core.config import Settings  # noqa: E402
from shieldmate.core.security import create_access_token  # noqa: E402
from shieldmate.database.database import get_session  # noqa: E402
from shieldmate.main import app  # noqa: E402
from shieldmate.models.application import Application  # noqa: E402
from shieldmate.models.enums import (  # noqa: E402
    ApplicationStatus,
    MemberRole,
    MissionStatus,
    OrganizationStatus,
    UserRole,
)
from shieldmate.models.mission import Mission, MissionCreate  # noqa: E402
from shieldmate.models.organization import Organization, OrganizationCreate  # noqa: E402
from shieldmate.models.template import (  # noqa: E402
    MissionTemplate,
    MissionTemplateCreate,
    SkillCreate,
)
from shieldmate.models.user import User, UserCreate  # noqa: E402
from shieldmate.services import mission as mission_service  # noqa: E402
from shieldmate.services import organization as organization_service  # noqa: E402
from shieldmate.services import template as template_service  # noqa: E402
from shieldmate.services import user as user_service  # noqa: E402

TEST_PASSWORD = "Password123"


@pytest.fixture(scope="function")
def test_settings():
    """Provide test settings with mock values."""
    return Settings(
        DATABASE_URL="sqlite://",
        SECRET_KEY="test-secret-key-for-testing-only-min-32-chars",
        ALGORITHM="HS256",
        ACCESS_TOKEN_EXPIRE_MINUTES=30,
        REFRESH_TOKEN_EXPIRE_DAYS=7,
        BACKEND_CORS_ORIGINS="",
    )


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite engine shared by every connection of a test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """TestClient whose requests share the test session."""

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    # No lifespan: tables already exist on the test engine
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="user_factory")
def user_factory_fixture(session: Session):
    """
    Create users with unique usernames.

    Returns:
        Callable[..., User]: factory taking `role` and optional name parts.
    """

    def create(
        role: UserRole = UserRole.VOLUNTEER,
        first_name: str = "Test",
        last_name: str = "User",
    ) -> User:
        unique = uuid.uuid4().hex[:8]
        return user_service.create_user(
            session,
            UserCreate(
                username=f"{role.value}_{unique}",
                email=f"{role.value}_{unique}@example.com",
                first_name=first_name,
                last_name=last_name,
                password=TEST_PASSWORD,
                role=role,
            ),
        )

    return create


@pytest.fixture(name="auth_headers")
def auth_headers_fixture():
    """Build bearer headers for a user."""

    def build(user: User) -> dict[str, str]:
        token = create_access_token(data={"sub": user.username})
        return {"Authorization": f"Bearer {token}"}

    return build


@pytest.fixture(name="volunteer")
def volunteer_fixture(user_factory) -> User:
    return user_factory(UserRole.VOLUNTEER, first_name="Vera", last_name="Volunteer")


@pytest.fixture(name="other_volunteer")
def other_volunteer_fixture(user_factory) -> User:
    return user_factory(UserRole.VOLUNTEER, first_name="Victor", last_name="Volunteer")


@pytest.fixture(name="org_owner")
def org_owner_fixture(user_factory) -> User:
    return user_factory(UserRole.ORGANIZATION_OWNER, first_name="Olga", last_name="Owner")


@pytest.fixture(name="team_member")
def team_member_fixture(user_factory) -> User:
    return user_factory(UserRole.TEAM_MEMBER, first_name="Tom", last_name="Member")


@pytest.fixture(name="super_admin")
def super_admin_fixture(user_factory) -> User:
    return user_factory(UserRole.SUPER_ADMIN, first_name="Sam", last_name="Admin")


@pytest.fixture(name="organization")
def organization_fixture(
    session: Session, org_owner: User, team_member: User
) -> Organization:
    """Approved organization with an owner and one team member."""
    organization = organization_service.create_organization(
        session,
        OrganizationCreate(name="Food Bank Network", contact_email="it@foodbank.org"),
        org_owner.id_user,
    )
    organization_service.add_member(
        session,
        organization.id_org,
        team_member.id_user,
        requested_by=org_owner.id_user,
        role=MemberRole.TEAM_MEMBER,
    )
    return organization_service.set_organization_status(
        session, organization.id_org, OrganizationStatus.APPROVED
    )


@pytest.fixture(name="template")
def template_fixture(session: Session) -> MissionTemplate:
    skill = template_service.create_skill(session, SkillCreate(name="Network security"))
    return template_service.create_template(
        session,
        MissionTemplateCreate(
            title="Security audit",
            description="Review the organization's accounts and backups",
            estimated_hours=12,
            skill_ids=[skill.id_skill],
        ),
    )


@pytest.fixture(name="mission_factory")
def mission_factory_fixture(
    session: Session, organization: Organization, org_owner: User, template
):
    """Create `open` missions owned by the approved organization."""

    def create(title: str = "Audit our office network") -> Mission:
        return mission_service.create_mission(
            session,
            MissionCreate(
                title=title,
                description="Check the router and Wi-Fi configuration",
                id_template=template.id_template,
            ),
            org_owner.id_user,
        )

    return create


@pytest.fixture(name="open_mission")
def open_mission_fixture(mission_factory) -> Mission:
    return mission_factory()


@pytest.fixture(name="in_progress_mission")
def in_progress_mission_fixture(
    session: Session, open_mission: Mission, volunteer: User
) -> Mission:
    """Mission with an accepted volunteer, set up directly in the database."""
    session.add(
        Application(
            id_mission=open_mission.id_mission,
            id_volunteer=volunteer.id_user,
            application_message="I can help",
            status=ApplicationStatus.ACCEPTED,
        )
    )
    open_mission.status = MissionStatus.IN_PROGRESS
    session.add(open_mission)
    session.commit()
    session.refresh(open_mission)
    return open_mission
