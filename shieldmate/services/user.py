"""User service module for account creation and lookup."""

from sqlmodel import Session, select
from sqlalchemy.exc import IntegrityError

from shieldmate.models.user import User, UserCreate
from shieldmate.models.auth import UserRegister
from shieldmate.models.enums import UserRole
from shieldmate.core.security import get_password_hash
from shieldmate.exceptions import AlreadyExistsError, ValidationError


def create_user(session: Session, user_in: UserCreate) -> User:
    """
    Create and persist a new user with a hashed password.

    Parameters:
        user_in (UserCreate): User creation data; must include a plaintext `password` and other user fields.

    Returns:
        User: The created User model instance.

    Raises:
        AlreadyExistsError: If a user with the same username or email already exists.
    """
    hashed_password = get_password_hash(user_in.password)

    db_user = User.model_validate(user_in, update={"hashed_password": hashed_password})

    session.add(db_user)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise AlreadyExistsError("User", "unique field", "username or email")
    session.refresh(db_user)
    return db_user


def register_user(session: Session, user_in: UserRegister) -> User:
    """
    Self-service sign-up for volunteers and organization owners.

    Raises:
        ValidationError: If the requested role cannot be self-assigned.
        AlreadyExistsError: If the username or email is taken.
    """
    if user_in.role not in (UserRole.VOLUNTEER, UserRole.ORGANIZATION_OWNER):
        raise ValidationError(
            "Only volunteer and organization_owner accounts can register",
            field="role",
        )
    return create_user(session, UserCreate(**user_in.model_dump()))


def get_user(session: Session, user_id: int) -> User | None:
    """Retrieve a user by ID."""
    return session.get(User, user_id)


def get_user_by_username(session: Session, username: str) -> User | None:
    """
    Retrieve a user by username.

    Returns:
        User | None: `User` if a matching record exists, `None` otherwise.
    """
    statement = select(User).where(User.username == username)
    return session.exec(statement).first()


def get_users_by_ids(session: Session, user_ids: list[int]) -> list[User]:
    """Fetch every user whose id is in `user_ids`, in no particular order."""
    if not user_ids:
        return []
    statement = select(User).where(User.id_user.in_(user_ids))  # type: ignore
    return list(session.exec(statement).all())
