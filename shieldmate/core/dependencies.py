from typing import Annotated
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import Session, select

from shieldmate.core.security import decode_token
from shieldmate.database.database import get_session
from shieldmate.exceptions import InvalidTokenError, InsufficientPermissionsError
from shieldmate.models.enums import UserRole
from shieldmate.models.user import User


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token")


def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    session: Annotated[Session, Depends(get_session)],
) -> User:
    """
    Resolve the authenticated user from an access JWT.

    Returns:
        user (User): The User whose username matches the token's subject.

    Raises:
        HTTPException: 401 Unauthorized if the token is invalid, not an access token, missing the subject, or if no matching user is found.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        username = decode_token(token, expected_type="access")
    except InvalidTokenError:
        raise credentials_exception

    user = session.exec(select(User).where(User.username == username)).first()
    if user is None:
        raise credentials_exception
    return user


def get_current_super_admin(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """
    Require the authenticated user to hold the super_admin role.

    Raises:
        InsufficientPermissionsError: If the user is not a super admin.
    """
    if current_user.role != UserRole.SUPER_ADMIN:
        raise InsufficientPermissionsError("access the internal administration API")
    return current_user

