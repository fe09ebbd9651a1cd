from datetime import timedelta
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlmodel import Session

from shieldmate.database.database import get_session
from shieldmate.core.config import get_settings, Settings
from shieldmate.core.security import (
    authenticate_user,
    create_access_token,
    create_refresh_token,
    decode_token,
)
from shieldmate.exceptions import InvalidTokenError
from shieldmate.models.auth import Token, TokenRefreshRequest, UserRegister
from shieldmate.models.user import UserPublic
from shieldmate.services import user as user_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/token", response_model=Token)
async def login_for_access_token(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    session: Annotated[Session, Depends(get_session)],
    settings: Annotated[Settings, Depends(get_settings)],
):
    user = authenticate_user(session, form_data.username, form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    access_token = create_access_token(
        data={"sub": user.username},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    refresh_token = create_refresh_token(
        data={"sub": user.username},
        expires_delta=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )

    return Token(
        access_token=access_token, refresh_token=refresh_token, token_type="bearer"
    )


@router.post("/refresh", response_model=Token)
async def refresh_token(
    request_data: TokenRefreshRequest,
    session: Annotated[Session, Depends(get_session)],
    settings: Annotated[Settings, Depends(get_settings)],
):
    """
    Exchange a refresh token for a new access token.
    Expects JSON: {"refresh_token": "..."}
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    incoming_refresh_token = request_data.refresh_token

    try:
        username = decode_token(incoming_refresh_token, expected_type="refresh")
    except InvalidTokenError:
        raise credentials_exception
    if user_service.get_user_by_username(session, username) is None:
        raise credentials_exception

    new_access_token = create_access_token(
        data={"sub": username},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )

    return Token(
        access_token=new_access_token,
        # TODO: rotate refresh tokens once a revocation list exists
        refresh_token=incoming_refresh_token,
        token_type="bearer",
    )


@router.post("/register", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
def register(
    user_in: UserRegister,
    session: Annotated[Session, Depends(get_session)],
):
    """
    Create a volunteer or organization owner account.

    Raises:
        409 AlreadyExistsError: If the username or email is taken.
        422 ValidationError: If the requested role cannot be self-assigned.
    """
    return user_service.register_user(session, user_in)
