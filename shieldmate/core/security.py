from typing import Literal
from datetime import datetime, timedelta, timezone

import jwt
from jwt.exceptions import PyJWTError
from pwdlib import PasswordHash
from sqlmodel import Session, select

from shieldmate.core.config import get_settings
from shieldmate.exceptions import InvalidTokenError
from shieldmate.models.user import User


# pwdlib is the modern, recommended way (Argon2 by default)
password_hash = PasswordHash.recommended()

# Verified when the username is unknown so both branches cost one Argon2 check
_DUMMY_HASH = password_hash.hash("shieldmate-timing-equalizer")

TokenType = Literal["access", "refresh"]


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify that a plaintext password matches a stored hashed password.

    Returns:
        `True` if the plaintext password matches the hashed password, `False` otherwise.
    """
    return password_hash.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """
    Hash a plaintext password using the recommended hashing algorithm (Argon2).
    """
    return password_hash.hash(password)


def authenticate_user(session: Session, username: str, password: str) -> User | None:
    """
    Authenticate a user by username and password.

    Returns:
        User if authentication succeeds, `None` otherwise.
    """
    user = session.exec(select(User).where(User.username == username)).first()
    hash_to_verify = user.hashed_password if user else _DUMMY_HASH
    password_ok = verify_password(password, hash_to_verify)
    if user and password_ok:
        return user
    return None


def create_token(data: dict, expires_delta: timedelta, type: TokenType) -> str:
    """
    Create a JSON Web Token with the given payload, expiration, and token type.

    Parameters:
        data (dict): Payload claims to include in the token.
        expires_delta (timedelta): Time span from now after which the token expires.
        type (Literal["access", "refresh"]): Token classification included in the token claims.

    Returns:
        token (str): Encoded JWT string.
    """
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode.update({"exp": expire, "type": type})
    return jwt.encode(
        to_encode, settings.SECRET_KEY.get_secret_value(), algorithm=settings.ALGORITHM
    )


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """
    Create a JWT access token; expiry defaults to ACCESS_TOKEN_EXPIRE_MINUTES.
    """
    expires_delta = expires_delta or timedelta(
        minutes=get_settings().ACCESS_TOKEN_EXPIRE_MINUTES
    )
    return create_token(data, expires_delta=expires_delta, type="access")


def create_refresh_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """
    Create a JWT refresh token; expiry defaults to REFRESH_TOKEN_EXPIRE_DAYS.
    """
    expires_delta = expires_delta or timedelta(
        days=get_settings().REFRESH_TOKEN_EXPIRE_DAYS
    )
    return create_token(data, expires_delta=expires_delta, type="refresh")


def decode_token(token: str, expected_type: TokenType) -> str:
    """
    Decode a JWT and return its subject.

    Parameters:
        token (str): Encoded JWT.
        expected_type (Literal["access", "refresh"]): Required value of the `type` claim.

    Returns:
        str: The `sub` claim (a username).

    Raises:
        InvalidTokenError: If the signature, expiry, subject or type is invalid.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY.get_secret_value(),
            algorithms=[settings.ALGORITHM],
        )
    except PyJWTError as e:
        raise InvalidTokenError() from e

    username: str | None = payload.get("sub")
    if username is None or payload.get("type") != expected_type:
        raise InvalidTokenError()
    return username
