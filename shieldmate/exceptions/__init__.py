"""
Application exceptions module.

This module provides a clean separation of concerns for error handling:
- Base exceptions define the hierarchy
- CRUD exceptions handle database operations
- Auth exceptions handle authentication/authorization
- Lifecycle exceptions handle refused mission/application/rating transitions
- HTTP mapping is handled separately in shieldmate/core/error_handlers.py
"""

from shieldmate.exceptions.base import AppException
from shieldmate.exceptions.crud import (
    NotFoundError,
    AlreadyExistsError,
    ValidationError,
)
from shieldmate.exceptions.auth import (
    AuthenticationError,
    InvalidCredentialsError,
    InvalidTokenError,
    InsufficientPermissionsError,
)
from shieldmate.exceptions.lifecycle import (
    InvalidTransitionError,
    DuplicateApplicationError,
    AlreadyRatedError,
    MissionNotCompletedError,
    NoAcceptedVolunteerError,
)

__all__ = [
    # Base
    "AppException",
    # CRUD
    "NotFoundError",
    "AlreadyExistsError",
    "ValidationError",
    # Auth
    "AuthenticationError",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "InsufficientPermissionsError",
    # Lifecycle
    "InvalidTransitionError",
    "DuplicateApplicationError",
    "AlreadyRatedError",
    "MissionNotCompletedError",
    "NoAcceptedVolunteerError",
]
