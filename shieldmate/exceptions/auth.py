"""Authentication and authorization exceptions."""

from shieldmate.exceptions.base import AppException


class AuthenticationError(AppException):
    """Base class for authentication-related errors."""

    code = "authentication_error"


class InvalidCredentialsError(AuthenticationError):
    """Username/email or password is incorrect."""

    code = "invalid_credentials"

    def __init__(self, message: str = "Incorrect username or password"):
        super().__init__(message)


class InvalidTokenError(AuthenticationError):
    """Token is invalid, expired, or malformed."""

    code = "invalid_token"

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


class InsufficientPermissionsError(AuthenticationError):
    """User doesn't have the role or membership required for this action."""

    code = "not_authorized"

    def __init__(self, action: str = "perform this action"):
        """
        Initialize InsufficientPermissionsError for a refused action.

        Parameters:
            action (str): What the caller attempted, phrased to follow "You are not allowed to"
                (for example, "decide applications for this mission").
        """
        self.action = action
        super().__init__(f"You are not allowed to {action}")
