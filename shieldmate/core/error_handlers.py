"""HTTP error handlers for FastAPI application.

This module provides the bridge between application exceptions and HTTP responses.
It maps domain-level exceptions to appropriate HTTP status codes and response formats.

Every body has the shape `{"detail": <message>, "code": <stable code>}` so
clients can show a distinct message per error kind.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from shieldmate.exceptions import (
    AppException,
    NotFoundError,
    AlreadyExistsError,
    ValidationError,
    AuthenticationError,
    InsufficientPermissionsError,
    InvalidTransitionError,
    MissionNotCompletedError,
    NoAcceptedVolunteerError,
)
from shieldmate.utils.logger import logger

STALE_STATE_MESSAGE = "This mission's status just changed. Please refresh and try again."


def _error_response(
    status_code: int, exc: AppException, detail: str | None = None, **extra
) -> JSONResponse:
    content = {"detail": detail or str(exc), "code": exc.code}
    content.update(extra)
    return JSONResponse(status_code=status_code, content=content)


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """
    Map a NotFoundError to an HTTP 404 JSON response.

    Returns:
        JSONResponse: Response with status 404 and the exception message as `detail`.
    """
    return _error_response(status.HTTP_404_NOT_FOUND, exc)


async def already_exists_handler(
    request: Request, exc: AlreadyExistsError
) -> JSONResponse:
    """
    Convert an AlreadyExistsError (including duplicate applications and ratings) into a 409 Conflict.
    """
    return _error_response(status.HTTP_409_CONFLICT, exc)


async def validation_error_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    """
    Convert a ValidationError into an HTTP 422 Unprocessable Entity JSON response.

    When `exc.field` is set, the response also includes a `field` key.
    """
    extra = {"field": exc.field} if exc.field else {}
    return _error_response(status.HTTP_422_UNPROCESSABLE_CONTENT, exc, **extra)


async def invalid_transition_handler(
    request: Request, exc: InvalidTransitionError
) -> JSONResponse:
    """
    Convert an InvalidTransitionError into a 409 Conflict asking the client to refresh.

    The technical reason is kept under `reason`; `detail` is the message meant for users.
    """
    logger.warning(f"Refused transition: {exc}")
    return _error_response(
        status.HTTP_409_CONFLICT,
        exc,
        detail=STALE_STATE_MESSAGE,
        reason=str(exc),
        current_status=exc.current_status,
    )


async def lifecycle_conflict_handler(request: Request, exc: AppException) -> JSONResponse:
    """Map MissionNotCompletedError and NoAcceptedVolunteerError to 409 Conflict."""
    return _error_response(status.HTTP_409_CONFLICT, exc)


async def insufficient_permissions_handler(
    request: Request, exc: InsufficientPermissionsError
) -> JSONResponse:
    """
    Handle an InsufficientPermissionsError by returning a 403 Forbidden JSON response.
    """
    return _error_response(status.HTTP_403_FORBIDDEN, exc)


async def authentication_error_handler(
    request: Request, exc: AuthenticationError
) -> JSONResponse:
    """
    Convert an AuthenticationError into a 401 Unauthorized JSON response that includes a WWW-Authenticate header.
    """
    response = _error_response(status.HTTP_401_UNAUTHORIZED, exc)
    response.headers["WWW-Authenticate"] = "Bearer"  # OAuth2 spec compliance
    return response


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle unhandled application-level exceptions and produce a standardized 500 Internal Server Error response.
    """
    logger.error(f"Unhandled application exception: {exc!r}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "An internal error occurred", "code": exc.code},
    )


def register_exception_handlers(app) -> None:
    """
    Register the application's domain-to-HTTP exception handlers on a FastAPI app.

    Starlette resolves handlers along the exception's MRO, so subclasses such as
    DuplicateApplicationError reach the AlreadyExistsError handler and
    InsufficientPermissionsError is matched before AuthenticationError.

    Parameters:
        app: The FastAPI application instance to which the exception handlers will be attached.
    """
    # CRUD exception handlers
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(AlreadyExistsError, already_exists_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)

    # Lifecycle exception handlers
    app.add_exception_handler(InvalidTransitionError, invalid_transition_handler)
    app.add_exception_handler(MissionNotCompletedError, lifecycle_conflict_handler)
    app.add_exception_handler(NoAcceptedVolunteerError, lifecycle_conflict_handler)

    # Auth exception handlers (specific before general)
    app.add_exception_handler(
        InsufficientPermissionsError, insufficient_permissions_handler
    )
    app.add_exception_handler(AuthenticationError, authentication_error_handler)

    # Catch-all for unhandled application exceptions
    app.add_exception_handler(AppException, app_exception_handler)
