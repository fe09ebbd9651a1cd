"""Mission lifecycle exceptions.

Raised by the application, closure and rating services when a state
transition is refused. Each one carries a stable `code` so the HTTP layer can
render a distinct, actionable message.
"""

from shieldmate.exceptions.base import AppException
from shieldmate.exceptions.crud import AlreadyExistsError


class InvalidTransitionError(AppException):
    """The record is not in a status that permits the requested operation.

    Also raised when a conditional update matched no row because a concurrent
    request changed the status first.
    """

    code = "invalid_transition"

    def __init__(
        self,
        resource: str,
        identifier: int | str,
        action: str,
        current_status: str | None = None,
    ):
        """
        Parameters:
            resource (str): "Mission" or "Application".
            identifier (int | str): Primary key of the record.
            action (str): The refused operation (for example, "confirm closure").
            current_status (str | None): Status observed at refusal time, when known.
        """
        self.resource = resource
        self.identifier = identifier
        self.action = action
        self.current_status = current_status
        message = f"Cannot {action} on {resource} {identifier}"
        if current_status:
            message += f" in status '{current_status}'"
        super().__init__(message)


class DuplicateApplicationError(AlreadyExistsError):
    """The volunteer already applied to this mission."""

    code = "duplicate_application"

    def __init__(self, mission_id: int, volunteer_id: int):
        self.mission_id = mission_id
        self.volunteer_id = volunteer_id
        super().__init__(
            "Application",
            "mission",
            mission_id,
            message="You have already applied to this mission.",
        )


class AlreadyRatedError(AlreadyExistsError):
    """The rater already submitted a rating for this mission."""

    code = "already_rated"

    def __init__(self, mission_id: int, rater_id: int):
        self.mission_id = mission_id
        self.rater_id = rater_id
        super().__init__(
            "Rating",
            "mission",
            mission_id,
            message="You have already rated this mission.",
        )


class MissionNotCompletedError(AppException):
    """Ratings are only accepted once the mission is completed."""

    code = "mission_not_completed"

    def __init__(self, mission_id: int, current_status: str):
        self.mission_id = mission_id
        self.current_status = current_status
        super().__init__(
            f"Mission {mission_id} is '{current_status}'; "
            "it can only be rated once completed."
        )


class NoAcceptedVolunteerError(AppException):
    """The mission has no accepted application, so it has no volunteer party."""

    code = "no_accepted_volunteer"

    def __init__(self, mission_id: int):
        self.mission_id = mission_id
        super().__init__(f"Mission {mission_id} has no accepted volunteer")
