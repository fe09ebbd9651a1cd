"""Base exception for the application."""


class AppException(Exception):
    """Root of every domain exception raised by the service layer."""

    code: str = "app_error"

    def __init__(self, message: str = "An application error occurred"):
        """
        Initialize the exception with a human-readable message.

        Parameters:
            message (str): Description of the failure, exposed as `str(exc)`.
        """
        self.message = message
        super().__init__(message)
