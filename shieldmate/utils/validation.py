from typing import TypeVar
from shieldmate.exceptions import AppException

T = TypeVar("T")


def ensure_id(id_value: T | None, resource_name: str = "Resource") -> T:
    """
    Narrow an optional primary key of a persisted record to its value.

    Args:
        id_value: The ID value to check.
        resource_name: The name of the resource for the error message.

    Returns:
        The non-None ID value.

    Raises:
        AppException: If the ID value is None (the record was never flushed).
    """
    if id_value is None:
        raise AppException(f"{resource_name} ID is missing")
    return id_value


def mask_email(email: str) -> str:
    """
    Mask an email address for safe logging.
    Example: 'user@example.com' -> 'u***r@example.com'
    """
    user_part, sep, domain = email.partition("@")
    if not sep or not user_part:
        return "***@***.***"
    if len(user_part) <= 2:
        return f"{user_part[0]}***@{domain}"
    return f"{user_part[0]}***{user_part[-1]}@{domain}"
