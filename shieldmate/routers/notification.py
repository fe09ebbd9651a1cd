"""Notification router for the per-user activity feed."""

from typing import Annotated
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from shieldmate.database.database import get_session
from shieldmate.core.dependencies import get_current_user
from shieldmate.models.user import User
from shieldmate.models.notification import NotificationPublic, NotificationMarkRead
from shieldmate.services import notification as notification_service
from shieldmate.utils.validation import ensure_id

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/", response_model=list[NotificationPublic])
def get_notifications(
    *,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
    unread_only: bool = Query(
        False, description="If true, only return unread notifications"
    ),
    offset: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
) -> list[NotificationPublic]:
    """
    Get the caller's notifications.

    Returns mission lifecycle events (applications, closure requests,
    automatic completion) ordered by date (newest first).

    ### Query Parameters:
    - **unread_only**: Filter to only unread notifications
    - **offset**: Pagination offset
    - **limit**: Max results (1-100, default 50)

    Raises:
        401 Unauthorized: If no valid authentication token is provided.
    """
    notifications = notification_service.get_user_notifications(
        session,
        ensure_id(current_user.id_user, "User"),
        unread_only=unread_only,
        offset=offset,
        limit=limit,
    )
    return [NotificationPublic.model_validate(n) for n in notifications]


@router.get("/unread-count", response_model=dict)
def get_unread_count(
    *,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> dict:
    """
    Get count of unread notifications.

    Useful for displaying notification badge in UI.
    """
    count = notification_service.get_unread_count(
        session, ensure_id(current_user.id_user, "User")
    )
    return {"unread_count": count}


@router.patch("/mark-read", response_model=dict)
def mark_notifications_as_read(
    *,
    session: Annotated[Session, Depends(get_session)],
    current_user: Annotated[User, Depends(get_current_user)],
    mark_read: NotificationMarkRead,
) -> dict:
    """
    Mark notifications as read.

    IDs that belong to other users are silently ignored.

    ### Request Body:
    ```json
    {
        "notification_ids": [1, 2, 3]
    }
    ```
    """
    count = notification_service.mark_notifications_as_read(
        session, mark_read.notification_ids, ensure_id(current_user.id_user, "User")
    )
    return {"marked_count": count}
