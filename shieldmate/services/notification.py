"""Notification service for creating and managing notifications.

`notify` is the fire-and-forget sink used by the lifecycle services: it is
always called after the triggering transition has been committed, and a
failure to store the notification is logged, never raised.
"""

from sqlmodel import Session, select, func

from shieldmate.models.notification import (
    Notification,
    NotificationCreate,
    NotificationType,
)
from shieldmate.utils.logger import logger


def mission_link(mission_id: int) -> str:
    return f"/mission/{mission_id}"


def create_notification(
    session: Session, notification_in: NotificationCreate
) -> Notification:
    """
    Create a notification in the database.

    Args:
        session: Database session
        notification_in: Notification creation data

    Returns:
        Notification: Created notification (flushed, not committed)
    """
    notification = Notification.model_validate(notification_in)
    session.add(notification)
    session.flush()
    session.refresh(notification)
    return notification


def notify(
    session: Session,
    user_ids: list[int],
    notification_type: NotificationType,
    message: str,
    mission_id: int | None = None,
) -> int:
    """
    Best-effort delivery of one notification to each recipient.

    Args:
        session: Database session; must not hold uncommitted work of the caller
        user_ids: Recipients (duplicates are notified once)
        notification_type: Event being notified
        message: Text shown to the recipient
        mission_id: Related mission, also used to build the link

    Returns:
        int: Number of notifications stored (0 when storing failed)
    """
    recipients = list(dict.fromkeys(user_ids))
    if not recipients:
        return 0
    link_url = mission_link(mission_id) if mission_id is not None else None
    try:
        for user_id in recipients:
            create_notification(
                session,
                NotificationCreate(
                    id_user=user_id,
                    notification_type=notification_type,
                    message=message,
                    link_url=link_url,
                    related_mission_id=mission_id,
                ),
            )
        session.commit()
    except Exception:
        session.rollback()
        logger.exception(
            f"Failed to store {notification_type.value} notification "
            f"for mission {mission_id}"
        )
        return 0
    return len(recipients)


def get_user_notifications(
    session: Session,
    user_id: int,
    *,
    unread_only: bool = False,
    offset: int = 0,
    limit: int = 50,
) -> list[Notification]:
    """
    Get notifications addressed to a user.

    Returns:
        list[Notification]: List of notifications ordered by date (newest first)
    """
    statement = select(Notification).where(Notification.id_user == user_id)

    if unread_only:
        statement = statement.where(Notification.is_read == False)  # noqa: E712

    statement = (
        statement.order_by(
            Notification.created_at.desc(),  # type: ignore
            Notification.id_notification.desc(),  # type: ignore
        )
        .offset(offset)
        .limit(limit)
    )

    return list(session.exec(statement).all())


def mark_notifications_as_read(
    session: Session, notification_ids: list[int], user_id: int
) -> int:
    """
    Mark notifications as read.

    Args:
        session: Database session
        notification_ids: List of notification IDs to mark as read
        user_id: Owner of the notifications; other users' ids are ignored

    Returns:
        int: Number of notifications marked as read
    """
    statement = select(Notification).where(
        Notification.id_notification.in_(notification_ids),  # type: ignore
        Notification.id_user == user_id,
    )

    notifications = session.exec(statement).all()
    count = 0

    for notification in notifications:
        if not notification.is_read:
            notification.is_read = True
            session.add(notification)
            count += 1

    session.commit()
    return count


def get_unread_count(session: Session, user_id: int) -> int:
    """Get count of unread notifications for a user."""
    count = session.exec(
        select(func.count())
        .select_from(Notification)
        .where(
            Notification.id_user == user_id,
            Notification.is_read == False,  # noqa: E712
        )
    ).one()

    return count
