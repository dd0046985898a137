"""
Persistence-side notification operations.

Creation classifies each notification: unless the caller forces them, the
priority and emoji come from the message context (see `priority`).
"""
import logging
from typing import Iterable, List, Optional

from sqlmodel import Session, select, func

from ..core.errors import NotFoundError
from ..models.notifications import Notification
from ..models.types import NotificationType
from .priority import (
    NotificationPriority,
    SortOrder,
    extract_context,
    resolve_emoji,
    resolve_priority,
    sort_notifications,
)

logger = logging.getLogger(__name__)


def create_smart_notification(
    session: Session,
    user_id: int,
    title: str,
    message: str,
    type: str,
    context: Optional[str] = None,
    force_emoji: Optional[str] = None,
    force_priority: Optional[str] = None,
    action_url: Optional[str] = None,
    related_item_id: Optional[int] = None,
    related_item_type: Optional[str] = None,
    commit: bool = True,
) -> Notification:
    context = context or extract_context(type, message)
    priority = force_priority or resolve_priority(type, context).value
    emoji = force_emoji or resolve_emoji(type, context, priority)

    notification = Notification(
        user_id=user_id,
        title=title,
        message=message,
        type=type,
        priority=priority,
        emoji=emoji,
        action_url=action_url,
        related_item_id=related_item_id,
        related_item_type=related_item_type,
    )
    session.add(notification)
    if commit:
        session.commit()
        session.refresh(notification)
    logger.debug("Created %s notification for user %s (%s)", priority, user_id, context)
    return notification


def create_urgent_notification(session: Session, user_id: int, title: str, message: str, type: str, **kwargs) -> Notification:
    return create_smart_notification(
        session, user_id, title, message, type,
        force_emoji="🚨", force_priority=NotificationPriority.URGENT.value, **kwargs
    )


def notify_multiple_users(
    session: Session,
    user_ids: Iterable[int],
    title: str,
    message: str,
    type: str,
    context: Optional[str] = None,
    **kwargs,
) -> List[Notification]:
    notifications = [
        create_smart_notification(
            session, user_id, title, message, type, context=context, commit=False, **kwargs
        )
        for user_id in user_ids
    ]
    session.commit()
    for notification in notifications:
        session.refresh(notification)
    return notifications


def create_message_notification(
    session: Session,
    user_id: int,
    sender_name: str,
    message_content: str,
    message_id: int,
    project_id: Optional[int] = None,
    project_name: Optional[str] = None,
) -> Notification:
    is_urgent = any(
        word in message_content.lower()
        for word in ("urgent", "asap", "emergency", "critical", "immediately")
    )
    title = f"New message about {project_name}" if project_name else f"New message from {sender_name}"
    preview = f"{message_content[:80]}..." if len(message_content) > 80 else message_content
    return create_smart_notification(
        session,
        user_id,
        title,
        preview,
        NotificationType.MESSAGE.value,
        context="urgent" if is_urgent else "default",
        related_item_id=message_id,
        related_item_type="message",
        action_url=f"/projects/{project_id}/messages" if project_id else "/messages",
    )


def list_notifications(session: Session, user_id: int, order=SortOrder.NEWEST) -> List[Notification]:
    notifications = session.exec(
        select(Notification).where(Notification.user_id == user_id)
    ).all()
    return sort_notifications(notifications, order)


def unread_count(session: Session, user_id: int) -> int:
    return session.exec(
        select(func.count()).select_from(Notification).where(
            Notification.user_id == user_id,
            Notification.read == False,  # noqa: E712
        )
    ).one()


def has_unread_with_priority(session: Session, user_id: int, priority: NotificationPriority) -> bool:
    return session.exec(
        select(Notification.id).where(
            Notification.user_id == user_id,
            Notification.read == False,  # noqa: E712
            Notification.priority == priority.value,
        )
    ).first() is not None


def mark_as_read(session: Session, user_id: int, notification_id: int) -> Optional[Notification]:
    """Mark one notification read. Unknown ids and other users' notifications are a no-op."""
    notification = session.get(Notification, notification_id)
    if notification is None or notification.user_id != user_id:
        return None
    if not notification.read:
        notification.read = True
        session.add(notification)
        session.commit()
        session.refresh(notification)
    return notification


def mark_many_as_read(session: Session, user_id: int, ids: Iterable[int]) -> int:
    ids = list(ids)
    if not ids:
        return 0
    notifications = session.exec(
        select(Notification).where(
            Notification.user_id == user_id,
            Notification.id.in_(ids),
            Notification.read == False,  # noqa: E712
        )
    ).all()
    for notification in notifications:
        notification.read = True
        session.add(notification)
    session.commit()
    return len(notifications)


def mark_all_as_read(session: Session, user_id: int) -> int:
    notifications = session.exec(
        select(Notification).where(
            Notification.user_id == user_id,
            Notification.read == False,  # noqa: E712
        )
    ).all()
    for notification in notifications:
        notification.read = True
        session.add(notification)
    session.commit()
    return len(notifications)


def delete_notification(session: Session, user_id: int, notification_id: int) -> None:
    notification = session.get(Notification, notification_id)
    if notification is None or notification.user_id != user_id:
        raise NotFoundError("Notification", notification_id)
    session.delete(notification)
    session.commit()
