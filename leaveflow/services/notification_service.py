"""
Notification service - in-app inbox fed by leave workflow events
"""
import logging
from typing import List, Optional

from leaveflow.core.errors import NotFoundError
from leaveflow.db.store import LeaveStore
from leaveflow.models import LeaveRequest, LeaveStatus, Notification, NotificationType
from leaveflow.utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)


def notify(
    store: LeaveStore,
    user_id: str,
    title: str,
    message: str,
    notification_type: NotificationType = NotificationType.INFO,
    leave_id: Optional[str] = None,
) -> Notification:
    with store.lock:
        notification = Notification(
            id=store.next_id("n"),
            user_id=user_id,
            title=title,
            message=message,
            type=notification_type,
            created_at=now_utc(),
            leave_id=leave_id,
        )
        store.notifications[notification.id] = notification
    logger.debug("notification queued: id=%s user_id=%s type=%s", notification.id, user_id, notification_type.value)
    return notification


def _requester_name(store: LeaveStore, leave: LeaveRequest) -> str:
    user = store.users.get(leave.user_id)
    return user.name if user else leave.user_id


def _leave_label(leave: LeaveRequest) -> str:
    if leave.nature is not None:
        return f"{leave.nature.value} leave"
    return f"{leave.type.value} leave"


def notify_approval_required(store: LeaveStore, leave: LeaveRequest, forwarded: bool = False) -> Optional[Notification]:
    """Tell the current approver that a request is waiting on them."""
    if leave.current_approver_id is None:
        return None
    verb = "forwarded to you" if forwarded else "submitted"
    return notify(
        store,
        leave.current_approver_id,
        "Leave approval required",
        f"{_requester_name(store, leave)} {verb} a {_leave_label(leave)} request "
        f"({leave.start_date} to {leave.end_date}).",
        NotificationType.ACTION_REQUIRED,
        leave.id,
    )


def notify_decision(store: LeaveStore, leave: LeaveRequest, actor_name: str) -> Notification:
    """Tell the requester about a final decision or cancellation."""
    if leave.status == LeaveStatus.APPROVED:
        notification_type = NotificationType.APPROVED
    elif leave.status == LeaveStatus.REJECTED:
        notification_type = NotificationType.REJECTED
    else:
        notification_type = NotificationType.INFO
    return notify(
        store,
        leave.user_id,
        f"Leave {leave.status.value.lower()}",
        f"Your {_leave_label(leave)} request ({leave.start_date} to {leave.end_date}) "
        f"was {leave.status.value.lower()} by {actor_name}.",
        notification_type,
        leave.id,
    )


def list_notifications(store: LeaveStore, user_id: str, unread_only: bool = False) -> List[Notification]:
    """User's notifications, newest first."""
    items = [n for n in store.notifications.values() if n.user_id == user_id]
    if unread_only:
        items = [n for n in items if not n.is_read]
    # Store preserves insertion order
    return list(reversed(items))


def unread_count(store: LeaveStore, user_id: str) -> int:
    return len(list_notifications(store, user_id, unread_only=True))


def mark_as_read(store: LeaveStore, user_id: str, notification_id: str) -> Notification:
    """
    Mark one notification as read

    Raises:
        NotFoundError: If the notification does not exist or belongs to someone else
    """
    with store.lock:
        notification = store.notifications.get(notification_id)
        if notification is None or notification.user_id != user_id:
            raise NotFoundError(f"Notification with id {notification_id} not found")
        notification.is_read = True
    return notification


def mark_all_as_read(store: LeaveStore, user_id: str) -> int:
    """Mark every unread notification of the user as read; returns how many changed."""
    changed = 0
    with store.lock:
        for notification in store.notifications.values():
            if notification.user_id == user_id and not notification.is_read:
                notification.is_read = True
                changed += 1
    return changed
