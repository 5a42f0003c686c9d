"""
Notification endpoints
"""
from fastapi import APIRouter, Depends, Query

from leaveflow.core.deps import get_current_user, get_store
from leaveflow.db.store import LeaveStore
from leaveflow.models import User
from leaveflow.schemas.notification import (
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationOut,
)
from leaveflow.services.notification_service import (
    list_notifications,
    mark_all_as_read,
    mark_as_read,
    unread_count,
)

router = APIRouter()


@router.get("/me", response_model=NotificationListResponse)
def my_notifications_endpoint(
    unread_only: bool = Query(False, description="Return only unread notifications"),
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    """Current user's notifications, newest first"""
    items = list_notifications(store, current_user.id, unread_only=unread_only)
    return NotificationListResponse(
        items=[NotificationOut.model_validate(n) for n in items],
        total=len(items),
        unread=unread_count(store, current_user.id),
    )


@router.post("/read-all", response_model=MarkAllReadResponse)
def mark_all_read_endpoint(
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    """Mark every notification of the current user as read"""
    return MarkAllReadResponse(updated=mark_all_as_read(store, current_user.id))


@router.post("/{notification_id}/read", response_model=NotificationOut)
def mark_read_endpoint(
    notification_id: str,
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    """Mark one notification as read"""
    return NotificationOut.model_validate(mark_as_read(store, current_user.id, notification_id))
