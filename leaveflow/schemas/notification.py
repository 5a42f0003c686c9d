"""
Notification schemas
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_serializer

from leaveflow.models.notification import NotificationType
from leaveflow.utils.datetime_utils import iso_local


class NotificationOut(BaseModel):
    id: str
    title: str
    message: str
    type: NotificationType
    leave_id: Optional[str] = None
    is_read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", when_used="always")
    def _ser_datetime(self, dt: datetime) -> str:
        return iso_local(dt)


class NotificationListResponse(BaseModel):
    items: List[NotificationOut]
    total: int
    unread: int


class MarkAllReadResponse(BaseModel):
    updated: int
