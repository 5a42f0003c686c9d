"""
Notification model
"""
import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


class NotificationType(str, enum.Enum):
    ACTION_REQUIRED = "action_required"
    APPROVED = "approved"
    REJECTED = "rejected"
    INFO = "info"


@dataclass
class Notification:
    id: str
    user_id: str
    title: str
    message: str
    type: NotificationType
    created_at: datetime
    leave_id: Optional[str] = None
    is_read: bool = False
