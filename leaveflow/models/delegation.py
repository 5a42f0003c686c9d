"""
Delegation history model
"""
import enum
from dataclasses import dataclass
from datetime import datetime

from leaveflow.utils.datetime_utils import ensure_utc


class DelegationState(str, enum.Enum):
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    PAST = "past"


@dataclass
class DelegationHistory:
    """Time-windowed grant letting delegated_to_id act with the owner's approval authority."""

    id: str
    delegated_to_id: str
    start_date: datetime
    end_date: datetime
    assigned_at: datetime

    def state(self, now: datetime) -> DelegationState:
        now = ensure_utc(now)
        if now < self.start_date:
            return DelegationState.SCHEDULED
        if now <= self.end_date:
            return DelegationState.ACTIVE
        return DelegationState.PAST

    def is_active(self, now: datetime) -> bool:
        return self.state(now) == DelegationState.ACTIVE
