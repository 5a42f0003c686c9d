"""
Delegation schemas
"""
from datetime import datetime
from typing import List

from pydantic import BaseModel, Field, field_serializer, model_validator

from leaveflow.models.delegation import DelegationHistory, DelegationState
from leaveflow.utils.datetime_utils import iso_local


class DelegationCreate(BaseModel):
    """Schema for granting a delegation"""
    delegate_id: str = Field(..., description="User who may act on your behalf")
    start_date: datetime = Field(..., description="Start of the window (naive values are UTC)")
    end_date: datetime = Field(..., description="End of the window (inclusive)")

    @model_validator(mode="after")
    def check_window(self) -> "DelegationCreate":
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self


class DelegationUpdate(DelegationCreate):
    """Schema for rewriting a scheduled or active delegation"""


class DelegationExtend(BaseModel):
    end_date: datetime = Field(..., description="New end of the window")


class DelegationOut(BaseModel):
    id: str
    delegated_to_id: str
    start_date: datetime
    end_date: datetime
    assigned_at: datetime
    state: DelegationState

    @field_serializer("start_date", "end_date", "assigned_at", when_used="always")
    def _ser_datetime(self, dt: datetime) -> str:
        return iso_local(dt)

    @classmethod
    def from_entry(cls, entry: DelegationHistory, now: datetime) -> "DelegationOut":
        return cls(
            id=entry.id,
            delegated_to_id=entry.delegated_to_id,
            start_date=entry.start_date,
            end_date=entry.end_date,
            assigned_at=entry.assigned_at,
            state=entry.state(now),
        )


class DelegationListResponse(BaseModel):
    items: List[DelegationOut]
    total: int
