"""
Leave schemas
"""
from datetime import date, datetime, time
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator

from leaveflow.models.leave import ChainStatus, LeaveNature, LeaveStatus, LeaveType
from leaveflow.utils.datetime_utils import iso_local


class AttachmentIn(BaseModel):
    """Attachment metadata supplied with a leave application"""
    id: Optional[str] = Field(None, description="Client-side ID; generated when omitted")
    name: str
    size: int = Field(0, ge=0)
    type: str = Field("application/octet-stream", description="MIME type")
    url: str


class AttachmentOut(BaseModel):
    id: str
    name: str
    size: int
    type: str
    url: str

    model_config = ConfigDict(from_attributes=True)


class LeaveApplyRequest(BaseModel):
    """Schema for applying leave"""
    type: LeaveType = Field(LeaveType.REGULAR, description="Regular or Short")
    nature: Optional[LeaveNature] = Field(None, description="Required for Regular leave")
    start_date: date = Field(..., description="First day of leave")
    end_date: date = Field(..., description="Last day of leave (inclusive)")
    start_time: Optional[time] = Field(None, description="Start time (HH:MM) for Short or part-day leave")
    end_time: Optional[time] = Field(None, description="End time (HH:MM) for Short or part-day leave")
    reason: str = Field(..., min_length=1, description="Reason for leave")
    is_short: bool = Field(False, description="Shortcut for type=Short")
    duration: Optional[float] = Field(None, ge=0, description="Explicit days (Regular) or hours (Short)")
    attachments: List[AttachmentIn] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_dates(self) -> "LeaveApplyRequest":
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self


class ApprovalActionRequest(BaseModel):
    """Schema for approve/reject actions"""
    remarks: Optional[str] = Field(None, description="Optional remarks")
    is_final_decision: bool = Field(False, description="Close the chain with this decision (HR, MD or Director only)")
    expected_version: Optional[int] = Field(None, description="Reject the action if the request changed meanwhile")


class SkipActionRequest(BaseModel):
    """Schema for skip action"""
    remarks: Optional[str] = Field(None, description="Optional remarks")
    expected_version: Optional[int] = None


class CancelRequest(BaseModel):
    """Schema for cancellation"""
    remarks: Optional[str] = Field(None, description="Reason for cancellation")
    expected_version: Optional[int] = None


class EditApprovalRequest(BaseModel):
    """Schema for rewriting an approver's latest decision"""
    status: ChainStatus = Field(..., description="Approved, Rejected or Skipped")
    remarks: Optional[str] = Field(None, description="Replacement remarks")
    expected_version: Optional[int] = None


class UnpaidDaysRequest(BaseModel):
    """Schema for adjusting unpaid leave days"""
    days: float = Field(..., description="Unpaid days; clamped to [0, days_calculated]")
    expected_version: Optional[int] = None


class ApprovalStepOut(BaseModel):
    approver_id: str
    status: ChainStatus
    date: datetime
    remarks: Optional[str] = None
    delegated_from_id: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("date", when_used="always")
    def _ser_datetime(self, dt: datetime) -> str:
        return iso_local(dt)


class LeaveOut(BaseModel):
    """Schema for leave output"""
    id: str
    user_id: str
    type: LeaveType
    nature: Optional[LeaveNature]
    start_date: date
    end_date: date
    start_time: Optional[time]
    end_time: Optional[time]
    reason: str
    status: LeaveStatus
    current_approver_id: Optional[str]
    approval_chain: List[ApprovalStepOut]
    days_calculated: float
    unpaid_leave_days: float
    attachments: List[AttachmentOut]
    is_counted: bool = Field(..., description="Whether the balance deduction is currently applied")
    version: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", "updated_at", when_used="always")
    def _ser_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return iso_local(dt) if dt is not None else None


class LeaveListResponse(BaseModel):
    items: List[LeaveOut]
    total: int


class BalanceOut(BaseModel):
    """Schema for a user's leave balance"""
    user_id: str
    year: int
    total_days: float
    used_days: float
    total_hours: float
    used_hours: float
    casual_quota: float
    casual_used: float
    remaining_casual: float
    sick_quota: float
    sick_used: float
    remaining_sick: float

    model_config = ConfigDict(from_attributes=True)
