"""
Leave models
"""
import enum
from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import List, Optional


class LeaveType(str, enum.Enum):
    REGULAR = "Regular"
    SHORT = "Short"


class LeaveNature(str, enum.Enum):
    CASUAL = "Casual"
    SICK = "Sick"
    MATERNITY = "Maternity"
    PILGRIM = "Pilgrim"
    UNPAID = "Unpaid"
    OTHER = "Other"


class LeaveStatus(str, enum.Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"


# Statuses that carry no current approver
TERMINAL_LEAVE_STATUSES = frozenset({
    LeaveStatus.APPROVED,
    LeaveStatus.REJECTED,
    LeaveStatus.CANCELLED,
})


class Decision(str, enum.Enum):
    APPROVE = "approve"
    REJECT = "reject"
    SKIP = "skip"


class ChainStatus(str, enum.Enum):
    """
    Status recorded on an approval-chain step.

    Approved/Rejected are final-authority decisions; Recommended/Not Recommended are
    the approve/reject decisions of a non-final approver.
    """

    APPROVED = "Approved"
    REJECTED = "Rejected"
    RECOMMENDED = "Recommended"
    NOT_RECOMMENDED = "Not Recommended"
    SKIPPED = "Skipped"

    @property
    def decision(self) -> Decision:
        if self in (ChainStatus.APPROVED, ChainStatus.RECOMMENDED):
            return Decision.APPROVE
        if self in (ChainStatus.REJECTED, ChainStatus.NOT_RECOMMENDED):
            return Decision.REJECT
        return Decision.SKIP

    @property
    def is_final(self) -> bool:
        return self in (ChainStatus.APPROVED, ChainStatus.REJECTED)

    @classmethod
    def for_decision(cls, decision: Decision, final: bool) -> "ChainStatus":
        if decision == Decision.APPROVE:
            return cls.APPROVED if final else cls.RECOMMENDED
        if decision == Decision.REJECT:
            return cls.REJECTED if final else cls.NOT_RECOMMENDED
        return cls.SKIPPED


@dataclass
class ApprovalStep:
    approver_id: str
    status: ChainStatus
    date: datetime
    remarks: Optional[str] = None
    # Set when approver_id acted on behalf of a delegator
    delegated_from_id: Optional[str] = None


@dataclass
class Attachment:
    """Attachment metadata only; file storage is handled elsewhere."""

    id: str
    name: str
    size: int
    type: str
    url: str


@dataclass(frozen=True)
class BalanceDeduction:
    """Exact amounts one deduction applied to a balance, reversed verbatim on restore."""

    nature: Optional[LeaveNature]
    used_days: float = 0.0
    used_hours: float = 0.0
    casual_days: float = 0.0
    sick_days: float = 0.0


@dataclass
class LeaveBalance:
    user_id: str
    year: int
    total_days: float
    total_hours: float
    casual_quota: float
    sick_quota: float
    used_days: float = 0.0
    used_hours: float = 0.0
    casual_used: float = 0.0
    sick_used: float = 0.0

    @property
    def remaining_casual(self) -> float:
        return max(0.0, self.casual_quota - self.casual_used)

    @property
    def remaining_sick(self) -> float:
        return max(0.0, self.sick_quota - self.sick_used)


@dataclass
class LeaveRequest:
    id: str
    user_id: str
    type: LeaveType
    start_date: date
    end_date: date
    reason: str
    status: LeaveStatus
    days_calculated: float
    created_at: datetime
    updated_at: datetime
    nature: Optional[LeaveNature] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    current_approver_id: Optional[str] = None
    approval_chain: List[ApprovalStep] = field(default_factory=list)
    unpaid_leave_days: float = 0.0
    attachments: List[Attachment] = field(default_factory=list)
    version: int = 1
    # Balance deduction currently applied; None when the request is not counted
    deduction: Optional[BalanceDeduction] = None

    @property
    def is_counted(self) -> bool:
        return self.deduction is not None
