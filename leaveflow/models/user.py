"""
User and role models
"""
import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from leaveflow.models.delegation import DelegationHistory


class Role(str, enum.Enum):
    """Organisational role. Each role carries its approval authority."""

    EMPLOYEE = "Employee"
    TEAM_LEAD = "TeamLead"
    MANAGER = "Manager"
    HR = "HR"
    MD = "MD"
    DIRECTOR = "Director"

    @property
    def is_executive(self) -> bool:
        return self in (Role.MD, Role.DIRECTOR)

    def is_final(self) -> bool:
        """Approvals by this role close the chain without an explicit final flag."""
        return self.is_executive

    def finalizes_rejection(self) -> bool:
        """Rejections by this role close the chain."""
        return self == Role.HR or self.is_executive

    def can_finalize(self) -> bool:
        """Role may take final-authority actions (e.g. adjusting unpaid days)."""
        return self == Role.HR or self.is_executive

    def intercepts_executive_routing(self) -> bool:
        """Only this role may hand a request to MD/Director; everyone else is routed via HR."""
        return self == Role.HR


FINAL_AUTHORITY_ROLES = frozenset(role for role in Role if role.can_finalize())


@dataclass
class User:
    id: str
    name: str
    role: Role = Role.EMPLOYEE
    email: str = ""
    designation: str = ""
    employee_code: Optional[str] = None
    # Ordered approver IDs; empty means the default HR -> executive path
    sequential_approvers: List[str] = field(default_factory=list)
    # Newest first
    delegation_history: List[DelegationHistory] = field(default_factory=list)
    # Legacy single-field delegation, superseded by delegation_history
    delegated_to: Optional[str] = None
    delegation_start_date: Optional[datetime] = None
    delegation_end_date: Optional[datetime] = None

    def clear_legacy_delegation(self) -> None:
        self.delegated_to = None
        self.delegation_start_date = None
        self.delegation_end_date = None
