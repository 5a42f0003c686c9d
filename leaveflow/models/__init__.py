"""
Domain models
"""
from leaveflow.models.delegation import DelegationHistory, DelegationState
from leaveflow.models.user import User, Role, FINAL_AUTHORITY_ROLES
from leaveflow.models.leave import (
    LeaveRequest,
    LeaveBalance,
    LeaveType,
    LeaveNature,
    LeaveStatus,
    ApprovalStep,
    Attachment,
    BalanceDeduction,
    ChainStatus,
    Decision,
    TERMINAL_LEAVE_STATUSES,
)
from leaveflow.models.holiday import Holiday, HolidayType, NON_WORKING_HOLIDAY_TYPES
from leaveflow.models.notification import Notification, NotificationType
from leaveflow.models.audit_log import AuditLog

__all__ = [
    "DelegationHistory",
    "DelegationState",
    "User",
    "Role",
    "FINAL_AUTHORITY_ROLES",
    "LeaveRequest",
    "LeaveBalance",
    "LeaveType",
    "LeaveNature",
    "LeaveStatus",
    "ApprovalStep",
    "Attachment",
    "BalanceDeduction",
    "ChainStatus",
    "Decision",
    "TERMINAL_LEAVE_STATUSES",
    "Holiday",
    "HolidayType",
    "NON_WORKING_HOLIDAY_TYPES",
    "Notification",
    "NotificationType",
    "AuditLog",
]
