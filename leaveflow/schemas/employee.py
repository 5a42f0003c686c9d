"""
Employee schemas
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from leaveflow.models.user import Role


class EmployeeOut(BaseModel):
    """Schema for employee output"""
    id: str
    name: str
    email: str
    designation: str
    role: Role
    employee_code: Optional[str] = None
    sequential_approvers: List[str]

    model_config = ConfigDict(from_attributes=True)


class ApproversUpdate(BaseModel):
    """Schema for setting an employee's ordered approvers"""
    approver_ids: List[str] = Field(
        default_factory=list,
        description="Ordered approver IDs; empty restores the default HR path",
    )
