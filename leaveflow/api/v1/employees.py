"""
Employee endpoints
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from leaveflow.core.deps import get_current_user, get_store, require_roles
from leaveflow.db.store import LeaveStore
from leaveflow.models import FINAL_AUTHORITY_ROLES, Role, User
from leaveflow.schemas.employee import ApproversUpdate, EmployeeOut
from leaveflow.services.employee_service import get_user, list_users, update_user_approvers

router = APIRouter()


@router.get("", response_model=List[EmployeeOut])
def list_employees_endpoint(
    role: Optional[Role] = Query(None, description="Filter by role"),
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    """List users (used for approver and delegate pickers)"""
    return [EmployeeOut.model_validate(user) for user in list_users(store, role=role)]


@router.get("/{user_id}", response_model=EmployeeOut)
def get_employee_endpoint(
    user_id: str,
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    """Get one user"""
    return EmployeeOut.model_validate(get_user(store, user_id))


@router.put("/{user_id}/approvers", response_model=EmployeeOut)
def update_approvers_endpoint(
    user_id: str,
    data: ApproversUpdate,
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(require_roles(*FINAL_AUTHORITY_ROLES))
):
    """
    Set the ordered sequential approvers of a user (HR/MD/Director)

    An empty list restores the default path (HR, then MD/Director).
    """
    user = update_user_approvers(store, user_id, data.approver_ids, actor_id=current_user.id)
    return EmployeeOut.model_validate(user)
