"""
Leave endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from leaveflow.core.deps import get_current_user, get_store
from leaveflow.db.store import LeaveStore
from leaveflow.models import Attachment, LeaveStatus, User
from leaveflow.schemas.leave import (
    ApprovalActionRequest,
    BalanceOut,
    CancelRequest,
    EditApprovalRequest,
    LeaveApplyRequest,
    LeaveListResponse,
    LeaveOut,
    SkipActionRequest,
    UnpaidDaysRequest,
)
from leaveflow.services.balance_service import ensure_balance
from leaveflow.services.leave_service import (
    apply_leave,
    approve_leave,
    cancel_leave,
    edit_approval,
    get_leave,
    reject_leave,
    skip_leave,
    update_unpaid_leave_days,
)
from leaveflow.services.query_service import (
    get_approval_history,
    get_pending_approvals,
    list_user_leaves,
)

router = APIRouter()


def _list_response(leaves) -> LeaveListResponse:
    return LeaveListResponse(
        items=[LeaveOut.model_validate(leave) for leave in leaves],
        total=len(leaves),
    )


@router.get("/balance/me", response_model=BalanceOut)
def balance_me(
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
):
    """Get current user's leave balance (created from default quotas on first use)."""
    return BalanceOut.model_validate(ensure_balance(store, current_user.id))


@router.post("/apply", response_model=LeaveOut, status_code=201)
def apply_leave_endpoint(
    leave_data: LeaveApplyRequest,
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    """
    Apply for leave (creates Pending request)

    Any user can apply for leave for themselves only.

    Rules:
    - Regular leave requires a nature
    - Day calculation excludes weekend days and Public/Company holidays
    - Short leave is measured in hours and drawn from the Casual quota,
      overflowing to Unpaid
    - Balance is deducted on application and restored on rejection/cancellation
    """
    attachments = [
        Attachment(
            id=item.id or store.next_id("att"),
            name=item.name,
            size=item.size,
            type=item.type,
            url=item.url,
        )
        for item in leave_data.attachments
    ]
    leave = apply_leave(
        store,
        user_id=current_user.id,
        leave_type=leave_data.type,
        start_date=leave_data.start_date,
        end_date=leave_data.end_date,
        reason=leave_data.reason,
        nature=leave_data.nature,
        is_short=leave_data.is_short,
        start_time=leave_data.start_time,
        end_time=leave_data.end_time,
        attachments=attachments,
        duration=leave_data.duration,
    )
    return LeaveOut.model_validate(leave)


@router.get("/my", response_model=LeaveListResponse)
def list_my_leaves_endpoint(
    status: Optional[LeaveStatus] = Query(None, description="Filter by status"),
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    """List current user's leave requests (all statuses including Cancelled), newest first."""
    return _list_response(list_user_leaves(store, current_user.id, status=status))


@router.get("/pending", response_model=LeaveListResponse)
def list_pending_leaves_endpoint(
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    """
    List pending leave requests waiting on the current user

    Includes requests of approvers who have an active delegation to the current user.
    """
    return _list_response(get_pending_approvals(store, current_user.id))


@router.get("/history", response_model=LeaveListResponse)
def list_approval_history_endpoint(
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    """List requests the current user has acted on, newest first."""
    return _list_response(get_approval_history(store, current_user.id))


@router.get("/{leave_id}", response_model=LeaveOut)
def get_leave_endpoint(
    leave_id: str,
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    """Get one leave request with its approval chain"""
    return LeaveOut.model_validate(get_leave(store, leave_id))


@router.post("/{leave_id}/approve", response_model=LeaveOut)
def approve_leave_endpoint(
    leave_id: str,
    approval_data: ApprovalActionRequest,
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    """
    Approve a leave request

    Only the current approver (or their active delegate) may act.
    - MD/Director approvals, or is_final_decision=true from HR, close the chain (Approved)
    - Otherwise the step is recorded as Recommended and forwarded to the next approver
    - is_final_decision from any other role is refused (403)
    """
    leave = approve_leave(
        store,
        leave_id=leave_id,
        approver_id=current_user.id,
        remarks=approval_data.remarks,
        is_final_decision=approval_data.is_final_decision,
        expected_version=approval_data.expected_version,
    )
    return LeaveOut.model_validate(leave)


@router.post("/{leave_id}/reject", response_model=LeaveOut)
def reject_leave_endpoint(
    leave_id: str,
    reject_data: ApprovalActionRequest,
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    """
    Reject a leave request

    - HR/MD/Director rejections close the chain (Rejected)
      and restore the balance
    - Otherwise the step is recorded as Not Recommended and forwarded
    - is_final_decision from any other role is refused (403)
    """
    leave = reject_leave(
        store,
        leave_id=leave_id,
        approver_id=current_user.id,
        remarks=reject_data.remarks,
        is_final_decision=reject_data.is_final_decision,
        expected_version=reject_data.expected_version,
    )
    return LeaveOut.model_validate(leave)


@router.post("/{leave_id}/skip", response_model=LeaveOut)
def skip_leave_endpoint(
    leave_id: str,
    skip_data: SkipActionRequest,
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    """Pass a leave request to the next approver without a decision"""
    leave = skip_leave(
        store,
        leave_id=leave_id,
        approver_id=current_user.id,
        remarks=skip_data.remarks,
        expected_version=skip_data.expected_version,
    )
    return LeaveOut.model_validate(leave)


@router.post("/{leave_id}/cancel", response_model=LeaveOut)
def cancel_leave_endpoint(
    leave_id: str,
    cancel_data: CancelRequest,
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    """
    Cancel a Pending or Approved leave request

    The requester can cancel their own leave; HR/MD/Director can cancel any.
    The balance is restored.
    """
    leave = cancel_leave(
        store,
        leave_id=leave_id,
        actor_id=current_user.id,
        remarks=cancel_data.remarks,
        expected_version=cancel_data.expected_version,
    )
    return LeaveOut.model_validate(leave)


@router.patch("/{leave_id}/approvals/{approver_id}", response_model=LeaveOut)
def edit_approval_endpoint(
    leave_id: str,
    approver_id: str,
    edit_data: EditApprovalRequest,
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    """
    Rewrite an approver's latest decision on a leave request

    Approvers may edit their own decisions; HR/MD/Director may edit anyone's.
    Only final-authority decisions change the overall status and balance.
    """
    leave = edit_approval(
        store,
        leave_id=leave_id,
        approver_id=approver_id,
        new_status=edit_data.status,
        new_remarks=edit_data.remarks,
        actor_id=current_user.id,
        expected_version=edit_data.expected_version,
    )
    return LeaveOut.model_validate(leave)


@router.patch("/{leave_id}/unpaid-days", response_model=LeaveOut)
def update_unpaid_days_endpoint(
    leave_id: str,
    unpaid_data: UnpaidDaysRequest,
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    """Adjust the unpaid (LWP) portion of a request (HR/MD/Director)"""
    leave = update_unpaid_leave_days(
        store,
        leave_id=leave_id,
        days=unpaid_data.days,
        actor_id=current_user.id,
        expected_version=unpaid_data.expected_version,
    )
    return LeaveOut.model_validate(leave)
