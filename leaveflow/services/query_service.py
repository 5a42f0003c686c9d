"""
Query layer - read-only views over leave requests
"""
from datetime import datetime
from typing import List, Optional

from leaveflow.db.store import LeaveStore
from leaveflow.models import LeaveRequest, LeaveStatus
from leaveflow.services.delegation_service import list_active_delegators
from leaveflow.utils.datetime_utils import ensure_utc, now_utc


def get_pending_approvals(
    store: LeaveStore,
    actor_id: str,
    now: Optional[datetime] = None,
) -> List[LeaveRequest]:
    """
    Pending requests the actor may act on right now, oldest first

    Includes requests waiting on any user who has an active delegation to the actor.
    """
    now = ensure_utc(now) if now else now_utc()
    approver_ids = set(list_active_delegators(store, actor_id, now))
    approver_ids.add(actor_id)
    pending = [
        leave
        for leave in store.leaves.values()
        if leave.status == LeaveStatus.PENDING and leave.current_approver_id in approver_ids
    ]
    return sorted(pending, key=lambda leave: leave.created_at)


def get_approval_history(store: LeaveStore, actor_id: str) -> List[LeaveRequest]:
    """
    Requests the actor has acted on, newest first

    Includes steps taken by a delegate using the actor's authority.
    """
    acted = [
        leave
        for leave in store.leaves.values()
        if any(actor_id in (step.approver_id, step.delegated_from_id) for step in leave.approval_chain)
    ]
    return sorted(acted, key=lambda leave: leave.created_at, reverse=True)


def list_user_leaves(
    store: LeaveStore,
    user_id: str,
    status: Optional[LeaveStatus] = None,
) -> List[LeaveRequest]:
    """The user's own requests (all statuses unless filtered), newest first."""
    own = [leave for leave in store.leaves.values() if leave.user_id == user_id]
    if status is not None:
        own = [leave for leave in own if leave.status == status]
    return sorted(own, key=lambda leave: leave.created_at, reverse=True)
