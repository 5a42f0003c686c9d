"""
Approval chain engine - who acts on a leave request next

Routing order: the requester's sequential approvers, then HR, then the top
executive (MD/Director). Only HR may hand a request to an executive; every
other path is intercepted and sent to HR first. A request from the only HR
user skips the HR step.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from leaveflow.core.errors import ForbiddenError, PreconditionFailedError
from leaveflow.db.store import LeaveStore
from leaveflow.models import LeaveRequest, LeaveStatus, Role, User
from leaveflow.services.delegation_service import has_active_delegation
from leaveflow.services.employee_service import find_executive, find_hr_user, get_user

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EffectiveActor:
    """The user who clicked (real_id) and the authority they used (acting_as_id)."""

    real_id: str
    acting_as_id: str

    @property
    def is_delegated(self) -> bool:
        return self.real_id != self.acting_as_id


def resolve_acting_identity(
    store: LeaveStore,
    actor_id: str,
    leave: LeaveRequest,
    now: Optional[datetime] = None,
) -> EffectiveActor:
    """
    Work out whose authority an approval action carries

    If the request's current approver has an active delegation to actor_id,
    the actor acts as that approver; otherwise as themselves.
    """
    current = leave.current_approver_id
    if current and current != actor_id and has_active_delegation(store, current, actor_id, now):
        return EffectiveActor(real_id=actor_id, acting_as_id=current)
    return EffectiveActor(real_id=actor_id, acting_as_id=actor_id)


def ensure_can_act(
    store: LeaveStore,
    actor_id: str,
    leave: LeaveRequest,
    now: Optional[datetime] = None,
) -> EffectiveActor:
    """
    Validate that actor_id may approve/reject/skip the request right now

    Raises:
        NotFoundError: If the actor does not exist
        PreconditionFailedError: If the request is not Pending
        ForbiddenError: If the actor is neither the current approver nor its active delegate
    """
    get_user(store, actor_id)
    if leave.status != LeaveStatus.PENDING:
        raise PreconditionFailedError(
            f"Cannot act on leave request {leave.id} with status {leave.status.value}"
        )
    actor = resolve_acting_identity(store, actor_id, leave, now)
    if actor.acting_as_id != leave.current_approver_id:
        raise ForbiddenError(
            f"User {actor_id} is not the current approver of leave request {leave.id}"
        )
    return actor


def _intercept(
    store: LeaveStore,
    candidate_id: Optional[str],
    acting_role: Optional[Role],
    requester: User,
) -> Optional[str]:
    """Send executive-bound requests through HR unless HR is the one forwarding."""
    if candidate_id is None:
        return None
    candidate = store.users.get(candidate_id)
    if candidate is None or not candidate.role.is_executive:
        return candidate_id
    if acting_role is not None and acting_role.intercepts_executive_routing():
        return candidate_id

    hr = find_hr_user(store, exclude=requester.id)
    if hr is None:
        # The requester is the only HR user and cannot review their own request
        if requester.role.intercepts_executive_routing():
            return candidate_id
        logger.warning(
            "routing dead end: executive %s reachable only through HR and no HR user exists", candidate_id
        )
        return None
    logger.debug("routing intercepted: executive=%s redirected to hr=%s", candidate_id, hr.id)
    return hr.id


def _fallback_approver(store: LeaveStore, acting_role: Optional[Role], requester: User) -> Optional[str]:
    if acting_role is not None and acting_role.intercepts_executive_routing():
        executive = find_executive(store, exclude=requester.id)
        return executive.id if executive else None
    hr = find_hr_user(store, exclude=requester.id)
    if hr is None and requester.role.intercepts_executive_routing():
        executive = find_executive(store, exclude=requester.id)
        return executive.id if executive else None
    return hr.id if hr else None


def resolve_initial_approver(store: LeaveStore, requester: User) -> Optional[str]:
    """First approver of a new request: first sequential approver, else HR (executive for HR requesters)."""
    if requester.sequential_approvers:
        candidate = requester.sequential_approvers[0]
    else:
        candidate = _fallback_approver(store, requester.role, requester)
    return _intercept(store, candidate, requester.role, requester)


def resolve_next_approver(
    store: LeaveStore,
    leave: LeaveRequest,
    acting_as_id: str,
) -> Optional[str]:
    """
    Next responsible approver after acting_as_id has recommended or skipped

    Args:
        store: Leave store
        leave: Request being routed
        acting_as_id: Identity whose authority was used (the delegator when delegated)

    Returns:
        User ID of the next approver, or None when routing reaches a dead end
    """
    requester = get_user(store, leave.user_id)
    acting = store.users.get(acting_as_id)
    acting_role = acting.role if acting else None

    sequence = requester.sequential_approvers
    candidate = None
    if acting_as_id in sequence:
        position = sequence.index(acting_as_id)
        if position < len(sequence) - 1:
            candidate = sequence[position + 1]

    if candidate is None:
        candidate = _fallback_approver(store, acting_role, requester)

    resolved = _intercept(store, candidate, acting_role, requester)
    if resolved is None:
        logger.warning(
            "routing dead end: leave_id=%s acting_as=%s role=%s",
            leave.id, acting_as_id, acting_role.value if acting_role else None,
        )
    return resolved
