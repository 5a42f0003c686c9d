"""
Leave service - leave request lifecycle

Creation (duration, nature, deduction) and every status transition: approve,
reject, skip, cancel, approval edits and unpaid-day adjustments. All checks run
before the first mutation, so a raised error leaves the store untouched.
"""
import logging
from datetime import date, datetime, time
from typing import List, Optional

from leaveflow.core.config import settings
from leaveflow.core.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    PreconditionFailedError,
    RoutingConfigurationError,
    ValidationError,
)
from leaveflow.db.store import LeaveStore
from leaveflow.models import (
    ApprovalStep,
    Attachment,
    BalanceDeduction,
    ChainStatus,
    Decision,
    LeaveNature,
    LeaveRequest,
    LeaveStatus,
    LeaveType,
    TERMINAL_LEAVE_STATUSES,
)
from leaveflow.services import balance_service as ledger
from leaveflow.services.approval_chain import (
    ensure_can_act,
    resolve_initial_approver,
    resolve_next_approver,
)
from leaveflow.services.audit_service import log_audit
from leaveflow.services.employee_service import get_user
from leaveflow.services.holiday_service import count_working_days
from leaveflow.services.notification_service import notify_approval_required, notify_decision
from leaveflow.utils.datetime_utils import ensure_utc, now_utc

logger = logging.getLogger(__name__)

# Statuses from which a request may still be cancelled
CANCELLABLE_LEAVE_STATUSES = frozenset({LeaveStatus.PENDING, LeaveStatus.APPROVED})


def get_leave(store: LeaveStore, leave_id: str) -> LeaveRequest:
    """
    Get a leave request by ID

    Raises:
        NotFoundError: If the request does not exist
    """
    leave = store.leaves.get(leave_id)
    if leave is None:
        raise NotFoundError(f"Leave request with id {leave_id} not found")
    return leave


def _check_version(leave: LeaveRequest, expected_version: Optional[int]) -> None:
    if expected_version is not None and expected_version != leave.version:
        raise ConflictError(
            f"Leave request {leave.id} was modified (expected version {expected_version}, "
            f"current version {leave.version})"
        )


def _touch(leave: LeaveRequest, now: datetime) -> None:
    leave.version += 1
    leave.updated_at = now


def _unpaid_portion(leave_type: LeaveType, deduction: BalanceDeduction, days: float) -> float:
    if deduction.nature != LeaveNature.UNPAID:
        return 0.0
    if leave_type == LeaveType.SHORT:
        return ledger.uncovered_hours(deduction)
    return days


def _ensure_counted(store: LeaveStore, leave: LeaveRequest) -> None:
    if leave.is_counted:
        return
    leave.deduction = ledger.deduct(
        store, leave.user_id, leave.type, leave.nature, leave.days_calculated
    )
    # Short leave nature is re-resolved against the current balance
    if leave.type == LeaveType.SHORT:
        leave.nature = leave.deduction.nature
        leave.unpaid_leave_days = _unpaid_portion(leave.type, leave.deduction, leave.days_calculated)


def _ensure_restored(store: LeaveStore, leave: LeaveRequest) -> None:
    if leave.is_counted:
        ledger.restore(store, leave.user_id, leave.deduction)
        leave.deduction = None


def _sync_balance(store: LeaveStore, leave: LeaveRequest) -> None:
    """Rejected/Cancelled requests are never counted; Approved ones always are."""
    if leave.status in (LeaveStatus.REJECTED, LeaveStatus.CANCELLED):
        _ensure_restored(store, leave)
    elif leave.status == LeaveStatus.APPROVED:
        _ensure_counted(store, leave)


def calculate_duration(
    store: LeaveStore,
    leave_type: LeaveType,
    start_date: date,
    end_date: date,
    start_time: Optional[time] = None,
    end_time: Optional[time] = None,
) -> float:
    """
    Calculate the quantity a request consumes

    - Short leave: hours between start_time and end_time on a single day,
      never negative. The dates do not add hours.
    - Regular leave with both times: exact fractional days, 2 decimals.
    - Regular leave otherwise: inclusive days excluding weekend days and
      Public/Company holidays.

    Raises:
        ValidationError: If Short leave has no time range
    """
    if leave_type == LeaveType.SHORT:
        if start_time is None or end_time is None:
            raise ValidationError("Short leave requires start_time and end_time")
        delta = datetime.combine(start_date, end_time) - datetime.combine(start_date, start_time)
        return round(max(0.0, delta.total_seconds() / 3600), 2)

    if start_time is not None and end_time is not None:
        delta = datetime.combine(end_date, end_time) - datetime.combine(start_date, start_time)
        return round(max(0.0, delta.total_seconds() / 86400), 2)

    return count_working_days(store, start_date, end_date)


def apply_leave(
    store: LeaveStore,
    user_id: str,
    leave_type: LeaveType,
    start_date: date,
    end_date: date,
    reason: str,
    nature: Optional[LeaveNature] = None,
    is_short: bool = False,
    start_time: Optional[time] = None,
    end_time: Optional[time] = None,
    attachments: Optional[List[Attachment]] = None,
    duration: Optional[float] = None,
    now: Optional[datetime] = None,
) -> LeaveRequest:
    """
    Apply for leave (creates a Pending request and deducts the balance)

    Args:
        store: Leave store
        user_id: Requester
        leave_type: Regular or Short
        start_date: First day of leave
        end_date: Last day of leave (inclusive)
        reason: Free-text reason
        nature: Required for Regular leave; resolved by the ledger for Short leave
        is_short: Forces Short leave
        start_time: Start of the time range (Short leave, or fractional Regular leave)
        end_time: End of the time range
        attachments: Attachment metadata
        duration: Explicit quantity (days or hours) overriding the calculation
        now: Creation timestamp (defaults to the current UTC time)

    Returns:
        Created LeaveRequest

    Raises:
        NotFoundError: If the user does not exist
        ValidationError: If the input is invalid or the leave covers no working days
        RoutingConfigurationError: If no initial approver can be resolved
    """
    now = ensure_utc(now) if now else now_utc()
    if is_short:
        leave_type = LeaveType.SHORT

    with store.lock:
        user = get_user(store, user_id)

        if not reason or not reason.strip():
            raise ValidationError("Reason is required")
        if start_date > end_date:
            raise ValidationError("start_date must be on or before end_date")
        if leave_type == LeaveType.REGULAR and nature is None:
            raise ValidationError("Regular leave requires a nature")
        if duration is not None and duration < 0:
            raise ValidationError("duration must not be negative")

        if duration is not None:
            days = round(float(duration), 2)
        else:
            days = calculate_duration(store, leave_type, start_date, end_date, start_time, end_time)

        if leave_type == LeaveType.REGULAR and days <= 0:
            raise ValidationError(
                f"Leave from {start_date} to {end_date} does not cover any working day"
            )

        approver_id = resolve_initial_approver(store, user)
        if approver_id is None:
            raise RoutingConfigurationError(
                f"No approver could be resolved for user {user_id}; configure approvers or an HR user"
            )

        deduction = ledger.deduct(store, user_id, leave_type, nature, days)
        resolved_nature = deduction.nature

        unpaid = _unpaid_portion(leave_type, deduction, days)

        leave = LeaveRequest(
            id=store.next_id("l"),
            user_id=user_id,
            type=leave_type,
            nature=resolved_nature,
            start_date=start_date,
            end_date=end_date,
            start_time=start_time,
            end_time=end_time,
            reason=reason.strip(),
            status=LeaveStatus.PENDING,
            current_approver_id=approver_id,
            days_calculated=days,
            unpaid_leave_days=unpaid,
            attachments=list(attachments or []),
            created_at=now,
            updated_at=now,
            deduction=deduction,
        )
        store.leaves[leave.id] = leave

        logger.info(
            "leave applied: leave_id=%s user_id=%s type=%s nature=%s days=%s approver=%s",
            leave.id, user_id, leave_type.value,
            resolved_nature.value if resolved_nature else None, days, approver_id,
        )
        log_audit(
            store,
            user_id,
            "LEAVE_APPLY",
            "leave_requests",
            leave.id,
            {
                "type": leave_type,
                "nature": resolved_nature,
                "start_date": start_date,
                "end_date": end_date,
                "days_calculated": days,
                "unpaid_leave_days": unpaid,
                "current_approver_id": approver_id,
            },
        )
        notify_approval_required(store, leave)

    return leave


def _decide(
    store: LeaveStore,
    leave_id: str,
    actor_id: str,
    decision: Decision,
    remarks: Optional[str],
    is_final_decision: bool,
    expected_version: Optional[int],
    now: Optional[datetime],
) -> LeaveRequest:
    now = ensure_utc(now) if now else now_utc()

    with store.lock:
        leave = get_leave(store, leave_id)
        _check_version(leave, expected_version)
        actor = ensure_can_act(store, actor_id, leave, now)
        role = get_user(store, actor.acting_as_id).role
        if is_final_decision and not role.can_finalize():
            raise ForbiddenError("Only HR, MD or Director can take a final decision")

        if decision == Decision.APPROVE:
            final = is_final_decision or role.is_final()
        elif decision == Decision.REJECT:
            final = is_final_decision or role.finalizes_rejection()
        else:
            final = False

        next_approver_id = None
        if not final:
            next_approver_id = resolve_next_approver(store, leave, actor.acting_as_id)
            if next_approver_id is None:
                if decision == Decision.SKIP:
                    raise PreconditionFailedError(
                        f"Leave request {leave_id} has no further approver to skip to"
                    )
                if decision == Decision.APPROVE and settings.AUTO_APPROVE_ON_ROUTING_DEAD_END:
                    logger.warning(
                        "routing dead end resolved as approval: leave_id=%s acting_as=%s",
                        leave_id, actor.acting_as_id,
                    )
                    final = True
                else:
                    raise RoutingConfigurationError(
                        f"No next approver after {actor.acting_as_id} for leave request {leave_id}"
                    )

        if decision == Decision.SKIP and not remarks:
            remarks = "Skipped/Delegated" if actor.is_delegated else "Skipped"

        chain_status = ChainStatus.for_decision(decision, final)
        leave.approval_chain.append(
            ApprovalStep(
                approver_id=actor.real_id,
                status=chain_status,
                date=now,
                remarks=remarks,
                delegated_from_id=actor.acting_as_id if actor.is_delegated else None,
            )
        )

        before_status = leave.status
        if final:
            leave.status = LeaveStatus.APPROVED if decision == Decision.APPROVE else LeaveStatus.REJECTED
            leave.current_approver_id = None
            _sync_balance(store, leave)
        else:
            leave.current_approver_id = next_approver_id
        _touch(leave, now)

        logger.info(
            "leave status transition: leave_id=%s before=%s after=%s action=%s chain_status=%s "
            "actor=%s acting_as=%s next_approver=%s",
            leave_id, before_status.value, leave.status.value, decision.value, chain_status.value,
            actor.real_id, actor.acting_as_id, leave.current_approver_id,
        )
        log_audit(
            store,
            actor.real_id,
            f"LEAVE_{decision.value.upper()}",
            "leave_requests",
            leave_id,
            {
                "chain_status": chain_status,
                "final": final,
                "acting_as": actor.acting_as_id,
                "before": before_status,
                "after": leave.status,
                "next_approver_id": leave.current_approver_id,
                "remarks": remarks,
            },
        )
        if final:
            notify_decision(store, leave, get_user(store, actor.real_id).name)
        else:
            notify_approval_required(store, leave, forwarded=True)

    return leave


def approve_leave(
    store: LeaveStore,
    leave_id: str,
    approver_id: str,
    remarks: Optional[str] = None,
    is_final_decision: bool = False,
    expected_version: Optional[int] = None,
    now: Optional[datetime] = None,
) -> LeaveRequest:
    """
    Approve (or recommend) a leave request

    Final when is_final_decision is set or the acting role closes the chain
    (MD/Director); otherwise recorded as Recommended and forwarded. Only HR,
    MD and Director authority may set is_final_decision.

    Raises:
        NotFoundError: If the request or approver does not exist
        ForbiddenError: If the approver may not act on the request, or sets
            is_final_decision without final authority
        PreconditionFailedError: If the request is not Pending
        RoutingConfigurationError: If no next approver resolves
        ConflictError: If expected_version is stale
    """
    return _decide(store, leave_id, approver_id, Decision.APPROVE, remarks, is_final_decision, expected_version, now)


def reject_leave(
    store: LeaveStore,
    leave_id: str,
    approver_id: str,
    remarks: Optional[str] = None,
    is_final_decision: bool = False,
    expected_version: Optional[int] = None,
    now: Optional[datetime] = None,
) -> LeaveRequest:
    """
    Reject (or not-recommend) a leave request

    Final when is_final_decision is set or the acting role finalizes rejections
    (HR/MD/Director); a final rejection restores the balance. Otherwise recorded
    as Not Recommended and forwarded. is_final_decision needs the same final
    authority as in approve_leave.
    """
    return _decide(store, leave_id, approver_id, Decision.REJECT, remarks, is_final_decision, expected_version, now)


def skip_leave(
    store: LeaveStore,
    leave_id: str,
    approver_id: str,
    remarks: Optional[str] = None,
    expected_version: Optional[int] = None,
    now: Optional[datetime] = None,
) -> LeaveRequest:
    """
    Pass a request on without a decision

    Raises:
        PreconditionFailedError: If there is no next approver to pass to
    """
    return _decide(store, leave_id, approver_id, Decision.SKIP, remarks, False, expected_version, now)


def cancel_leave(
    store: LeaveStore,
    leave_id: str,
    actor_id: Optional[str] = None,
    remarks: Optional[str] = None,
    expected_version: Optional[int] = None,
    now: Optional[datetime] = None,
) -> LeaveRequest:
    """
    Cancel a Pending or Approved request and restore its balance

    The requester may cancel their own request; final-authority roles may
    cancel anyone's. actor_id=None is a system cancellation.

    Raises:
        ForbiddenError: If the actor may not cancel the request
        PreconditionFailedError: If the request is Rejected or already Cancelled
    """
    now = ensure_utc(now) if now else now_utc()

    with store.lock:
        leave = get_leave(store, leave_id)
        _check_version(leave, expected_version)
        if actor_id is not None:
            actor = get_user(store, actor_id)
            if actor_id != leave.user_id and not actor.role.can_finalize():
                raise ForbiddenError(f"User {actor_id} may not cancel leave request {leave_id}")
        if leave.status not in CANCELLABLE_LEAVE_STATUSES:
            raise PreconditionFailedError(
                f"Cannot cancel leave request with status {leave.status.value}"
            )

        before_status = leave.status
        leave.status = LeaveStatus.CANCELLED
        leave.current_approver_id = None
        _sync_balance(store, leave)
        _touch(leave, now)

        logger.info(
            "leave status transition: leave_id=%s before=%s after=CANCELLED action=cancel actor=%s",
            leave_id, before_status.value, actor_id,
        )
        log_audit(
            store,
            actor_id,
            "LEAVE_CANCEL",
            "leave_requests",
            leave_id,
            {"before": before_status, "remarks": remarks},
        )
        if actor_id is not None and actor_id != leave.user_id:
            notify_decision(store, leave, get_user(store, actor_id).name)

    return leave


def _latest_step_index(leave: LeaveRequest, approver_id: str) -> Optional[int]:
    for index in range(len(leave.approval_chain) - 1, -1, -1):
        if leave.approval_chain[index].approver_id == approver_id:
            return index
    return None


def edit_approval(
    store: LeaveStore,
    leave_id: str,
    approver_id: str,
    new_status: ChainStatus,
    new_remarks: Optional[str] = None,
    actor_id: Optional[str] = None,
    expected_version: Optional[int] = None,
    now: Optional[datetime] = None,
) -> LeaveRequest:
    """
    Rewrite an approver's most recent decision and reconcile the request

    Only steps that held final authority move the overall status (to
    Approved/Rejected, or back to Pending for Skipped) and the balance.
    Non-final steps change their own record; when the edited step is the
    latest one on a Pending request the current approver is re-resolved.

    Args:
        store: Leave store
        leave_id: Request to edit
        approver_id: Approver whose step is rewritten
        new_status: Approved, Rejected or Skipped (Recommended/Not Recommended map to approve/reject)
        new_remarks: Replacement remarks (None keeps the existing remarks)
        actor_id: User making the edit; must be approver_id or a final-authority role
        expected_version: Optimistic concurrency stamp
        now: Edit timestamp

    Raises:
        NotFoundError: If the request or the approver's step does not exist
        ForbiddenError: If actor_id may not edit this step
        PreconditionFailedError: If the request is Cancelled
        RoutingConfigurationError: If re-routing finds no approver
    """
    now = ensure_utc(now) if now else now_utc()

    with store.lock:
        leave = get_leave(store, leave_id)
        _check_version(leave, expected_version)
        if actor_id is not None and actor_id != approver_id:
            if not get_user(store, actor_id).role.can_finalize():
                raise ForbiddenError(f"User {actor_id} may not edit decisions of {approver_id}")
        if leave.status == LeaveStatus.CANCELLED:
            raise PreconditionFailedError(f"Cannot edit approvals of cancelled leave request {leave_id}")

        index = _latest_step_index(leave, approver_id)
        if index is None:
            raise NotFoundError(f"No approval by {approver_id} on leave request {leave_id}")
        step = leave.approval_chain[index]

        old_status = step.status
        new_decision = new_status.decision
        before_status = leave.status

        if new_decision == old_status.decision:
            if new_remarks is not None:
                step.remarks = new_remarks
            _touch(leave, now)
            log_audit(
                store, actor_id or approver_id, "LEAVE_APPROVAL_EDIT", "leave_requests", leave_id,
                {"approver_id": approver_id, "remarks_only": True},
            )
            return leave

        acting_as_id = step.delegated_from_id or step.approver_id
        acting = store.users.get(acting_as_id)
        role = acting.role if acting else None
        if role is None:
            role_finalizes = False
        elif new_decision == Decision.APPROVE:
            role_finalizes = role.is_final()
        elif new_decision == Decision.REJECT:
            role_finalizes = role.finalizes_rejection()
        else:
            role_finalizes = False
        holds_final = old_status.is_final or role_finalizes

        # Resolve routing before touching anything
        next_approver_id = None
        reroute = (
            new_decision == Decision.SKIP and holds_final
        ) or (
            not holds_final
            and leave.status == LeaveStatus.PENDING
            and index == len(leave.approval_chain) - 1
        )
        if reroute:
            next_approver_id = resolve_next_approver(store, leave, acting_as_id)
            if next_approver_id is None:
                raise RoutingConfigurationError(
                    f"No next approver after {acting_as_id} for leave request {leave_id}"
                )

        if holds_final:
            step.status = ChainStatus.for_decision(new_decision, final=True)
            if new_decision == Decision.APPROVE:
                leave.status = LeaveStatus.APPROVED
                leave.current_approver_id = None
                _ensure_counted(store, leave)
            elif new_decision == Decision.REJECT:
                leave.status = LeaveStatus.REJECTED
                leave.current_approver_id = None
                _ensure_restored(store, leave)
            else:
                leave.status = LeaveStatus.PENDING
                leave.current_approver_id = next_approver_id
                if old_status.decision == Decision.APPROVE:
                    _ensure_restored(store, leave)
        else:
            step.status = ChainStatus.for_decision(new_decision, final=False)
            if reroute:
                leave.current_approver_id = next_approver_id

        if new_remarks is not None:
            step.remarks = new_remarks
        step.date = now
        _sync_balance(store, leave)
        _touch(leave, now)

        logger.info(
            "leave approval edited: leave_id=%s approver_id=%s step %s -> %s status %s -> %s final_authority=%s",
            leave_id, approver_id, old_status.value, step.status.value,
            before_status.value, leave.status.value, holds_final,
        )
        log_audit(
            store,
            actor_id or approver_id,
            "LEAVE_APPROVAL_EDIT",
            "leave_requests",
            leave_id,
            {
                "approver_id": approver_id,
                "before_step": old_status,
                "after_step": step.status,
                "before": before_status,
                "after": leave.status,
                "final_authority": holds_final,
                "current_approver_id": leave.current_approver_id,
            },
        )
        if leave.status != before_status and leave.status in TERMINAL_LEAVE_STATUSES:
            notify_decision(store, leave, get_user(store, step.approver_id).name)
        elif next_approver_id is not None:
            notify_approval_required(store, leave, forwarded=True)

    return leave


def update_unpaid_leave_days(
    store: LeaveStore,
    leave_id: str,
    days: float,
    actor_id: str,
    expected_version: Optional[int] = None,
    now: Optional[datetime] = None,
) -> LeaveRequest:
    """
    Set the unpaid (LWP) portion of a request, clamped to [0, days_calculated]

    Raises:
        ForbiddenError: If the actor's role cannot take final-authority actions
    """
    now = ensure_utc(now) if now else now_utc()

    with store.lock:
        leave = get_leave(store, leave_id)
        _check_version(leave, expected_version)
        actor = get_user(store, actor_id)
        if not actor.role.can_finalize():
            raise ForbiddenError("Only HR, MD or Director can adjust unpaid leave days")

        before = leave.unpaid_leave_days
        leave.unpaid_leave_days = round(min(max(0.0, float(days)), leave.days_calculated), 2)
        _touch(leave, now)

        logger.info(
            "unpaid leave days updated: leave_id=%s before=%s after=%s actor=%s",
            leave_id, before, leave.unpaid_leave_days, actor_id,
        )
        log_audit(
            store, actor_id, "LEAVE_UNPAID_DAYS_UPDATE", "leave_requests", leave_id,
            {"before": before, "after": leave.unpaid_leave_days, "requested": days},
        )

    return leave
