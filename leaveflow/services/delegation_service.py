"""
Delegation registry - time-scoped "who may act as me" records

History entries are kept newest first. Only scheduled entries can be deleted,
active entries can only be shortened or extended, and past entries are an
immutable audit trail.
"""
import logging
from datetime import datetime
from typing import List, Optional

from leaveflow.core.config import settings
from leaveflow.core.errors import NotFoundError, PreconditionFailedError, ValidationError
from leaveflow.db.store import LeaveStore
from leaveflow.models import DelegationHistory, DelegationState, User
from leaveflow.services.audit_service import log_audit
from leaveflow.services.employee_service import get_user
from leaveflow.utils.datetime_utils import ensure_utc, now_utc

logger = logging.getLogger(__name__)


def delegation_state(entry: DelegationHistory, now: Optional[datetime] = None) -> DelegationState:
    return entry.state(now or now_utc())


def get_delegation(store: LeaveStore, user_id: str, history_id: str) -> DelegationHistory:
    """
    Get one delegation history entry of a user

    Raises:
        NotFoundError: If the user or the entry does not exist
    """
    user = get_user(store, user_id)
    for entry in user.delegation_history:
        if entry.id == history_id:
            return entry
    raise NotFoundError(f"Delegation {history_id} not found for user {user_id}")


def list_delegations(store: LeaveStore, user_id: str) -> List[DelegationHistory]:
    return list(get_user(store, user_id).delegation_history)


def _validate_window(start: datetime, end: datetime) -> None:
    if start > end:
        raise ValidationError("Delegation start must not be after its end")


def _validate_delegate(store: LeaveStore, user_id: str, delegate_id: str) -> None:
    if delegate_id == user_id:
        raise ValidationError("A user cannot delegate to themselves")
    get_user(store, delegate_id)


def _precondition_failed(message: str) -> None:
    """Raise, or log and continue when preconditions are not strict."""
    logger.warning(message)
    if settings.STRICT_PRECONDITIONS:
        raise PreconditionFailedError(message)


def add_delegation(
    store: LeaveStore,
    user_id: str,
    delegate_id: str,
    start: datetime,
    end: datetime,
    now: Optional[datetime] = None,
) -> DelegationHistory:
    """
    Grant delegate_id the user's approval authority between start and end

    The new entry is prepended to the history and the legacy single-field
    delegation is cleared.

    Raises:
        NotFoundError: If either user does not exist
        ValidationError: If the window is inverted or the user delegates to themselves
    """
    start = ensure_utc(start)
    end = ensure_utc(end)
    with store.lock:
        user = get_user(store, user_id)
        _validate_delegate(store, user_id, delegate_id)
        _validate_window(start, end)

        entry = DelegationHistory(
            id=store.next_id("dh-"),
            delegated_to_id=delegate_id,
            start_date=start,
            end_date=end,
            assigned_at=ensure_utc(now) if now else now_utc(),
        )
        user.delegation_history.insert(0, entry)
        user.clear_legacy_delegation()

    logger.info(
        "delegation added: user_id=%s delegate_id=%s history_id=%s start=%s end=%s",
        user_id, delegate_id, entry.id, start.isoformat(), end.isoformat(),
    )
    log_audit(
        store,
        user_id,
        "DELEGATION_ADD",
        "delegations",
        entry.id,
        {"delegate_id": delegate_id, "start": start, "end": end},
    )
    return entry


def cancel_delegation(
    store: LeaveStore,
    user_id: str,
    history_id: str,
    now: Optional[datetime] = None,
) -> bool:
    """
    Delete a scheduled delegation entry

    Returns:
        True if the entry was removed, False for a tolerated no-op

    Raises:
        PreconditionFailedError: If the entry has already started (strict mode)
    """
    now = ensure_utc(now) if now else now_utc()
    with store.lock:
        user = get_user(store, user_id)
        entry = get_delegation(store, user_id, history_id)
        state = entry.state(now)
        if state != DelegationState.SCHEDULED:
            _precondition_failed(
                f"Cannot cancel delegation {history_id}: it is {state.value}, only scheduled delegations can be cancelled"
            )
            return False
        user.delegation_history = [e for e in user.delegation_history if e.id != history_id]

    logger.info("delegation cancelled: user_id=%s history_id=%s", user_id, history_id)
    log_audit(store, user_id, "DELEGATION_CANCEL", "delegations", history_id)
    return True


def stop_delegation(
    store: LeaveStore,
    user_id: str,
    history_id: str,
    now: Optional[datetime] = None,
) -> DelegationHistory:
    """
    End an active delegation now

    Raises:
        PreconditionFailedError: If the entry is not active (strict mode)
    """
    now = ensure_utc(now) if now else now_utc()
    with store.lock:
        entry = get_delegation(store, user_id, history_id)
        state = entry.state(now)
        if state != DelegationState.ACTIVE:
            _precondition_failed(
                f"Cannot stop delegation {history_id}: it is {state.value}, only active delegations can be stopped"
            )
            return entry
        entry.end_date = now

    logger.info("delegation stopped: user_id=%s history_id=%s at=%s", user_id, history_id, now.isoformat())
    log_audit(store, user_id, "DELEGATION_STOP", "delegations", history_id, {"end": now})
    return entry


def extend_delegation(
    store: LeaveStore,
    user_id: str,
    history_id: str,
    new_end: datetime,
    now: Optional[datetime] = None,
) -> DelegationHistory:
    """
    Move the end of a scheduled or active delegation

    Raises:
        PreconditionFailedError: If the entry is already past
        ValidationError: If new_end is before the entry's start
    """
    now = ensure_utc(now) if now else now_utc()
    new_end = ensure_utc(new_end)
    with store.lock:
        entry = get_delegation(store, user_id, history_id)
        if entry.state(now) == DelegationState.PAST:
            raise PreconditionFailedError(f"Delegation {history_id} has ended and cannot be extended")
        _validate_window(entry.start_date, new_end)
        before = entry.end_date
        entry.end_date = new_end

    logger.info(
        "delegation extended: user_id=%s history_id=%s before=%s after=%s",
        user_id, history_id, before.isoformat(), new_end.isoformat(),
    )
    log_audit(
        store, user_id, "DELEGATION_EXTEND", "delegations", history_id,
        {"before": before, "after": new_end},
    )
    return entry


def update_delegation(
    store: LeaveStore,
    user_id: str,
    history_id: str,
    delegate_id: str,
    start: datetime,
    end: datetime,
    now: Optional[datetime] = None,
) -> DelegationHistory:
    """
    Rewrite the delegate and window of a scheduled or active delegation

    The entry keeps its ID and position in the history.

    Raises:
        PreconditionFailedError: If the entry is already past
    """
    now = ensure_utc(now) if now else now_utc()
    start = ensure_utc(start)
    end = ensure_utc(end)
    with store.lock:
        entry = get_delegation(store, user_id, history_id)
        if entry.state(now) == DelegationState.PAST:
            raise PreconditionFailedError(f"Delegation {history_id} has ended and cannot be edited")
        _validate_delegate(store, user_id, delegate_id)
        _validate_window(start, end)
        entry.delegated_to_id = delegate_id
        entry.start_date = start
        entry.end_date = end

    logger.info(
        "delegation updated: user_id=%s history_id=%s delegate_id=%s start=%s end=%s",
        user_id, history_id, delegate_id, start.isoformat(), end.isoformat(),
    )
    log_audit(
        store, user_id, "DELEGATION_UPDATE", "delegations", history_id,
        {"delegate_id": delegate_id, "start": start, "end": end},
    )
    return entry


def _legacy_delegate(user: User, now: datetime) -> Optional[str]:
    if not user.delegated_to or not user.delegation_start_date or not user.delegation_end_date:
        return None
    if ensure_utc(user.delegation_start_date) <= now <= ensure_utc(user.delegation_end_date):
        return user.delegated_to
    return None


def resolve_active_delegate(
    store: LeaveStore,
    user_id: str,
    now: Optional[datetime] = None,
) -> Optional[str]:
    """
    Delegate currently acting for user_id, or None

    With overlapping active entries the most recently assigned one wins.
    The legacy single-field delegation is only consulted when no history entry
    is active.
    """
    now = ensure_utc(now) if now else now_utc()
    user = store.users.get(user_id)
    if user is None:
        return None
    for entry in user.delegation_history:
        if entry.is_active(now):
            return entry.delegated_to_id
    return _legacy_delegate(user, now)


def has_active_delegation(
    store: LeaveStore,
    delegator_id: str,
    delegate_id: str,
    now: Optional[datetime] = None,
) -> bool:
    """True if any active entry of delegator_id names delegate_id."""
    now = ensure_utc(now) if now else now_utc()
    delegator = store.users.get(delegator_id)
    if delegator is None:
        return False
    for entry in delegator.delegation_history:
        if entry.delegated_to_id == delegate_id and entry.is_active(now):
            return True
    return _legacy_delegate(delegator, now) == delegate_id


def list_active_delegators(
    store: LeaveStore,
    delegate_id: str,
    now: Optional[datetime] = None,
) -> List[str]:
    """IDs of every user who has actively delegated to delegate_id."""
    now = ensure_utc(now) if now else now_utc()
    return [
        user.id
        for user in store.users.values()
        if user.id != delegate_id and has_active_delegation(store, user.id, delegate_id, now)
    ]
