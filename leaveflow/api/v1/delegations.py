"""
Delegation endpoints (acting on the current user's own delegations)
"""
from fastapi import APIRouter, Depends, Response

from leaveflow.core.deps import get_current_user, get_store
from leaveflow.db.store import LeaveStore
from leaveflow.models import User
from leaveflow.schemas.delegation import (
    DelegationCreate,
    DelegationExtend,
    DelegationListResponse,
    DelegationOut,
    DelegationUpdate,
)
from leaveflow.services.delegation_service import (
    add_delegation,
    cancel_delegation,
    extend_delegation,
    list_delegations,
    stop_delegation,
    update_delegation,
)
from leaveflow.utils.datetime_utils import now_utc

router = APIRouter()


@router.get("", response_model=DelegationListResponse)
def list_delegations_endpoint(
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    """List the current user's delegation history, newest first, with each entry's state"""
    now = now_utc()
    entries = list_delegations(store, current_user.id)
    return DelegationListResponse(
        items=[DelegationOut.from_entry(entry, now) for entry in entries],
        total=len(entries),
    )


@router.post("", response_model=DelegationOut, status_code=201)
def add_delegation_endpoint(
    data: DelegationCreate,
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    """
    Delegate approval authority to another user for a time window

    While active, the delegate sees and acts on requests waiting on the current user.
    """
    entry = add_delegation(store, current_user.id, data.delegate_id, data.start_date, data.end_date)
    return DelegationOut.from_entry(entry, now_utc())


@router.delete("/{history_id}", status_code=204)
def cancel_delegation_endpoint(
    history_id: str,
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    """Delete a delegation that has not started yet"""
    cancel_delegation(store, current_user.id, history_id)
    return Response(status_code=204)


@router.post("/{history_id}/stop", response_model=DelegationOut)
def stop_delegation_endpoint(
    history_id: str,
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    """End an active delegation now"""
    entry = stop_delegation(store, current_user.id, history_id)
    return DelegationOut.from_entry(entry, now_utc())


@router.post("/{history_id}/extend", response_model=DelegationOut)
def extend_delegation_endpoint(
    history_id: str,
    data: DelegationExtend,
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    """Move the end of a scheduled or active delegation"""
    entry = extend_delegation(store, current_user.id, history_id, data.end_date)
    return DelegationOut.from_entry(entry, now_utc())


@router.put("/{history_id}", response_model=DelegationOut)
def update_delegation_endpoint(
    history_id: str,
    data: DelegationUpdate,
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    """Rewrite the delegate and window of a scheduled or active delegation"""
    entry = update_delegation(
        store, current_user.id, history_id, data.delegate_id, data.start_date, data.end_date
    )
    return DelegationOut.from_entry(entry, now_utc())
