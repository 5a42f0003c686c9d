"""
Tests for approval routing, interception and acting identity
"""
from datetime import date, datetime, timedelta, timezone

import pytest

from leaveflow.core.errors import ForbiddenError, PreconditionFailedError
from leaveflow.models import LeaveNature, LeaveType, Role, User
from leaveflow.services.approval_chain import (
    ensure_can_act,
    resolve_acting_identity,
    resolve_initial_approver,
    resolve_next_approver,
)
from leaveflow.services.delegation_service import add_delegation
from leaveflow.services.employee_service import find_hr_user, update_user_approvers
from leaveflow.services.leave_service import apply_leave, approve_leave

NOW = datetime(2024, 7, 10, 12, 0, tzinfo=timezone.utc)


def apply_casual(store, user_id="u1"):
    return apply_leave(
        store,
        user_id=user_id,
        leave_type=LeaveType.REGULAR,
        start_date=date(2024, 7, 10),
        end_date=date(2024, 7, 11),
        reason="Family event",
        nature=LeaveNature.CASUAL,
        now=NOW,
    )


def test_initial_approver_is_first_sequential_approver(store):
    assert resolve_initial_approver(store, store.users["u1"]) == "u2"


def test_initial_approver_defaults_to_hr(store):
    assert resolve_initial_approver(store, store.users["u7"]) == "u4"


def test_hr_requester_goes_to_executive(store):
    assert resolve_initial_approver(store, store.users["u4"]) == "u5"


def test_executive_in_sequence_is_intercepted_by_hr(store):
    update_user_approvers(store, "u7", ["u5"])

    assert resolve_initial_approver(store, store.users["u7"]) == "u4"


def test_sequential_routing_then_hr(store):
    update_user_approvers(store, "u1", ["u2", "u3"])
    leave = apply_casual(store)

    assert leave.current_approver_id == "u2"
    assert resolve_next_approver(store, leave, "u2") == "u3"
    assert resolve_next_approver(store, leave, "u3") == "u4"


def test_hr_forwards_to_executive(store):
    leave = apply_casual(store)

    assert resolve_next_approver(store, leave, "u4") == "u5"


def test_no_executive_returned_unless_acting_as_hr(store):
    update_user_approvers(store, "u1", ["u2", "u6", "u3"])
    leave = apply_casual(store)

    for acting_as in ("u2", "u3", "u7"):
        next_id = resolve_next_approver(store, leave, acting_as)
        assert not store.users[next_id].role.is_executive
    # u2 would hand over to the Director; HR intercepts
    assert resolve_next_approver(store, leave, "u2") == "u4"


def test_interception_without_hr_is_dead_end(store):
    del store.users["u4"]
    update_user_approvers(store, "u7", ["u3"])
    leave = apply_casual(store, user_id="u7")

    assert resolve_next_approver(store, leave, "u3") is None


def test_requester_not_chosen_as_hr_fallback(store):
    store.add_user(User(id="u8", name="Second HR", role=Role.HR))
    leave = apply_casual(store, user_id="u4")

    # HR requester: the other HR user is preferred when an approver falls back to HR
    assert resolve_next_approver(store, leave, "u3") == "u8"


def test_only_hr_requester_never_routed_back_to_self(store):
    update_user_approvers(store, "u4", ["u3"])
    leave = apply_casual(store, user_id="u4")
    assert leave.current_approver_id == "u3"

    assert find_hr_user(store, exclude="u4") is None
    assert resolve_next_approver(store, leave, "u3") == "u5"

    approve_leave(store, leave.id, "u3", now=NOW)
    assert leave.current_approver_id == "u5"
    assert all(step.approver_id != "u4" for step in leave.approval_chain)


def test_sole_executive_requester_is_dead_end_after_hr(store):
    del store.users["u6"]
    leave = apply_casual(store, user_id="u5")
    assert leave.current_approver_id == "u4"

    assert resolve_next_approver(store, leave, "u4") is None


def test_acting_identity_for_active_delegate(store):
    leave = apply_casual(store)
    add_delegation(store, "u2", "u7", NOW - timedelta(hours=1), NOW + timedelta(hours=1), now=NOW)

    actor = resolve_acting_identity(store, "u7", leave, NOW)
    assert actor.real_id == "u7"
    assert actor.acting_as_id == "u2"
    assert actor.is_delegated

    own = resolve_acting_identity(store, "u2", leave, NOW)
    assert own.acting_as_id == "u2"
    assert not own.is_delegated


def test_expired_delegate_cannot_act(store):
    leave = apply_casual(store)
    add_delegation(store, "u2", "u7", NOW - timedelta(days=2), NOW - timedelta(days=1), now=NOW)

    with pytest.raises(ForbiddenError):
        ensure_can_act(store, "u7", leave, NOW)


def test_cannot_act_on_resolved_request(store):
    leave = apply_casual(store)
    leave.current_approver_id = "u5"
    approve_leave(store, leave.id, "u5", now=NOW)

    with pytest.raises(PreconditionFailedError):
        ensure_can_act(store, "u5", leave, NOW)
