"""
Tests for pending/history/my-leave queries and unpaid-day adjustments
"""
from datetime import date, datetime, timedelta, timezone

import pytest
from fastapi import status

from leaveflow.core.errors import ForbiddenError
from leaveflow.models import LeaveNature, LeaveStatus, LeaveType
from leaveflow.services.delegation_service import add_delegation
from leaveflow.services.leave_service import (
    apply_leave,
    approve_leave,
    cancel_leave,
    update_unpaid_leave_days,
)
from leaveflow.services.query_service import (
    get_approval_history,
    get_pending_approvals,
    list_user_leaves,
)

NOW = datetime(2024, 7, 10, 12, 0, tzinfo=timezone.utc)


def auth(user_id):
    """Helper to select the acting user"""
    return {"X-User-Id": user_id}


def apply_casual(store, user_id, created_at):
    return apply_leave(
        store, user_id, LeaveType.REGULAR, date(2024, 7, 10), date(2024, 7, 11),
        "Family event", nature=LeaveNature.CASUAL, now=created_at,
    )


def test_pending_includes_active_delegators_oldest_first(store):
    own = apply_casual(store, "u7", NOW)                        # waits on u4 (HR)
    delegated = apply_casual(store, "u1", NOW - timedelta(hours=2))  # waits on u2
    apply_casual(store, "u2", NOW - timedelta(hours=3))          # waits on u3, not delegated
    add_delegation(store, "u2", "u4", NOW - timedelta(days=1), NOW + timedelta(days=1), now=NOW)

    pending = get_pending_approvals(store, "u4", now=NOW)

    assert [leave.id for leave in pending] == [delegated.id, own.id]


def test_pending_drops_expired_delegations(store):
    apply_casual(store, "u1", NOW)
    add_delegation(store, "u2", "u4", NOW - timedelta(days=2), NOW - timedelta(days=1), now=NOW)

    assert get_pending_approvals(store, "u4", now=NOW) == []
    assert len(get_pending_approvals(store, "u2", now=NOW)) == 1


def test_pending_excludes_resolved_requests(store):
    leave = apply_casual(store, "u7", NOW)
    approve_leave(store, leave.id, "u4", is_final_decision=True, now=NOW)

    assert get_pending_approvals(store, "u4", now=NOW) == []


def test_approval_history_newest_first(client, store):
    older = apply_casual(store, "u1", NOW - timedelta(days=1))
    newer = apply_casual(store, "u1", NOW)
    approve_leave(store, older.id, "u2", now=NOW)
    approve_leave(store, newer.id, "u2", now=NOW)
    apply_casual(store, "u7", NOW)

    response = client.get("/api/v1/leaves/history", headers=auth("u2"))

    assert response.status_code == status.HTTP_200_OK
    assert [item["id"] for item in response.json()["items"]] == [newer.id, older.id]
    assert get_approval_history(store, "u3") == []


def test_approval_history_includes_delegated_steps(store):
    leave = apply_casual(store, "u7", NOW)
    add_delegation(store, "u4", "u3", NOW - timedelta(hours=1), NOW + timedelta(hours=1), now=NOW)
    approve_leave(store, leave.id, "u3", now=NOW)
    assert leave.approval_chain[-1].delegated_from_id == "u4"

    assert [item.id for item in get_approval_history(store, "u3")] == [leave.id]
    assert [item.id for item in get_approval_history(store, "u4")] == [leave.id]
    assert get_approval_history(store, "u5") == []


def test_my_leaves_filtered_by_status(client, store):
    first = apply_casual(store, "u1", NOW - timedelta(days=1))
    second = apply_casual(store, "u1", NOW)
    cancel_leave(store, first.id, "u1", now=NOW)

    response = client.get("/api/v1/leaves/my", headers=auth("u1"))
    assert [item["id"] for item in response.json()["items"]] == [second.id, first.id]

    response = client.get("/api/v1/leaves/my", params={"status": "Cancelled"}, headers=auth("u1"))
    assert response.json()["total"] == 1
    assert response.json()["items"][0]["id"] == first.id

    assert list_user_leaves(store, "u1", status=LeaveStatus.APPROVED) == []


def test_get_leave_not_found(client):
    response = client.get("/api/v1/leaves/l404", headers=auth("u1"))

    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_balance_me_created_with_defaults(client, store):
    response = client.get("/api/v1/leaves/balance/me", headers=auth("u1"))

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["casual_used"] == 0
    assert data["remaining_casual"] == data["casual_quota"]
    assert "u1" in store.balances


def test_unpaid_days_clamped(store):
    leave = apply_casual(store, "u1", NOW)

    update_unpaid_leave_days(store, leave.id, 5, "u4", now=NOW)
    assert leave.unpaid_leave_days == 2

    update_unpaid_leave_days(store, leave.id, -1, "u4", now=NOW)
    assert leave.unpaid_leave_days == 0

    update_unpaid_leave_days(store, leave.id, 0.5, "u5", now=NOW)
    assert leave.unpaid_leave_days == 0.5


def test_unpaid_days_requires_final_authority(client, store):
    leave = apply_casual(store, "u1", NOW)

    with pytest.raises(ForbiddenError):
        update_unpaid_leave_days(store, leave.id, 1, "u2", now=NOW)

    response = client.patch(
        f"/api/v1/leaves/{leave.id}/unpaid-days",
        json={"days": 1},
        headers=auth("u1"),
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert leave.unpaid_leave_days == 0

    response = client.patch(
        f"/api/v1/leaves/{leave.id}/unpaid-days",
        json={"days": 1},
        headers=auth("u4"),
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["unpaid_leave_days"] == 1
