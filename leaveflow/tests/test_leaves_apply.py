"""
Tests for leave application (duration, nature, deduction, routing)
"""
from datetime import date, time

import pytest
from fastapi import status

from leaveflow.core.errors import RoutingConfigurationError, ValidationError
from leaveflow.models import HolidayType, LeaveNature, LeaveStatus, LeaveType
from leaveflow.services.balance_service import ensure_balance
from leaveflow.services.holiday_service import add_holiday
from leaveflow.services.leave_service import apply_leave


def auth(user_id):
    """Helper to select the acting user"""
    return {"X-User-Id": user_id}


def test_apply_regular_casual_leave(client, store):
    """Casual leave Wed-Thu goes Pending to the first sequential approver"""
    response = client.post(
        "/api/v1/leaves/apply",
        json={
            "type": "Regular",
            "nature": "Casual",
            "start_date": "2024-07-10",
            "end_date": "2024-07-11",
            "reason": "Family event",
        },
        headers=auth("u1"),
    )

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["status"] == "Pending"
    assert data["current_approver_id"] == "u2"
    assert data["days_calculated"] == 2
    assert data["approval_chain"] == []
    assert data["unpaid_leave_days"] == 0
    assert data["is_counted"] is True
    assert data["version"] == 1

    balance = store.balances["u1"]
    assert balance.used_days == 2
    assert balance.casual_used == 2


def test_weekend_days_not_counted(store):
    # Wed 10th .. Sun 14th, Friday/Saturday weekend
    leave = apply_leave(
        store, "u1", LeaveType.REGULAR, date(2024, 7, 10), date(2024, 7, 14),
        "Trip", nature=LeaveNature.SICK,
    )

    assert leave.days_calculated == 3
    assert store.balances["u1"].sick_used == 3


def test_public_holidays_excluded_optional_holidays_counted(store):
    add_holiday(store, "Ashura", date(2024, 7, 11), HolidayType.PUBLIC)
    add_holiday(store, "Staff picnic", date(2024, 7, 14), HolidayType.OPTIONAL)

    leave = apply_leave(
        store, "u1", LeaveType.REGULAR, date(2024, 7, 10), date(2024, 7, 14),
        "Trip", nature=LeaveNature.CASUAL,
    )

    # Wed, Sun counted; Thu holiday; Fri/Sat weekend
    assert leave.days_calculated == 2


def test_leave_on_weekend_only_rejected(store):
    with pytest.raises(ValidationError):
        apply_leave(
            store, "u1", LeaveType.REGULAR, date(2024, 7, 12), date(2024, 7, 13),
            "Weekend", nature=LeaveNature.CASUAL,
        )
    assert store.leaves == {}
    assert "u1" not in store.balances


def test_regular_leave_requires_nature(client):
    response = client.post(
        "/api/v1/leaves/apply",
        json={"type": "Regular", "start_date": "2024-07-10", "end_date": "2024-07-11", "reason": "x"},
        headers=auth("u1"),
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["kind"] == "validation"


def test_inverted_dates_rejected(client):
    response = client.post(
        "/api/v1/leaves/apply",
        json={
            "type": "Regular",
            "nature": "Casual",
            "start_date": "2024-07-11",
            "end_date": "2024-07-10",
            "reason": "x",
        },
        headers=auth("u1"),
    )

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_short_leave_covered_by_casual(client, store):
    response = client.post(
        "/api/v1/leaves/apply",
        json={
            "is_short": True,
            "start_date": "2024-07-10",
            "end_date": "2024-07-10",
            "start_time": "10:00",
            "end_time": "14:00",
            "reason": "Doctor appointment",
        },
        headers=auth("u1"),
    )

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["type"] == "Short"
    assert data["nature"] == "Casual"
    assert data["days_calculated"] == 4
    assert data["unpaid_leave_days"] == 0

    balance = store.balances["u1"]
    assert balance.used_hours == 4
    assert balance.casual_used == 0.5
    assert balance.used_days == 0


def test_short_leave_overflow_becomes_unpaid(store):
    ensure_balance(store, "u1").casual_used = 9.75

    leave = apply_leave(
        store, "u1", LeaveType.SHORT, date(2024, 7, 10), date(2024, 7, 10), "Bank",
        start_time=time(9, 0), end_time=time(13, 0),
    )

    assert leave.nature == LeaveNature.UNPAID
    assert leave.unpaid_leave_days == 2
    assert store.balances["u1"].casual_used == 10


def test_short_leave_inverted_times_clamped(store):
    leave = apply_leave(
        store, "u1", LeaveType.SHORT, date(2024, 7, 10), date(2024, 7, 10), "Oops",
        start_time=time(14, 0), end_time=time(10, 0),
    )

    assert leave.days_calculated == 0
    assert store.balances["u1"].used_hours == 0


def test_short_leave_hours_ignore_date_span(store):
    leave = apply_leave(
        store, "u1", LeaveType.SHORT, date(2024, 7, 10), date(2024, 7, 11), "Clinic",
        start_time=time(9, 0), end_time=time(11, 0),
    )

    assert leave.days_calculated == 2
    assert store.balances["u1"].used_hours == 2
    assert store.balances["u1"].casual_used == 0.25


def test_short_leave_requires_time_range(store):
    with pytest.raises(ValidationError):
        apply_leave(store, "u1", LeaveType.SHORT, date(2024, 7, 10), date(2024, 7, 10), "x")


def test_regular_leave_with_times_is_fractional(store):
    leave = apply_leave(
        store, "u1", LeaveType.REGULAR, date(2024, 7, 10), date(2024, 7, 11), "Half days",
        nature=LeaveNature.CASUAL, start_time=time(12, 0), end_time=time(18, 0),
    )

    assert leave.days_calculated == 1.25


def test_explicit_duration_wins(store):
    leave = apply_leave(
        store, "u1", LeaveType.REGULAR, date(2024, 7, 10), date(2024, 7, 14), "x",
        nature=LeaveNature.CASUAL, duration=1.5,
    )

    assert leave.days_calculated == 1.5


def test_unpaid_regular_leave_preseeds_unpaid_days(store):
    leave = apply_leave(
        store, "u1", LeaveType.REGULAR, date(2024, 7, 10), date(2024, 7, 11), "x",
        nature=LeaveNature.UNPAID,
    )

    assert leave.unpaid_leave_days == 2
    assert store.balances["u1"].used_days == 2
    assert store.balances["u1"].casual_used == 0


def test_no_approver_configured(store):
    del store.users["u4"]

    with pytest.raises(RoutingConfigurationError):
        apply_leave(
            store, "u7", LeaveType.REGULAR, date(2024, 7, 10), date(2024, 7, 10), "x",
            nature=LeaveNature.CASUAL,
        )
    assert store.leaves == {}


def test_apply_records_attachments_and_audit(client, store):
    response = client.post(
        "/api/v1/leaves/apply",
        json={
            "nature": "Sick",
            "start_date": "2024-07-10",
            "end_date": "2024-07-10",
            "reason": "Fever",
            "attachments": [{"name": "note.pdf", "size": 1024, "type": "application/pdf", "url": "mock://note"}],
        },
        headers=auth("u1"),
    )

    assert response.status_code == status.HTTP_201_CREATED
    attachment = response.json()["attachments"][0]
    assert attachment["name"] == "note.pdf"
    assert attachment["id"]
    assert [log.action for log in store.audit_logs.values()] == ["LEAVE_APPLY"]


def test_apply_new_request_status(store):
    leave = apply_leave(
        store, "u7", LeaveType.REGULAR, date(2024, 7, 10), date(2024, 7, 10), "x",
        nature=LeaveNature.OTHER,
    )

    assert leave.status == LeaveStatus.PENDING
    assert leave.current_approver_id == "u4"
