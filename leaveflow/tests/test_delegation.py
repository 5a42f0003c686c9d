"""
Tests for the delegation registry
"""
from datetime import datetime, timedelta, timezone

import pytest

from leaveflow.core.config import settings
from leaveflow.core.errors import NotFoundError, PreconditionFailedError, ValidationError
from leaveflow.models import DelegationState
from leaveflow.services import delegation_service as registry

NOW = datetime(2024, 7, 10, 12, 0, tzinfo=timezone.utc)
HOUR = timedelta(hours=1)
DAY = timedelta(days=1)


def test_add_delegation_prepends_and_clears_legacy_fields(store):
    user = store.users["u2"]
    user.delegated_to = "u7"
    user.delegation_start_date = NOW - DAY
    user.delegation_end_date = NOW + DAY

    first = registry.add_delegation(store, "u2", "u3", NOW + DAY, NOW + 2 * DAY, now=NOW)
    second = registry.add_delegation(store, "u2", "u4", NOW + 3 * DAY, NOW + 4 * DAY, now=NOW)

    assert [e.id for e in user.delegation_history] == [second.id, first.id]
    assert user.delegated_to is None
    assert user.delegation_start_date is None
    assert user.delegation_end_date is None


def test_add_delegation_validations(store):
    with pytest.raises(ValidationError):
        registry.add_delegation(store, "u2", "u3", NOW + DAY, NOW, now=NOW)
    with pytest.raises(ValidationError):
        registry.add_delegation(store, "u2", "u2", NOW, NOW + DAY, now=NOW)
    with pytest.raises(NotFoundError):
        registry.add_delegation(store, "u2", "ghost", NOW, NOW + DAY, now=NOW)
    assert store.users["u2"].delegation_history == []


@pytest.mark.parametrize(
    "offset, expected",
    [
        (-2 * HOUR, None),   # before the window
        (0 * HOUR, "u3"),    # at start
        (5 * HOUR, "u3"),    # inside
        (10 * HOUR, "u3"),   # at end (inclusive)
        (11 * HOUR, None),   # after the window
    ],
)
def test_resolve_active_delegate_window(store, offset, expected):
    registry.add_delegation(store, "u2", "u3", NOW, NOW + 10 * HOUR, now=NOW)

    assert registry.resolve_active_delegate(store, "u2", NOW + offset) == expected


def test_overlapping_delegations_newest_wins(store):
    registry.add_delegation(store, "u2", "u3", NOW - DAY, NOW + DAY, now=NOW - DAY)
    registry.add_delegation(store, "u2", "u4", NOW - HOUR, NOW + HOUR, now=NOW - HOUR)

    assert registry.resolve_active_delegate(store, "u2", NOW) == "u4"
    # Both delegates may act while their entries are active
    assert registry.has_active_delegation(store, "u2", "u3", NOW)
    assert registry.has_active_delegation(store, "u2", "u4", NOW)
    assert registry.resolve_active_delegate(store, "u2", NOW + 2 * HOUR) == "u3"


def test_legacy_delegation_used_when_history_inactive(store):
    user = store.users["u3"]
    user.delegated_to = "u7"
    user.delegation_start_date = NOW - DAY
    user.delegation_end_date = NOW + DAY

    assert registry.resolve_active_delegate(store, "u3", NOW) == "u7"
    assert registry.list_active_delegators(store, "u7", NOW) == ["u3"]


def test_list_active_delegators(store):
    registry.add_delegation(store, "u2", "u7", NOW - HOUR, NOW + HOUR, now=NOW)
    registry.add_delegation(store, "u3", "u7", NOW + DAY, NOW + 2 * DAY, now=NOW)

    assert registry.list_active_delegators(store, "u7", NOW) == ["u2"]
    assert sorted(registry.list_active_delegators(store, "u7", NOW + DAY)) == ["u3"]


def test_cancel_scheduled_delegation_removes_it(store):
    entry = registry.add_delegation(store, "u2", "u3", NOW + DAY, NOW + 2 * DAY, now=NOW)

    assert registry.cancel_delegation(store, "u2", entry.id, now=NOW) is True
    assert store.users["u2"].delegation_history == []


def test_cancel_active_delegation_rejected(store):
    entry = registry.add_delegation(store, "u2", "u3", NOW - HOUR, NOW + HOUR, now=NOW)

    with pytest.raises(PreconditionFailedError):
        registry.cancel_delegation(store, "u2", entry.id, now=NOW)
    assert len(store.users["u2"].delegation_history) == 1


def test_cancel_active_delegation_is_noop_when_not_strict(store, monkeypatch):
    monkeypatch.setattr(settings, "STRICT_PRECONDITIONS", False)
    entry = registry.add_delegation(store, "u2", "u3", NOW - HOUR, NOW + HOUR, now=NOW)

    assert registry.cancel_delegation(store, "u2", entry.id, now=NOW) is False
    assert len(store.users["u2"].delegation_history) == 1


def test_stop_active_delegation_ends_it_now(store):
    entry = registry.add_delegation(store, "u2", "u3", NOW - HOUR, NOW + DAY, now=NOW)

    registry.stop_delegation(store, "u2", entry.id, now=NOW)

    assert entry.end_date == NOW
    assert registry.delegation_state(entry, NOW + timedelta(seconds=1)) == DelegationState.PAST


def test_stop_scheduled_delegation_rejected(store):
    entry = registry.add_delegation(store, "u2", "u3", NOW + DAY, NOW + 2 * DAY, now=NOW)

    with pytest.raises(PreconditionFailedError):
        registry.stop_delegation(store, "u2", entry.id, now=NOW)
    assert entry.end_date == NOW + 2 * DAY


def test_extend_and_update_delegation(store):
    entry = registry.add_delegation(store, "u2", "u3", NOW - HOUR, NOW + HOUR, now=NOW)

    registry.extend_delegation(store, "u2", entry.id, NOW + DAY, now=NOW)
    assert entry.end_date == NOW + DAY

    registry.update_delegation(store, "u2", entry.id, "u4", NOW - HOUR, NOW + 2 * DAY, now=NOW)
    assert entry.delegated_to_id == "u4"
    assert entry.end_date == NOW + 2 * DAY
    assert store.users["u2"].delegation_history[0].id == entry.id


def test_past_delegation_is_immutable(store):
    entry = registry.add_delegation(store, "u2", "u3", NOW - 2 * DAY, NOW - DAY, now=NOW - 3 * DAY)

    assert registry.delegation_state(entry, NOW) == DelegationState.PAST
    with pytest.raises(PreconditionFailedError):
        registry.extend_delegation(store, "u2", entry.id, NOW + DAY, now=NOW)
    with pytest.raises(PreconditionFailedError):
        registry.update_delegation(store, "u2", entry.id, "u4", NOW, NOW + DAY, now=NOW)


def test_unknown_history_entry(store):
    with pytest.raises(NotFoundError):
        registry.stop_delegation(store, "u2", "dh-404", now=NOW)


def test_naive_datetimes_treated_as_utc(store):
    naive_start = datetime(2024, 7, 10, 9, 0)
    naive_end = datetime(2024, 7, 10, 17, 0)
    registry.add_delegation(store, "u2", "u3", naive_start, naive_end, now=NOW)

    assert registry.resolve_active_delegate(store, "u2", NOW) == "u3"
