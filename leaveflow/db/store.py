"""
In-memory store: the single owner of all workflow state.

Services receive the store explicitly as their first argument, the same way
they would receive a database session.
"""
import itertools
import threading
from typing import Dict, Iterable, Optional, Set

from leaveflow.core.config import settings
from leaveflow.models import (
    AuditLog,
    Holiday,
    LeaveBalance,
    LeaveRequest,
    Notification,
    User,
)


class LeaveStore:
    """ID-keyed collections plus the working-calendar settings."""

    def __init__(self, weekend_days: Optional[Iterable[int]] = None):
        self.users: Dict[str, User] = {}
        self.leaves: Dict[str, LeaveRequest] = {}
        self.balances: Dict[str, LeaveBalance] = {}
        self.holidays: Dict[str, Holiday] = {}
        self.notifications: Dict[str, Notification] = {}
        self.audit_logs: Dict[str, AuditLog] = {}
        self.weekend_days: Set[int] = set(
            settings.WEEKEND_DAYS if weekend_days is None else weekend_days
        )
        # Held for the full duration of every mutating service call
        self.lock = threading.RLock()
        self._counters: Dict[str, "itertools.count[int]"] = {}

    def next_id(self, prefix: str) -> str:
        """Sequential identifiers such as l1, l2 ... per prefix."""
        with self.lock:
            counter = self._counters.setdefault(prefix, itertools.count(1))
            candidate = f"{prefix}{next(counter)}"
            while self._id_taken(candidate):
                candidate = f"{prefix}{next(counter)}"
            return candidate

    def _id_taken(self, candidate: str) -> bool:
        if candidate in self.users or candidate in self.leaves:
            return True
        if candidate in self.holidays or candidate in self.notifications:
            return True
        if candidate in self.audit_logs:
            return True
        return any(
            entry.id == candidate
            for user in self.users.values()
            for entry in user.delegation_history
        )

    def add_user(self, user: User) -> User:
        with self.lock:
            self.users[user.id] = user
        return user
