"""
Demo data for local runs and tests
"""
import logging
from datetime import date
from typing import Optional

from leaveflow.db.store import LeaveStore
from leaveflow.models import HolidayType, Role, User
from leaveflow.services.holiday_service import add_holiday
from leaveflow.utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)


DEMO_USERS = [
    # id, name, role, designation, sequential approvers
    ("u1", "Alice Rahman", Role.EMPLOYEE, "Software Engineer", ["u2"]),
    ("u2", "Bilal Hossain", Role.TEAM_LEAD, "Team Lead", ["u3"]),
    ("u3", "Chitra Das", Role.MANAGER, "Engineering Manager", []),
    ("u4", "Dipa Karim", Role.HR, "HR Manager", []),
    ("u5", "Emran Chowdhury", Role.MD, "Managing Director", []),
    ("u6", "Farah Ahmed", Role.DIRECTOR, "Director", []),
    ("u7", "Gazi Noor", Role.EMPLOYEE, "Accountant", []),
]

DEMO_HOLIDAYS = [
    # month, day, name, type
    (2, 21, "International Mother Language Day", HolidayType.PUBLIC),
    (3, 26, "Independence Day", HolidayType.PUBLIC),
    (5, 1, "May Day", HolidayType.PUBLIC),
    (7, 1, "Company Foundation Day", HolidayType.COMPANY),
    (12, 16, "Victory Day", HolidayType.PUBLIC),
    (12, 25, "Christmas Day", HolidayType.OPTIONAL),
]


def seed_users(store: LeaveStore) -> None:
    """Load the demo org chart; existing IDs are left alone."""
    for user_id, name, role, designation, approvers in DEMO_USERS:
        if user_id in store.users:
            continue
        store.add_user(
            User(
                id=user_id,
                name=name,
                role=role,
                email=f"{name.split()[0].lower()}@example.com",
                designation=designation,
                employee_code=f"EMP-{user_id[1:].zfill(3)}",
                sequential_approvers=list(approvers),
            )
        )


def seed_holidays(store: LeaveStore, year: Optional[int] = None) -> None:
    year = year or now_utc().year
    taken = {h.date for h in store.holidays.values()}
    for month, day, name, holiday_type in DEMO_HOLIDAYS:
        holiday_date = date(year, month, day)
        if holiday_date in taken:
            continue
        add_holiday(store, name, holiday_date, holiday_type)


def seed_demo_data(store: LeaveStore, with_holidays: bool = True) -> LeaveStore:
    seed_users(store)
    if with_holidays:
        seed_holidays(store)
    logger.info(
        "demo data loaded: users=%s holidays=%s", len(store.users), len(store.holidays)
    )
    return store
