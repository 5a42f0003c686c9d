"""
Holiday calendar service - holidays and weekend configuration
"""
import logging
from datetime import date, timedelta
from typing import List, Optional, Set

from leaveflow.core.config import settings
from leaveflow.core.errors import ConflictError, NotFoundError, ValidationError
from leaveflow.db.store import LeaveStore
from leaveflow.models import Holiday, HolidayType, NON_WORKING_HOLIDAY_TYPES
from leaveflow.services.audit_service import log_audit
from leaveflow.utils.datetime_utils import js_weekday

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def add_holiday(
    store: LeaveStore,
    name: str,
    holiday_date: date,
    holiday_type: HolidayType = HolidayType.PUBLIC,
    actor_id: Optional[str] = None
) -> Holiday:
    """
    Create a new holiday

    Args:
        store: Leave store
        name: Holiday name
        holiday_date: Holiday date
        holiday_type: Public, Company or Optional
        actor_id: ID of user creating the holiday

    Returns:
        Created Holiday instance

    Raises:
        ValidationError: If the name is blank
        ConflictError: If a holiday already exists on that date
    """
    if not name or not name.strip():
        raise ValidationError("Holiday name is required")

    with store.lock:
        for existing in store.holidays.values():
            if existing.date == holiday_date:
                raise ConflictError(f"Holiday already exists for date {holiday_date}")

        holiday = Holiday(
            id=store.next_id("h"),
            date=holiday_date,
            name=name.strip(),
            type=holiday_type,
        )
        store.holidays[holiday.id] = holiday

    logger.info("holiday added: id=%s date=%s type=%s", holiday.id, holiday_date, holiday_type.value)
    log_audit(
        store,
        actor_id,
        "HOLIDAY_CREATE",
        "holidays",
        holiday.id,
        {"date": str(holiday_date), "name": holiday.name, "type": holiday_type},
    )
    return holiday


def delete_holiday(store: LeaveStore, holiday_id: str, actor_id: Optional[str] = None) -> None:
    """
    Remove a holiday

    Raises:
        NotFoundError: If the holiday does not exist
    """
    with store.lock:
        holiday = store.holidays.pop(holiday_id, None)
    if holiday is None:
        raise NotFoundError(f"Holiday with id {holiday_id} not found")

    logger.info("holiday deleted: id=%s date=%s", holiday_id, holiday.date)
    log_audit(store, actor_id, "HOLIDAY_DELETE", "holidays", holiday_id, {"date": str(holiday.date)})


def list_holidays(store: LeaveStore, year: Optional[int] = None) -> List[Holiday]:
    """Holidays sorted by date, optionally limited to one calendar year."""
    holidays = list(store.holidays.values())
    if year is not None:
        holidays = [h for h in holidays if h.date.year == year]
    return sorted(holidays, key=lambda h: h.date)


def get_weekend_days(store: LeaveStore) -> List[int]:
    return sorted(store.weekend_days)


def toggle_weekend_day(store: LeaveStore, day_index: int, actor_id: Optional[str] = None) -> List[int]:
    """
    Flip one weekday in or out of the weekend set

    Args:
        store: Leave store
        day_index: 0=Sunday .. 6=Saturday
        actor_id: ID of user making the change

    Returns:
        Sorted weekend day indices after the change

    Raises:
        ValidationError: If day_index is outside 0..6
    """
    if day_index < 0 or day_index > 6:
        raise ValidationError("Weekend day index must be between 0 (Sunday) and 6 (Saturday)")

    with store.lock:
        if day_index in store.weekend_days:
            store.weekend_days.discard(day_index)
            action = "removed"
        else:
            store.weekend_days.add(day_index)
            action = "added"
        weekend = get_weekend_days(store)

    logger.info("weekend day %s: day=%s weekend=%s", action, WEEKDAY_NAMES[day_index], weekend)
    log_audit(store, actor_id, "WEEKEND_TOGGLE", "calendar", None, {"day": day_index, "weekend": weekend})
    return weekend


def get_holidays_in_range(store: LeaveStore, from_date: date, to_date: date) -> Set[date]:
    """Dates of Public/Company holidays within the range (inclusive)."""
    return {
        h.date
        for h in store.holidays.values()
        if h.type in NON_WORKING_HOLIDAY_TYPES and from_date <= h.date <= to_date
    }


def get_non_working_days_in_range(store: LeaveStore, from_date: date, to_date: date) -> Set[date]:
    """
    Get set of non-working days (weekend days + excluded holidays) within the given date range.

    Optional holidays are working days. Holidays are only excluded when
    EXCLUDE_HOLIDAYS_FROM_LEAVE_DAYS is enabled.

    Args:
        store: Leave store
        from_date: Start date (inclusive)
        to_date: End date (inclusive)

    Returns:
        Set of non-working dates
    """
    non_working = set()

    current_date = from_date
    while current_date <= to_date:
        if js_weekday(current_date) in store.weekend_days:
            non_working.add(current_date)
        current_date += timedelta(days=1)

    if settings.EXCLUDE_HOLIDAYS_FROM_LEAVE_DAYS:
        non_working.update(get_holidays_in_range(store, from_date, to_date))

    return non_working


def count_working_days(store: LeaveStore, from_date: date, to_date: date) -> float:
    """
    Calculate leave days between from_date and to_date (inclusive),
    excluding weekend days and holidays.

    Returns:
        Number of leave days (float)
    """
    if from_date > to_date:
        return 0.0

    non_working = get_non_working_days_in_range(store, from_date, to_date)
    total = (to_date - from_date).days + 1
    return float(total - len(non_working))
