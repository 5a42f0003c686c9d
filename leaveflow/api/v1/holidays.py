"""
Holiday and weekend calendar endpoints
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response

from leaveflow.core.deps import get_current_user, get_store, require_roles
from leaveflow.db.store import LeaveStore
from leaveflow.models import FINAL_AUTHORITY_ROLES, User
from leaveflow.schemas.holiday import HolidayCreate, HolidayOut, WeekendOut
from leaveflow.services.holiday_service import (
    WEEKDAY_NAMES,
    add_holiday,
    delete_holiday,
    get_weekend_days,
    list_holidays,
    toggle_weekend_day,
)

router = APIRouter()


def _weekend_response(days: List[int]) -> WeekendOut:
    return WeekendOut(weekend_days=days, names=[WEEKDAY_NAMES[d] for d in days])


@router.get("", response_model=List[HolidayOut])
def list_holidays_endpoint(
    year: Optional[int] = Query(None, description="Filter by year"),
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    """List holidays sorted by date"""
    return [HolidayOut.model_validate(h) for h in list_holidays(store, year=year)]


@router.post("", response_model=HolidayOut, status_code=201)
def create_holiday_endpoint(
    holiday_data: HolidayCreate,
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(require_roles(*FINAL_AUTHORITY_ROLES))
):
    """Create a new holiday (HR/MD/Director). One holiday per date."""
    holiday = add_holiday(
        store,
        name=holiday_data.name,
        holiday_date=holiday_data.date,
        holiday_type=holiday_data.type,
        actor_id=current_user.id,
    )
    return HolidayOut.model_validate(holiday)


@router.delete("/{holiday_id}", status_code=204)
def delete_holiday_endpoint(
    holiday_id: str,
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(require_roles(*FINAL_AUTHORITY_ROLES))
):
    """Delete a holiday (HR/MD/Director)"""
    delete_holiday(store, holiday_id, actor_id=current_user.id)
    return Response(status_code=204)


@router.get("/weekends", response_model=WeekendOut)
def get_weekends_endpoint(
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(get_current_user)
):
    """Weekday indices excluded from leave days (0=Sunday .. 6=Saturday)"""
    return _weekend_response(get_weekend_days(store))


@router.post("/weekends/{day_index}", response_model=WeekendOut)
def toggle_weekend_endpoint(
    day_index: int,
    store: LeaveStore = Depends(get_store),
    current_user: User = Depends(require_roles(*FINAL_AUTHORITY_ROLES))
):
    """Toggle one weekday in or out of the weekend (HR/MD/Director)"""
    return _weekend_response(toggle_weekend_day(store, day_index, actor_id=current_user.id))
