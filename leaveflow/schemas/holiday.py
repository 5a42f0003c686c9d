"""
Holiday schemas
"""
from datetime import date as date_type
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from leaveflow.models.holiday import HolidayType


class HolidayCreate(BaseModel):
    """Schema for creating holiday"""
    date: date_type = Field(..., description="Holiday date")
    name: str = Field(..., min_length=1, max_length=255, description="Holiday name")
    type: HolidayType = Field(HolidayType.PUBLIC, description="Public, Company or Optional")


class HolidayOut(BaseModel):
    """Schema for holiday output"""
    id: str
    date: date_type
    name: str
    type: HolidayType

    model_config = ConfigDict(from_attributes=True)


class WeekendOut(BaseModel):
    """Weekday indices treated as weekend (0=Sunday .. 6=Saturday)"""
    weekend_days: List[int]
    names: List[str]
