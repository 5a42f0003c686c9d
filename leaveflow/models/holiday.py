"""
Holiday model
"""
import enum
from dataclasses import dataclass
from datetime import date


class HolidayType(str, enum.Enum):
    PUBLIC = "Public"
    COMPANY = "Company"
    OPTIONAL = "Optional"


# Optional holidays are regular working days for leave counting
NON_WORKING_HOLIDAY_TYPES = frozenset({HolidayType.PUBLIC, HolidayType.COMPANY})


@dataclass
class Holiday:
    id: str
    date: date
    name: str
    type: HolidayType = HolidayType.PUBLIC
