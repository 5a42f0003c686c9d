"""
Conversion of workflow values into JSON-safe structures (used for audit meta)
"""
import dataclasses
from datetime import date, datetime, time
from enum import Enum
from typing import Any

from pydantic import BaseModel

from leaveflow.utils.datetime_utils import ensure_utc


def to_json_safe(value: Any) -> Any:
    """
    Recursively convert a value to JSON-safe primitives

    Enums become their values, datetimes become UTC ISO strings, sets become
    sorted lists, and dataclasses / pydantic models become dicts. Anything
    else unknown falls back to str().
    """
    if isinstance(value, Enum):
        return value.value
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, datetime):
        return ensure_utc(value).isoformat()
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): to_json_safe(v) for k, v in value.items()}
    if isinstance(value, (set, frozenset)):
        return sorted(to_json_safe(item) for item in value)
    if isinstance(value, (list, tuple)):
        return [to_json_safe(item) for item in value]
    if isinstance(value, BaseModel):
        return to_json_safe(value.model_dump())
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return to_json_safe(dataclasses.asdict(value))
    return str(value)
