"""Schedule domain schemas"""

from datetime import datetime, time
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.dates import WEEKDAYS


def _validate_day(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    day = v.strip().lower()
    if day not in WEEKDAYS:
        raise ValueError(f"day_of_week must be one of: {', '.join(WEEKDAYS)}")
    return day


class ScheduleSlot(BaseModel):
    day_of_week: str
    start_time: time
    end_time: time
    is_active: bool = True

    @field_validator("day_of_week")
    @classmethod
    def validate_day(cls, v):
        return _validate_day(v)


class ScheduleCreate(ScheduleSlot):
    optometrist_id: Optional[str] = None


class ScheduleBulkCreate(BaseModel):
    optometrist_id: Optional[str] = None
    schedules: list[ScheduleSlot]


class ScheduleUpdate(BaseModel):
    day_of_week: Optional[str] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    is_active: Optional[bool] = None

    @field_validator("day_of_week")
    @classmethod
    def validate_day(cls, v):
        return _validate_day(v)


class ScheduleResponse(BaseModel):
    id: str
    optometrist_id: str
    day_of_week: str
    start_time: time
    end_time: time
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
