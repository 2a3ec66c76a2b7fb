"""Appointment domain schemas"""

from datetime import date, datetime, time
from typing import Optional

from pydantic import BaseModel, field_validator

from ...models import APPOINTMENT_STATUSES, APPOINTMENT_TYPES, CONSULTATION_METHODS
from ...shared.validators import validate_percentage
from ..users.schemas import UserSummary


class AppointmentCreate(BaseModel):
    optometrist_id: str
    type: str = "online"
    method: Optional[str] = None
    date: date
    start_time: time
    location: Optional[str] = None

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        if v not in APPOINTMENT_TYPES:
            raise ValueError(f"type must be one of: {', '.join(APPOINTMENT_TYPES)}")
        return v

    @field_validator("method")
    @classmethod
    def validate_method(cls, v):
        if v is not None and v not in CONSULTATION_METHODS:
            raise ValueError(f"method must be one of: {', '.join(CONSULTATION_METHODS)}")
        return v


class StatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v not in APPOINTMENT_STATUSES:
            raise ValueError(f"status must be one of: {', '.join(APPOINTMENT_STATUSES)}")
        return v


class RescheduleRequest(BaseModel):
    date: date
    start_time: time


class CancelRequest(BaseModel):
    reason: Optional[str] = None


class CommissionUpdate(BaseModel):
    commission_percentage: float

    @field_validator("commission_percentage")
    @classmethod
    def validate_range(cls, v):
        return validate_percentage(v)


class AppointmentResponse(BaseModel):
    id: str
    patient_id: str
    optometrist_id: str
    type: str
    method: Optional[str] = None
    date: date
    start_time: time
    end_time: Optional[time] = None
    location: Optional[str] = None
    status: str
    payment_status: str
    duration_minutes: Optional[int] = None
    price: Optional[float] = None
    cancel_reason: Optional[str] = None
    video_room_id: Optional[str] = None
    chat_room_id: Optional[str] = None
    commission_percentage: Optional[float] = None
    commission_amount: Optional[float] = None
    commission_calculated_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    patient: Optional[UserSummary] = None
    optometrist: Optional[UserSummary] = None

    class Config:
        from_attributes = True
