"""Service pricing schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...models import APPOINTMENT_TYPES, CONSULTATION_METHODS


class PricingCreate(BaseModel):
    type: str
    method: Optional[str] = None
    base_price: float = 0
    is_active: Optional[bool] = None

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

    @field_validator("base_price")
    @classmethod
    def validate_price(cls, v):
        if v < 0:
            raise ValueError("base_price cannot be negative")
        return v


class PricingUpdate(BaseModel):
    base_price: Optional[float] = None
    is_active: Optional[bool] = None

    @field_validator("base_price")
    @classmethod
    def validate_price(cls, v):
        if v is not None and v < 0:
            raise ValueError("base_price cannot be negative")
        return v


class PricingResponse(BaseModel):
    id: str
    type: str
    method: Optional[str] = None
    base_price: float
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
