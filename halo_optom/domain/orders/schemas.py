"""Order schemas"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, field_validator

from ...models import ORDER_STATUSES
from ..users.schemas import UserSummary


class OrderItemCreate(BaseModel):
    product_id: str
    quantity: int = 1

    @field_validator("quantity")
    @classmethod
    def validate_quantity(cls, v):
        if v < 1:
            raise ValueError("quantity must be at least 1")
        return v


class ShippingAddress(BaseModel):
    receiver_name: str
    phone: str
    full_address: str
    province: Optional[str] = None
    city: Optional[str] = None
    district: Optional[str] = None
    postal_code: Optional[str] = None


class OrderCreate(BaseModel):
    items: list[OrderItemCreate] = []
    shipping_address: Optional[ShippingAddress] = None
    payment_data: Optional[dict[str, Any]] = None


class OrderStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v not in ORDER_STATUSES:
            raise ValueError(f"status must be one of: {', '.join(ORDER_STATUSES)}")
        return v


class OrderItemResponse(BaseModel):
    id: str
    product_id: Optional[str] = None
    quantity: int
    price: float
    product_name: Optional[str] = None

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    id: str
    patient_id: str
    total: float
    status: str
    payment_data: Optional[Any] = None
    shipping_address: Optional[dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: list[OrderItemResponse] = []
    patient: Optional[UserSummary] = None

    class Config:
        from_attributes = True
