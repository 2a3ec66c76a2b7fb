"""Payment schemas"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, field_validator

from ...models import PAYMENT_METHODS, PAYMENT_STATUSES, PAYMENT_TYPES
from ..users.schemas import UserSummary


def _check_type(v):
    if v not in PAYMENT_TYPES:
        raise ValueError(f"payment_type must be one of: {', '.join(PAYMENT_TYPES)}")
    return v


class PaymentCreate(BaseModel):
    payment_type: str
    order_id: Optional[str] = None
    appointment_id: Optional[str] = None
    amount: float
    payment_method: str = "xendit"

    @field_validator("payment_type")
    @classmethod
    def validate_type(cls, v):
        return _check_type(v)

    @field_validator("payment_method")
    @classmethod
    def validate_method(cls, v):
        if v not in PAYMENT_METHODS:
            raise ValueError(f"payment_method must be one of: {', '.join(PAYMENT_METHODS)}")
        return v

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v):
        if v <= 0:
            raise ValueError("amount must be greater than 0")
        return v


class PaymentUpdate(BaseModel):
    status: Optional[str] = None
    payment_method: Optional[str] = None
    payment_id: Optional[str] = None
    payment_details: Optional[dict[str, Any]] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v is not None and v not in PAYMENT_STATUSES:
            raise ValueError(f"status must be one of: {', '.join(PAYMENT_STATUSES)}")
        return v


class BankTransferRequest(BaseModel):
    payment_type: str = "appointment"
    appointment_id: Optional[str] = None
    order_id: Optional[str] = None

    @field_validator("payment_type")
    @classmethod
    def validate_type(cls, v):
        return _check_type(v)


class PaymentProofUpload(BaseModel):
    payment_proof_url: str

    @field_validator("payment_proof_url")
    @classmethod
    def validate_url(cls, v):
        v = (v or "").strip()
        if not v:
            raise ValueError("payment_proof_url is required")
        return v


class PaymentReject(BaseModel):
    reason: Optional[str] = None


class PaymentResponse(BaseModel):
    id: str
    payment_type: str
    order_id: Optional[str] = None
    appointment_id: Optional[str] = None
    amount: float
    status: str
    payment_method: str
    payment_id: Optional[str] = None
    external_id: Optional[str] = None
    payment_details: Optional[Any] = None
    payment_proof_url: Optional[str] = None
    payment_deadline: Optional[datetime] = None
    verified_by_id: Optional[str] = None
    verified_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    paid_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    verified_by: Optional[UserSummary] = None

    class Config:
        from_attributes = True
