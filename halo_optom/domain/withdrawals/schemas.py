"""Withdrawal request schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ..users.schemas import UserSummary


class WithdrawCreate(BaseModel):
    amount: float
    bank_name: str
    bank_account_number: str
    bank_account_name: str

    @field_validator("bank_name", "bank_account_number", "bank_account_name")
    @classmethod
    def not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Field is required")
        return v.strip()


class WithdrawReject(BaseModel):
    reason: Optional[str] = None


class WithdrawResponse(BaseModel):
    id: str
    optometrist_id: str
    amount: float
    bank_name: str
    bank_account_number: str
    bank_account_name: str
    status: str
    requested_at: Optional[datetime] = None
    reviewed_by_admin_id: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    note: Optional[str] = None
    optometrist: Optional[UserSummary] = None
    reviewed_by_admin: Optional[UserSummary] = None

    class Config:
        from_attributes = True
