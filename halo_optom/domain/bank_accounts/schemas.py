"""Bank account schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator


def _required(v: Optional[str], field: str) -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError(f"{field} is required")
    return v


class BankAccountCreate(BaseModel):
    bank_name: str
    account_number: str
    account_holder_name: str
    branch: Optional[str] = None
    is_active: bool = True

    @field_validator("bank_name", "account_number", "account_holder_name")
    @classmethod
    def validate_required(cls, v, info):
        return _required(v, info.field_name)


class BankAccountUpdate(BaseModel):
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    account_holder_name: Optional[str] = None
    branch: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("bank_name", "account_number", "account_holder_name")
    @classmethod
    def validate_not_blank(cls, v, info):
        if v is None:
            return v
        return _required(v, info.field_name)


class BankAccountResponse(BaseModel):
    id: str
    bank_name: str
    account_number: str
    account_holder_name: str
    branch: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
