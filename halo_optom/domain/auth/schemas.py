"""Auth domain schemas"""

from datetime import date
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_email, validate_id_phone
from ..users.schemas import UserResponse


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str
    role: Optional[str] = "pasien"
    phone: Optional[str] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    str_number: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email_format(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v:
            return validate_id_phone(v)
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v


class LoginRequest(BaseModel):
    # Presence is checked by the service so missing fields answer 400
    email: Optional[str] = None
    password: Optional[str] = None


class AuthResponse(BaseModel):
    token: str
    user: UserResponse


class VerifyResponse(BaseModel):
    valid: bool
    user: UserResponse
