"""Medical record schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from ..users.schemas import UserSummary


class MedicalRecordCreate(BaseModel):
    appointment_id: str
    diagnosis: Optional[str] = None
    prescription: Optional[str] = None
    notes: Optional[str] = None
    attachments: Optional[str] = None


class MedicalRecordUpdate(BaseModel):
    diagnosis: Optional[str] = None
    prescription: Optional[str] = None
    notes: Optional[str] = None
    attachments: Optional[str] = None


class MedicalRecordResponse(BaseModel):
    id: str
    patient_id: str
    optometrist_id: str
    appointment_id: Optional[str] = None
    diagnosis: Optional[str] = None
    prescription: Optional[str] = None
    notes: Optional[str] = None
    attachments: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    patient: Optional[UserSummary] = None
    optometrist: Optional[UserSummary] = None

    class Config:
        from_attributes = True
