"""Review schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator

from ...models import REVIEW_STATUSES
from ..users.schemas import UserSummary


class ReviewCreate(BaseModel):
    optometrist_id: str
    rating: int
    comment: Optional[str] = None
    service_type: Optional[str] = None

    @field_validator("rating")
    @classmethod
    def validate_rating(cls, v):
        if v < 1 or v > 5:
            raise ValueError("rating must be between 1 and 5")
        return v


class ReviewStatusUpdate(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v not in REVIEW_STATUSES:
            raise ValueError(f"status must be one of: {', '.join(REVIEW_STATUSES)}")
        return v


class ReviewResponse(BaseModel):
    id: str
    patient_id: str
    optometrist_id: str
    rating: int
    comment: Optional[str] = None
    status: str
    report_count: int = 0
    service_type: Optional[str] = None
    created_at: Optional[datetime] = None
    patient: Optional[UserSummary] = None
    optometrist: Optional[UserSummary] = None
    user: Optional[UserSummary] = None

    class Config:
        from_attributes = True

    @model_validator(mode="after")
    def alias_patient_as_user(self):
        # Clients read the reviewer as `user`
        if self.user is None:
            self.user = self.patient
        return self
