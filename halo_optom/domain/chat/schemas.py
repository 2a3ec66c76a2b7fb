"""Chat schemas"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel

from ..users.schemas import UserSummary


class MessageCreate(BaseModel):
    message: Optional[str] = None
    to_user_id: Optional[str] = None
    attachments: Optional[Any] = None


class MessageResponse(BaseModel):
    id: str
    room_id: str
    from_user_id: str
    to_user_id: Optional[str] = None
    message: str
    attachments: Optional[Any] = None
    created_at: Optional[datetime] = None
    from_user: Optional[UserSummary] = None
    to_user: Optional[UserSummary] = None

    class Config:
        from_attributes = True


class RoomResponse(BaseModel):
    id: str
    appointment_id: Optional[str] = None
    created_at: Optional[datetime] = None
    participants: list[UserSummary] = []

    class Config:
        from_attributes = True
