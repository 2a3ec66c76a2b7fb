"""Optometrist directory schemas"""

from typing import Optional

from pydantic import BaseModel


class ScheduleSummary(BaseModel):
    day: str
    time: str


class OptometristListItem(BaseModel):
    id: str
    name: str
    photo: Optional[str] = None
    rating: float = 0
    experience: str = ""
    schedule: list[ScheduleSummary] = []
    about: str = ""


class OptometristDetail(OptometristListItem):
    bio: str = ""
    certifications: str = ""
    certification_list: list[str] = []
    str_number: str = ""
    review_count: int = 0


class AvailableSlot(BaseModel):
    time: str
    available: bool = True
