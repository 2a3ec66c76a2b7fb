"""Optometrist service - public directory of practitioners"""

from datetime import date
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import User
from ...shared.dates import day_of_week, format_time_range
from .repository import OptometristRepository

FEATURED_LIMIT = 10


class OptometristService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = OptometristRepository()

    def _schedule_summary(self, optometrist_id: str) -> list[dict]:
        return [
            {"day": s.day_of_week, "time": format_time_range(s.start_time, s.end_time)}
            for s in self.repo.active_schedules(self.db, optometrist_id)
        ]

    def _list_item(self, user: User) -> dict:
        return {
            "id": user.id,
            "name": user.name,
            "photo": user.avatar_url,
            "rating": user.rating or 0,
            "experience": user.experience or "",
            "schedule": self._schedule_summary(user.id),
            "about": user.bio or "",
        }

    def list_optometrists(self) -> list[dict]:
        return [self._list_item(u) for u in self.repo.list_public(self.db)]

    def featured(self) -> list[dict]:
        return [self._list_item(u) for u in self.repo.list_public(self.db, limit=FEATURED_LIMIT, by_rating=True)]

    def get_detail(self, optometrist_id: str) -> dict:
        user = self.repo.get_optometrist(self.db, optometrist_id)
        if not user:
            raise HTTPException(status_code=404, detail="Optometrist not found")

        average, count = self.repo.review_stats(self.db, optometrist_id)
        detail = self._list_item(user)
        detail.update(
            {
                "rating": round(average, 1) if average is not None else 0,
                "review_count": count,
                "bio": user.bio or "",
                "certifications": user.certifications or "",
                "certification_list": user.certification_list,
                "str_number": user.str_number or "",
            }
        )
        return detail

    def available_slots(self, optometrist_id: str, on_date: Optional[date] = None) -> list[dict]:
        day = day_of_week(on_date) if on_date else None
        return [
            {"time": format_time_range(s.start_time, s.end_time), "available": True}
            for s in self.repo.active_schedules(self.db, optometrist_id, day_of_week=day)
        ]
