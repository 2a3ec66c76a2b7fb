"""Schedule service - optometrist weekly availability"""

import logging
from datetime import date, time, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import ROLE_ADMIN, ROLE_OPTOMETRIST, Schedule, User
from ...shared.dates import day_of_week, format_time_range
from ..users.repository import UserRepository
from .repository import ScheduleRepository
from .schemas import ScheduleBulkCreate, ScheduleCreate, ScheduleUpdate

logger = logging.getLogger(__name__)


def intervals_overlap(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    return start_a < end_b and end_a > start_b


class ScheduleService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ScheduleRepository()
        self.users = UserRepository()

    def _resolve_owner(self, actor: User, optometrist_id: Optional[str]) -> str:
        """Which optometrist a create acts for"""
        if actor.role == ROLE_ADMIN:
            if not optometrist_id:
                raise HTTPException(status_code=400, detail="optometrist_id is required for admin")
            optometrist = self.users.get_by_id(self.db, optometrist_id)
            if not optometrist or optometrist.role != ROLE_OPTOMETRIST:
                raise HTTPException(status_code=404, detail="Optometrist not found")
            return optometrist.id

        if actor.role == ROLE_OPTOMETRIST:
            if optometrist_id and optometrist_id != actor.id:
                raise HTTPException(status_code=403, detail="You can only manage your own schedules")
            return actor.id

        raise HTTPException(status_code=403, detail="Only admins and optometrists can manage schedules")

    @staticmethod
    def _check_times(start_time: time, end_time: time, day: str):
        if start_time >= end_time:
            raise HTTPException(
                status_code=400,
                detail=f"Start time must be earlier than end time: {day} {format_time_range(start_time, end_time)}",
            )

    def _check_overlap(self, optometrist_id: str, day: str, start_time: time, end_time: time, exclude_id=None):
        clash = self.repo.find_overlap(self.db, optometrist_id, day, start_time, end_time, exclude_id=exclude_id)
        if clash:
            raise HTTPException(
                status_code=409,
                detail=f"Schedule {day} {format_time_range(start_time, end_time)} overlaps an existing schedule",
            )

    def _get_owned(self, schedule_id: str, actor: User) -> Schedule:
        schedule = self.get_schedule(schedule_id)
        if actor.role != ROLE_ADMIN and schedule.optometrist_id != actor.id:
            raise HTTPException(status_code=403, detail="You cannot modify another optometrist's schedule")
        return schedule

    def create_schedule(self, actor: User, data: ScheduleCreate) -> Schedule:
        owner_id = self._resolve_owner(actor, data.optometrist_id)
        self._check_times(data.start_time, data.end_time, data.day_of_week)
        self._check_overlap(owner_id, data.day_of_week, data.start_time, data.end_time)

        schedule = self.repo.create(
            self.db,
            optometrist_id=owner_id,
            day_of_week=data.day_of_week,
            start_time=data.start_time,
            end_time=data.end_time,
            is_active=data.is_active,
        )
        logger.info(f"📅 Schedule {schedule.id} created for {owner_id}")
        return schedule

    def bulk_create(self, actor: User, data: ScheduleBulkCreate) -> list[Schedule]:
        """Validate every slot against stored rows and each other, then insert all at once"""
        owner_id = self._resolve_owner(actor, data.optometrist_id)
        if not data.schedules:
            raise HTTPException(status_code=400, detail="No schedules provided")

        accepted = []
        for slot in data.schedules:
            self._check_times(slot.start_time, slot.end_time, slot.day_of_week)
            self._check_overlap(owner_id, slot.day_of_week, slot.start_time, slot.end_time)
            for other in accepted:
                if other.day_of_week == slot.day_of_week and intervals_overlap(
                    slot.start_time, slot.end_time, other.start_time, other.end_time
                ):
                    raise HTTPException(
                        status_code=409,
                        detail=f"Schedules overlap each other on {slot.day_of_week}",
                    )
            accepted.append(slot)

        rows = [
            {
                "optometrist_id": owner_id,
                "day_of_week": slot.day_of_week,
                "start_time": slot.start_time,
                "end_time": slot.end_time,
                "is_active": slot.is_active,
            }
            for slot in accepted
        ]
        schedules = self.repo.create_many(self.db, rows)
        logger.info(f"📅 {len(schedules)} schedules created for {owner_id}")
        return schedules

    def list_schedules(self, optometrist_id=None, day_of_week=None, is_active=None) -> list[Schedule]:
        return self.repo.list_schedules(
            self.db,
            optometrist_id=optometrist_id,
            day_of_week=day_of_week.lower() if day_of_week else None,
            is_active=is_active,
        )

    def get_schedule(self, schedule_id: str) -> Schedule:
        schedule = self.repo.get_by_id(self.db, schedule_id)
        if not schedule:
            raise HTTPException(status_code=404, detail="Schedule not found")
        return schedule

    def update_schedule(self, schedule_id: str, actor: User, data: ScheduleUpdate) -> Schedule:
        schedule = self._get_owned(schedule_id, actor)

        day = data.day_of_week or schedule.day_of_week
        start_time = data.start_time or schedule.start_time
        end_time = data.end_time or schedule.end_time
        self._check_times(start_time, end_time, day)
        self._check_overlap(schedule.optometrist_id, day, start_time, end_time, exclude_id=schedule.id)

        schedule.day_of_week = day
        schedule.start_time = start_time
        schedule.end_time = end_time
        if data.is_active is not None:
            schedule.is_active = data.is_active
        self.db.commit()
        self.db.refresh(schedule)
        return schedule

    def delete_schedule(self, schedule_id: str, actor: User) -> None:
        self.repo.delete(self.db, self._get_owned(schedule_id, actor))

    def available_dates(self, optometrist_id: str, days: int = 14, start: Optional[date] = None) -> list[dict]:
        """Next `days` calendar dates (from today) whose weekday has an active schedule"""
        active = self.repo.active_days(self.db, optometrist_id)
        start = start or date.today()
        result = []
        for offset in range(days):
            current = start + timedelta(days=offset)
            weekday = day_of_week(current)
            if weekday in active:
                result.append({"date": current.isoformat(), "day_of_week": weekday})
        return result
