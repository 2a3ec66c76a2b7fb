"""Schedule repository - weekly availability slots"""

from datetime import time
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Schedule


class ScheduleRepository:
    @staticmethod
    def get_by_id(db: Session, schedule_id: str) -> Optional[Schedule]:
        return db.query(Schedule).filter(Schedule.id == schedule_id).first()

    @staticmethod
    def list_schedules(
        db: Session,
        optometrist_id: Optional[str] = None,
        day_of_week: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> list[Schedule]:
        query = db.query(Schedule)
        if optometrist_id:
            query = query.filter(Schedule.optometrist_id == optometrist_id)
        if day_of_week:
            query = query.filter(Schedule.day_of_week == day_of_week)
        if is_active is not None:
            query = query.filter(Schedule.is_active.is_(is_active))
        return query.order_by(Schedule.day_of_week, Schedule.start_time).all()

    @staticmethod
    def find_overlap(
        db: Session,
        optometrist_id: str,
        day_of_week: str,
        start_time: time,
        end_time: time,
        exclude_id: Optional[str] = None,
    ) -> Optional[Schedule]:
        """First schedule of the same optometrist and day whose interval intersects [start, end)"""
        query = db.query(Schedule).filter(
            Schedule.optometrist_id == optometrist_id,
            Schedule.day_of_week == day_of_week,
            Schedule.start_time < end_time,
            Schedule.end_time > start_time,
        )
        if exclude_id:
            query = query.filter(Schedule.id != exclude_id)
        return query.first()

    @staticmethod
    def active_days(db: Session, optometrist_id: str) -> set[str]:
        rows = (
            db.query(Schedule.day_of_week)
            .filter(Schedule.optometrist_id == optometrist_id, Schedule.is_active.is_(True))
            .distinct()
            .all()
        )
        return {row[0] for row in rows}

    @staticmethod
    def create(db: Session, **data) -> Schedule:
        schedule = Schedule(**data)
        db.add(schedule)
        db.commit()
        db.refresh(schedule)
        return schedule

    @staticmethod
    def create_many(db: Session, rows: list[dict]) -> list[Schedule]:
        schedules = [Schedule(**row) for row in rows]
        db.add_all(schedules)
        db.commit()
        for schedule in schedules:
            db.refresh(schedule)
        return schedules

    @staticmethod
    def delete(db: Session, schedule: Schedule) -> None:
        db.delete(schedule)
        db.commit()
