"""Optometrist directory queries"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import ROLE_OPTOMETRIST, Review, Schedule, User


class OptometristRepository:
    @staticmethod
    def list_public(db: Session, limit: Optional[int] = None, by_rating: bool = False) -> list[User]:
        """Verified, active optometrists"""
        query = db.query(User).filter(
            User.role == ROLE_OPTOMETRIST, User.is_verified.is_(True), User.is_active.is_(True)
        )
        if by_rating:
            query = query.order_by(func.coalesce(User.rating, 0).desc(), User.name)
        else:
            query = query.order_by(User.name)
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def get_optometrist(db: Session, optometrist_id: str) -> Optional[User]:
        return db.query(User).filter(User.id == optometrist_id, User.role == ROLE_OPTOMETRIST).first()

    @staticmethod
    def active_schedules(db: Session, optometrist_id: str, day_of_week: Optional[str] = None) -> list[Schedule]:
        query = db.query(Schedule).filter(Schedule.optometrist_id == optometrist_id, Schedule.is_active.is_(True))
        if day_of_week:
            query = query.filter(Schedule.day_of_week == day_of_week)
        return query.order_by(Schedule.start_time).all()

    @staticmethod
    def review_stats(db: Session, optometrist_id: str) -> tuple[Optional[float], int]:
        """(average rating, review count) over all of the optometrist's reviews"""
        avg, count = (
            db.query(func.avg(Review.rating), func.count(Review.id))
            .filter(Review.optometrist_id == optometrist_id)
            .one()
        )
        return (float(avg) if avg is not None else None), count or 0
