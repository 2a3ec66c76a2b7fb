"""Review repository"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ...models import Review


class ReviewRepository:
    @staticmethod
    def _query(db: Session):
        return db.query(Review).options(joinedload(Review.patient), joinedload(Review.optometrist))

    @staticmethod
    def get_by_id(db: Session, review_id: str) -> Optional[Review]:
        return ReviewRepository._query(db).filter(Review.id == review_id).first()

    @staticmethod
    def get_by_pair(db: Session, patient_id: str, optometrist_id: str) -> Optional[Review]:
        return (
            db.query(Review)
            .filter(Review.patient_id == patient_id, Review.optometrist_id == optometrist_id)
            .first()
        )

    @staticmethod
    def list_reviews(
        db: Session,
        optometrist_id: Optional[str] = None,
        patient_id: Optional[str] = None,
        statuses: Optional[tuple] = None,
    ) -> list[Review]:
        query = ReviewRepository._query(db)
        if optometrist_id:
            query = query.filter(Review.optometrist_id == optometrist_id)
        if patient_id:
            query = query.filter(Review.patient_id == patient_id)
        if statuses:
            query = query.filter(Review.status.in_(statuses))
        return query.order_by(Review.created_at.desc()).all()

    @staticmethod
    def count(db: Session, status: Optional[str] = None, reported: bool = False) -> int:
        query = db.query(func.count(Review.id))
        if status:
            query = query.filter(Review.status == status)
        if reported:
            query = query.filter(Review.report_count > 0)
        return query.scalar() or 0

    @staticmethod
    def average_rating(db: Session) -> Optional[float]:
        avg = db.query(func.avg(Review.rating)).scalar()
        return float(avg) if avg is not None else None

    @staticmethod
    def save(db: Session, review: Review) -> Review:
        db.add(review)
        db.flush()
        return review

    @staticmethod
    def delete(db: Session, review: Review) -> None:
        db.delete(review)
        db.flush()
