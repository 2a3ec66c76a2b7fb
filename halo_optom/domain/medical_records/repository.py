"""Medical record repository; soft-deleted rows are never returned"""

from datetime import date, datetime, time
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from ...models import MedicalRecord


class MedicalRecordRepository:
    @staticmethod
    def _live(db: Session):
        return (
            db.query(MedicalRecord)
            .options(joinedload(MedicalRecord.patient), joinedload(MedicalRecord.optometrist))
            .filter(MedicalRecord.is_deleted.is_(False))
        )

    @staticmethod
    def get_by_id(db: Session, record_id: str) -> Optional[MedicalRecord]:
        return MedicalRecordRepository._live(db).filter(MedicalRecord.id == record_id).first()

    @staticmethod
    def get_by_appointment(db: Session, appointment_id: str, include_deleted: bool = False):
        query = db.query(MedicalRecord) if include_deleted else MedicalRecordRepository._live(db)
        return query.filter(MedicalRecord.appointment_id == appointment_id).first()

    @staticmethod
    def _filtered(
        db: Session,
        patient_id: Optional[str] = None,
        optometrist_id: Optional[str] = None,
        search: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ):
        query = MedicalRecordRepository._live(db)
        if patient_id:
            query = query.filter(MedicalRecord.patient_id == patient_id)
        if optometrist_id:
            query = query.filter(MedicalRecord.optometrist_id == optometrist_id)
        if search:
            term = f"%{search}%"
            query = query.filter(or_(MedicalRecord.diagnosis.ilike(term), MedicalRecord.notes.ilike(term)))
        if start_date and end_date:
            query = query.filter(
                MedicalRecord.created_at >= datetime.combine(start_date, time.min),
                MedicalRecord.created_at <= datetime.combine(end_date, time.max),
            )
        return query.order_by(MedicalRecord.created_at.desc())

    @staticmethod
    def list_records(db: Session, page: Optional[int] = None, limit: int = 10, **filters):
        query = MedicalRecordRepository._filtered(db, **filters)
        if page is None:
            return query.all(), None
        total = query.count()
        return query.offset((page - 1) * limit).limit(limit).all(), total

    @staticmethod
    def count(db: Session, since: Optional[datetime] = None) -> int:
        query = db.query(func.count(MedicalRecord.id)).filter(MedicalRecord.is_deleted.is_(False))
        if since:
            query = query.filter(MedicalRecord.created_at >= since)
        return query.scalar() or 0

    @staticmethod
    def count_distinct(db: Session, column) -> int:
        return (
            db.query(func.count(func.distinct(column))).filter(MedicalRecord.is_deleted.is_(False)).scalar()
            or 0
        )

    @staticmethod
    def save(db: Session, record: MedicalRecord) -> MedicalRecord:
        db.add(record)
        db.commit()
        db.refresh(record)
        return record
