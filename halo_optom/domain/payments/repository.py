"""Payment repository"""

from datetime import date, datetime, time
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...models import Appointment, Order, Payment

EXPORT_LIMIT = 1000


class PaymentRepository:
    @staticmethod
    def get_by_id(db: Session, payment_id: str) -> Optional[Payment]:
        return db.query(Payment).filter(Payment.id == payment_id).first()

    @staticmethod
    def get_by_external_id(db: Session, external_id: str) -> Optional[Payment]:
        return db.query(Payment).filter(Payment.external_id == external_id).first()

    @staticmethod
    def _filtered(
        db: Session,
        owner_id: Optional[str] = None,
        status: Optional[str] = None,
        payment_type: Optional[str] = None,
        payment_method: Optional[str] = None,
        search: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ):
        query = db.query(Payment)
        if owner_id:
            # A payment belongs to the patient of its appointment or order
            query = (
                query.outerjoin(Appointment, Payment.appointment_id == Appointment.id)
                .outerjoin(Order, Payment.order_id == Order.id)
                .filter(or_(Appointment.patient_id == owner_id, Order.patient_id == owner_id))
            )
        if status:
            query = query.filter(Payment.status == status)
        if payment_type:
            query = query.filter(Payment.payment_type == payment_type)
        if payment_method:
            query = query.filter(Payment.payment_method == payment_method)
        if search:
            term = f"%{search}%"
            query = query.filter(
                or_(Payment.id.ilike(term), Payment.external_id.ilike(term), Payment.payment_id.ilike(term))
            )
        if start_date and end_date:
            query = query.filter(
                Payment.created_at >= datetime.combine(start_date, time.min),
                Payment.created_at <= datetime.combine(end_date, time.max),
            )
        return query

    @staticmethod
    def list_payments(db: Session, page: int = 1, limit: int = 10, **filters) -> tuple[list[Payment], int]:
        query = PaymentRepository._filtered(db, **filters)
        total = query.count()
        rows = query.order_by(Payment.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
        return rows, total

    @staticmethod
    def export_rows(db: Session, **filters) -> list[Payment]:
        query = PaymentRepository._filtered(db, **filters)
        return query.order_by(Payment.created_at.desc()).limit(EXPORT_LIMIT).all()

    @staticmethod
    def list_for_target(
        db: Session, appointment_id: Optional[str] = None, order_id: Optional[str] = None
    ) -> list[Payment]:
        query = db.query(Payment)
        if appointment_id:
            query = query.filter(Payment.appointment_id == appointment_id)
        if order_id:
            query = query.filter(Payment.order_id == order_id)
        return query.order_by(Payment.created_at.desc()).all()

    @staticmethod
    def list_pending_verification(db: Session) -> list[Payment]:
        return (
            db.query(Payment)
            .filter(Payment.payment_method == "bank_transfer", Payment.status == "waiting_verification")
            .order_by(Payment.created_at.asc())
            .all()
        )

    @staticmethod
    def open_payment(db: Session, payment_type: str, target_id: str) -> Optional[Payment]:
        """Any payment for the target that can still be paid, whatever its method"""
        column = Payment.appointment_id if payment_type == "appointment" else Payment.order_id
        return (
            db.query(Payment)
            .filter(column == target_id, Payment.status.in_(("pending", "waiting_verification")))
            .first()
        )

    @staticmethod
    def delete_failed_payments(db: Session, payment_type: str, target_id: str) -> int:
        column = Payment.appointment_id if payment_type == "appointment" else Payment.order_id
        return (
            db.query(Payment)
            .filter(column == target_id, Payment.status.in_(("rejected", "expired")))
            .delete(synchronize_session=False)
        )

    @staticmethod
    def add(db: Session, payment: Payment) -> Payment:
        db.add(payment)
        db.flush()
        return payment

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    @staticmethod
    def count_and_sum(db: Session, status: Optional[str] = None, since: Optional[datetime] = None):
        query = db.query(func.count(Payment.id), func.coalesce(func.sum(Payment.amount), 0))
        if status:
            query = query.filter(Payment.status == status)
        if since:
            query = query.filter(Payment.paid_at >= since)
        return query.one()

    @staticmethod
    def grouped(db: Session, column):
        if column is Payment.status:
            return (
                db.query(column, func.count(Payment.id), func.coalesce(func.sum(Payment.amount), 0))
                .group_by(column)
                .all()
            )
        return db.query(column, func.count(Payment.id)).group_by(column).all()
