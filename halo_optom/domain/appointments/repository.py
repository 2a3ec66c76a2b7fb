"""Appointment repository"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Appointment


class AppointmentRepository:
    @staticmethod
    def _with_people(db: Session):
        return db.query(Appointment).options(
            joinedload(Appointment.patient), joinedload(Appointment.optometrist)
        )

    @staticmethod
    def get_by_id(db: Session, appointment_id: str) -> Optional[Appointment]:
        return AppointmentRepository._with_people(db).filter(Appointment.id == appointment_id).first()

    @staticmethod
    def list_appointments(
        db: Session, patient_id: Optional[str] = None, optometrist_id: Optional[str] = None
    ) -> list[Appointment]:
        query = AppointmentRepository._with_people(db)
        if patient_id:
            query = query.filter(Appointment.patient_id == patient_id)
        if optometrist_id:
            query = query.filter(Appointment.optometrist_id == optometrist_id)
        return query.order_by(Appointment.created_at.desc()).all()

    @staticmethod
    def next_for_user(db: Session, user_id: str, as_patient: bool) -> Optional[Appointment]:
        """Earliest confirmed or ongoing paid appointment by date then start time"""
        owner = Appointment.patient_id if as_patient else Appointment.optometrist_id
        return (
            AppointmentRepository._with_people(db)
            .filter(
                owner == user_id,
                Appointment.status.in_(("confirmed", "ongoing")),
                Appointment.payment_status == "paid",
            )
            .order_by(Appointment.date.asc(), Appointment.start_time.asc())
            .first()
        )

    @staticmethod
    def create(db: Session, **data) -> Appointment:
        appointment = Appointment(**data)
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment
