"""Medical record service - consultation notes written by optometrists"""

import logging
import math
from datetime import timedelta

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import ROLE_ADMIN, ROLE_OPTOMETRIST, MedicalRecord, User
from ...shared.csv_export import rows_to_csv
from ...shared.dates import start_of_month, utcnow
from ...utils.sanitization import sanitize_text
from ..appointments.repository import AppointmentRepository
from ..users.repository import UserRepository
from .repository import MedicalRecordRepository
from .schemas import MedicalRecordCreate, MedicalRecordUpdate

logger = logging.getLogger(__name__)

REPORT_HEADER = ["ID", "Date", "Patient", "Optometrist", "Diagnosis", "Prescription", "Notes"]
TEXT_FIELDS = ("diagnosis", "prescription", "notes")


def _clean(values: dict) -> dict:
    return {k: sanitize_text(v) if k in TEXT_FIELDS and v else v for k, v in values.items()}


class MedicalRecordService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = MedicalRecordRepository()

    def create_record(self, user: User, data: MedicalRecordCreate) -> MedicalRecord:
        if user.role != ROLE_OPTOMETRIST:
            raise HTTPException(status_code=403, detail="Only optometrists can write medical records")

        appointment = AppointmentRepository.get_by_id(self.db, data.appointment_id)
        if not appointment:
            raise HTTPException(status_code=404, detail="Appointment not found")
        if appointment.optometrist_id != user.id:
            raise HTTPException(status_code=403, detail="You cannot write records for another optometrist's patient")
        if self.repo.get_by_appointment(self.db, appointment.id, include_deleted=True):
            raise HTTPException(status_code=400, detail="A medical record already exists for this appointment")

        record = MedicalRecord(
            appointment_id=appointment.id,
            patient_id=appointment.patient_id,
            optometrist_id=appointment.optometrist_id,
            **_clean(data.model_dump(exclude={"appointment_id"})),
        )
        record = self.repo.save(self.db, record)
        logger.info(f"📋 Medical record {record.id} created for appointment {appointment.id}")
        return self.repo.get_by_id(self.db, record.id)

    def get_record(self, record_id: str) -> MedicalRecord:
        record = self.repo.get_by_id(self.db, record_id)
        if not record:
            raise HTTPException(status_code=404, detail="Medical record not found")
        return record

    @staticmethod
    def _check_access(record: MedicalRecord, user: User):
        if user.role != ROLE_ADMIN and user.id not in (record.patient_id, record.optometrist_id):
            raise HTTPException(status_code=403, detail="You are not allowed to view this medical record")

    def get_for_user(self, record_id: str, user: User) -> MedicalRecord:
        record = self.get_record(record_id)
        self._check_access(record, user)
        return record

    def for_appointment(self, appointment_id: str, user: User) -> MedicalRecord:
        record = self.repo.get_by_appointment(self.db, appointment_id)
        if not record:
            raise HTTPException(status_code=404, detail="Medical record not found")
        self._check_access(record, user)
        return record

    def for_patient(self, patient_id: str, user: User) -> list[MedicalRecord]:
        if user.role != ROLE_ADMIN and user.id != patient_id:
            raise HTTPException(status_code=403, detail="You are not allowed to view another patient's records")
        records, _ = self.repo.list_records(self.db, patient_id=patient_id)
        return records

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    def list_records(self, page: int = 1, limit: int = 10, **filters) -> dict:
        records, total = self.repo.list_records(self.db, page=page, limit=limit, **filters)
        return {
            "data": records,
            "meta": {
                "total": total,
                "page": page,
                "limit": limit,
                "totalPages": math.ceil(total / limit) if total else 0,
            },
        }

    def update_record(self, record_id: str, data: MedicalRecordUpdate) -> MedicalRecord:
        record = self.get_record(record_id)
        for key, value in _clean(data.model_dump(exclude_unset=True)).items():
            setattr(record, key, value)
        return self.repo.save(self.db, record)

    def delete_record(self, record_id: str) -> None:
        record = self.get_record(record_id)
        record.is_deleted = True
        record.deleted_at = utcnow()
        self.db.commit()
        logger.info(f"🗑️ Medical record {record.id} soft-deleted")

    @staticmethod
    def _to_csv(records: list[MedicalRecord]) -> str:
        return rows_to_csv(
            REPORT_HEADER,
            (
                [
                    r.id,
                    r.created_at.date().isoformat() if r.created_at else None,
                    r.patient.name if r.patient else None,
                    r.optometrist.name if r.optometrist else None,
                    r.diagnosis or "-",
                    r.prescription or "-",
                    r.notes or "-",
                ]
                for r in records
            ),
        )

    def report_csv(self, **filters) -> str:
        records, _ = self.repo.list_records(self.db, **filters)
        if not records:
            raise HTTPException(status_code=404, detail="No medical records match the filters")
        return self._to_csv(records)

    def patient_report_csv(self, patient_id: str, **filters) -> tuple[str, str]:
        """CSV of one patient's records plus the patient's name for the filename"""
        patient = UserRepository.get_by_id(self.db, patient_id)
        if not patient:
            raise HTTPException(status_code=404, detail="Patient not found")
        filters["patient_id"] = patient_id
        records, _ = self.repo.list_records(self.db, **filters)
        if not records:
            raise HTTPException(status_code=404, detail="No medical records for this patient")
        return self._to_csv(records), patient.name

    def stats(self) -> dict:
        now = utcnow()
        return {
            "totalRecords": self.repo.count(self.db),
            "recentRecords": self.repo.count(self.db, since=now - timedelta(days=30)),
            "monthlyRecords": self.repo.count(self.db, since=start_of_month(now)),
            "activePatients": self.repo.count_distinct(self.db, MedicalRecord.patient_id),
            "activeOptometrists": self.repo.count_distinct(self.db, MedicalRecord.optometrist_id),
        }
