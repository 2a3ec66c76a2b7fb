"""Medical record routers: practitioner/patient access and admin management"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_admin
from ...database import get_db
from ...models import User
from ...shared.csv_export import csv_response
from ...shared.dates import utcnow
from .schemas import MedicalRecordCreate, MedicalRecordResponse, MedicalRecordUpdate
from .service import MedicalRecordService

router = APIRouter(prefix="/medical-records", tags=["Medical Records"])
admin_router = APIRouter(prefix="/admin/medical-records", tags=["Admin"])


def get_medical_record_service(db: Session = Depends(get_db)) -> MedicalRecordService:
    return MedicalRecordService(db)


def record_filters(
    optometrist_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
) -> dict:
    return {
        "optometrist_id": optometrist_id,
        "search": search,
        "start_date": start_date,
        "end_date": end_date,
    }


# ============================================================================
# Practitioner and patient access
# ============================================================================


@router.post("", response_model=MedicalRecordResponse, status_code=201)
async def create_medical_record(
    data: MedicalRecordCreate,
    current_user: User = Depends(get_current_user),
    service: MedicalRecordService = Depends(get_medical_record_service),
):
    return service.create_record(current_user, data)


@router.get("/patient/{patient_id}", response_model=list[MedicalRecordResponse])
async def records_for_patient(
    patient_id: str,
    current_user: User = Depends(get_current_user),
    service: MedicalRecordService = Depends(get_medical_record_service),
):
    return service.for_patient(patient_id, current_user)


@router.get("/appointment/{appointment_id}", response_model=MedicalRecordResponse)
async def record_for_appointment(
    appointment_id: str,
    current_user: User = Depends(get_current_user),
    service: MedicalRecordService = Depends(get_medical_record_service),
):
    return service.for_appointment(appointment_id, current_user)


@router.get("/{record_id}", response_model=MedicalRecordResponse)
async def get_medical_record(
    record_id: str,
    current_user: User = Depends(get_current_user),
    service: MedicalRecordService = Depends(get_medical_record_service),
):
    return service.get_for_user(record_id, current_user)


# ============================================================================
# Admin
# ============================================================================


@admin_router.get("")
async def list_medical_records(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    patient_id: Optional[str] = Query(None),
    filters: dict = Depends(record_filters),
    _: User = Depends(require_admin),
    service: MedicalRecordService = Depends(get_medical_record_service),
):
    result = service.list_records(page=page, limit=limit, patient_id=patient_id, **filters)
    result["data"] = [MedicalRecordResponse.model_validate(r) for r in result["data"]]
    return result


@admin_router.get("/stats")
async def medical_record_stats(
    _: User = Depends(require_admin),
    service: MedicalRecordService = Depends(get_medical_record_service),
):
    return service.stats()


@admin_router.get("/report")
async def download_medical_records_report(
    patient_id: Optional[str] = Query(None),
    filters: dict = Depends(record_filters),
    _: User = Depends(require_admin),
    service: MedicalRecordService = Depends(get_medical_record_service),
):
    content = service.report_csv(patient_id=patient_id, **filters)
    return csv_response(content, f"medical_records_report_{utcnow().date().isoformat()}.csv")


@admin_router.get("/patient/{patient_id}/report")
async def download_patient_medical_records_report(
    patient_id: str,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    _: User = Depends(require_admin),
    service: MedicalRecordService = Depends(get_medical_record_service),
):
    content, patient_name = service.patient_report_csv(patient_id, start_date=start_date, end_date=end_date)
    slug = "_".join(patient_name.split())
    return csv_response(content, f"medical_records_{slug}_{utcnow().date().isoformat()}.csv")


@admin_router.put("/{record_id}", response_model=MedicalRecordResponse)
async def update_medical_record(
    record_id: str,
    data: MedicalRecordUpdate,
    _: User = Depends(require_admin),
    service: MedicalRecordService = Depends(get_medical_record_service),
):
    return service.update_record(record_id, data)


@admin_router.delete("/{record_id}")
async def delete_medical_record(
    record_id: str,
    _: User = Depends(require_admin),
    service: MedicalRecordService = Depends(get_medical_record_service),
):
    service.delete_record(record_id)
    return {"message": "Medical record deleted"}


__all__ = ["router", "admin_router"]
