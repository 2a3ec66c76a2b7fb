"""Appointment router"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_admin
from ...database import get_db
from ...models import User
from ..payments.schemas import BankTransferRequest, PaymentResponse
from ..payments.service import PaymentService
from .schemas import (
    AppointmentCreate,
    AppointmentResponse,
    CancelRequest,
    CommissionUpdate,
    RescheduleRequest,
    StatusUpdate,
)
from .service import AppointmentService

router = APIRouter(prefix="/appointments", tags=["Appointments"])

# Same endpoints under /patients/appointments for the patient app
patients_router = APIRouter(prefix="/patients")


def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    return AppointmentService(db)


def get_payment_service(db: Session = Depends(get_db)) -> PaymentService:
    return PaymentService(db)


# ============================================================================
# Booking and listing
# ============================================================================


@router.post("", status_code=201)
async def create_appointment(
    data: AppointmentCreate,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    appointment = service.create_appointment(current_user, data)
    return {
        "message": "Appointment created successfully",
        "appointment": AppointmentResponse.model_validate(appointment),
    }


@router.get("", response_model=list[AppointmentResponse])
async def list_appointments(
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.list_for_user(current_user)


@router.get("/next")
async def next_appointment(
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    appointment = service.next_for_user(current_user)
    if appointment is None:
        return None

    result = AppointmentResponse.model_validate(appointment).model_dump(mode="json")
    if appointment.method == "chat" and appointment.chat_room_id:
        result["chat"] = {"room_id": appointment.chat_room_id}
    return result


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: str,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.get_for_user(appointment_id, current_user)


@router.get("/{appointment_id}/consultation")
async def get_consultation(
    appointment_id: str,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    return {"data": await service.consultation_details(appointment_id, current_user)}


# ============================================================================
# Lifecycle
# ============================================================================


@router.patch("/{appointment_id}/status", response_model=AppointmentResponse)
async def update_appointment_status(
    appointment_id: str,
    data: StatusUpdate,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.update_status(appointment_id, current_user, data.status)


@router.patch("/{appointment_id}/reschedule", response_model=AppointmentResponse)
async def reschedule_appointment(
    appointment_id: str,
    data: RescheduleRequest,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.reschedule(appointment_id, current_user, data)


@router.patch("/{appointment_id}/complete")
async def complete_appointment(
    appointment_id: str,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    appointment = service.complete(appointment_id, current_user)
    return {
        "message": "Consultation completed",
        "appointment": AppointmentResponse.model_validate(appointment),
    }


@router.post("/{appointment_id}/cancel", response_model=AppointmentResponse)
async def cancel_appointment(
    appointment_id: str,
    data: CancelRequest,
    current_user: User = Depends(get_current_user),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.cancel(appointment_id, current_user, data.reason)


@router.patch("/{appointment_id}/commission", response_model=AppointmentResponse)
async def update_appointment_commission(
    appointment_id: str,
    data: CommissionUpdate,
    _: User = Depends(require_admin),
    service: AppointmentService = Depends(get_appointment_service),
):
    return service.update_commission(appointment_id, data.commission_percentage)


# ============================================================================
# Payment
# ============================================================================


@router.post("/{appointment_id}/payment")
async def create_appointment_payment(
    appointment_id: str,
    current_user: User = Depends(get_current_user),
    payments: PaymentService = Depends(get_payment_service),
):
    result = await payments.create_invoice_payment("appointment", appointment_id, current_user)
    result["payment"] = PaymentResponse.model_validate(result["payment"])
    return result


@router.post("/{appointment_id}/payment/bank-transfer", status_code=201)
async def create_appointment_bank_transfer(
    appointment_id: str,
    current_user: User = Depends(get_current_user),
    payments: PaymentService = Depends(get_payment_service),
):
    payment = payments.create_bank_transfer(
        current_user, BankTransferRequest(payment_type="appointment", appointment_id=appointment_id)
    )
    return {"message": "Bank transfer created", "payment": PaymentResponse.model_validate(payment)}


patients_router.include_router(router)

__all__ = ["router", "patients_router"]
