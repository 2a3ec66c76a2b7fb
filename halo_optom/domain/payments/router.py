"""Payment router"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_admin
from ...database import get_db
from ...models import User
from ...shared.csv_export import csv_response
from ...shared.dates import utcnow
from .schemas import (
    BankTransferRequest,
    PaymentCreate,
    PaymentProofUpload,
    PaymentReject,
    PaymentResponse,
    PaymentUpdate,
)
from .service import PaymentService

router = APIRouter(prefix="/payments", tags=["Payments"])


def get_payment_service(db: Session = Depends(get_db)) -> PaymentService:
    return PaymentService(db)


def payment_filters(
    status: Optional[str] = Query(None),
    payment_type: Optional[str] = Query(None),
    payment_method: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
) -> dict:
    return {
        "status": status,
        "payment_type": payment_type,
        "payment_method": payment_method,
        "search": search,
        "start_date": start_date,
        "end_date": end_date,
    }


# ============================================================================
# Listing and reporting
# ============================================================================


@router.post("", response_model=PaymentResponse, status_code=201)
async def create_payment(
    data: PaymentCreate,
    current_user: User = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service),
):
    return service.create_payment(current_user, data)


@router.get("")
async def list_payments(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    filters: dict = Depends(payment_filters),
    current_user: User = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service),
):
    result = service.list_payments(current_user, page=page, limit=limit, **filters)
    result["data"] = [PaymentResponse.model_validate(p) for p in result["data"]]
    return result


@router.get("/stats")
async def payment_stats(
    _: User = Depends(require_admin), service: PaymentService = Depends(get_payment_service)
):
    return service.stats()


@router.get("/export")
async def export_payments(
    filters: dict = Depends(payment_filters),
    _: User = Depends(require_admin),
    service: PaymentService = Depends(get_payment_service),
):
    filename = f"payments_export_{utcnow().strftime('%Y%m%d_%H%M%S')}.csv"
    return csv_response(service.export_csv(**filters), filename)


@router.get("/pending")
async def pending_bank_transfers(
    _: User = Depends(require_admin), service: PaymentService = Depends(get_payment_service)
):
    return {"data": [PaymentResponse.model_validate(p) for p in service.pending_verifications()]}


@router.get("/appointment/{appointment_id}")
async def payments_for_appointment(
    appointment_id: str,
    current_user: User = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service),
):
    payments = service.for_appointment(appointment_id, current_user)
    return {"data": [PaymentResponse.model_validate(p) for p in payments]}


@router.get("/order/{order_id}")
async def payments_for_order(
    order_id: str,
    current_user: User = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service),
):
    payments = service.for_order(order_id, current_user)
    return {"data": [PaymentResponse.model_validate(p) for p in payments]}


# ============================================================================
# Bank transfer
# ============================================================================


@router.post("/bank-transfer", status_code=201)
async def create_bank_transfer(
    data: BankTransferRequest,
    current_user: User = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service),
):
    payment = service.create_bank_transfer(current_user, data)
    return {"message": "Bank transfer created", "payment": PaymentResponse.model_validate(payment)}


@router.post("/{payment_id}/proof", response_model=PaymentResponse)
async def upload_payment_proof(
    payment_id: str,
    data: PaymentProofUpload,
    current_user: User = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service),
):
    return service.submit_proof(payment_id, current_user, data.payment_proof_url)


@router.post("/{payment_id}/verify", response_model=PaymentResponse)
async def verify_payment(
    payment_id: str,
    current_user: User = Depends(require_admin),
    service: PaymentService = Depends(get_payment_service),
):
    return await service.verify(payment_id, current_user)


@router.post("/{payment_id}/reject", response_model=PaymentResponse)
async def reject_payment(
    payment_id: str,
    data: PaymentReject,
    current_user: User = Depends(require_admin),
    service: PaymentService = Depends(get_payment_service),
):
    return service.reject(payment_id, current_user, data.reason)


# ============================================================================
# Single payment
# ============================================================================


@router.get("/{payment_id}", response_model=PaymentResponse)
async def get_payment(
    payment_id: str,
    current_user: User = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service),
):
    return service.get_for_user(payment_id, current_user)


@router.get("/{payment_id}/status")
async def get_payment_status(
    payment_id: str,
    current_user: User = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service),
):
    return service.payment_status(payment_id, current_user)


@router.put("/{payment_id}", response_model=PaymentResponse)
async def update_payment(
    payment_id: str,
    data: PaymentUpdate,
    _: User = Depends(require_admin),
    service: PaymentService = Depends(get_payment_service),
):
    return await service.update_payment(payment_id, data)


__all__ = ["router"]
