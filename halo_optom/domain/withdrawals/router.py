"""Withdrawal router"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_admin, require_optometrist
from ...database import get_db
from ...models import User
from .schemas import WithdrawCreate, WithdrawReject, WithdrawResponse
from .service import WithdrawService

router = APIRouter(prefix="/withdraw-requests", tags=["Withdrawals"])


def get_withdraw_service(db: Session = Depends(get_db)) -> WithdrawService:
    return WithdrawService(db)


@router.post("", status_code=201)
async def create_withdraw_request(
    data: WithdrawCreate,
    current_user: User = Depends(require_optometrist),
    service: WithdrawService = Depends(get_withdraw_service),
):
    request = service.create_request(current_user, data)
    return {"message": "Withdrawal request submitted", "data": WithdrawResponse.model_validate(request)}


@router.get("")
async def list_withdraw_requests(
    status: Optional[str] = Query(None),
    optometrist_id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    service: WithdrawService = Depends(get_withdraw_service),
):
    requests = service.list_requests(current_user, status=status, optometrist_id=optometrist_id)
    return {"data": [WithdrawResponse.model_validate(r) for r in requests]}


@router.patch("/{request_id}/approve")
async def approve_withdraw_request(
    request_id: str,
    admin: User = Depends(require_admin),
    service: WithdrawService = Depends(get_withdraw_service),
):
    request = service.approve(request_id, admin)
    return {"message": "Withdrawal request approved", "data": WithdrawResponse.model_validate(request)}


@router.patch("/{request_id}/reject")
async def reject_withdraw_request(
    request_id: str,
    data: WithdrawReject,
    admin: User = Depends(require_admin),
    service: WithdrawService = Depends(get_withdraw_service),
):
    request = service.reject(request_id, admin, data.reason)
    return {"message": "Withdrawal request rejected", "data": WithdrawResponse.model_validate(request)}


@router.patch("/{request_id}/mark-paid")
async def mark_withdraw_request_paid(
    request_id: str,
    admin: User = Depends(require_admin),
    service: WithdrawService = Depends(get_withdraw_service),
):
    request = service.mark_paid(request_id, admin)
    return {"message": "Withdrawal marked as paid", "data": WithdrawResponse.model_validate(request)}


__all__ = ["router"]
