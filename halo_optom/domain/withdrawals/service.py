"""Withdrawal service - optometrist payout requests reviewed by admins"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...config import MINIMUM_WITHDRAWAL
from ...models import (
    ROLE_ADMIN,
    ROLE_OPTOMETRIST,
    WITHDRAW_APPROVED,
    WITHDRAW_PAID,
    WITHDRAW_PENDING,
    WITHDRAW_REJECTED,
    WITHDRAW_STATUSES,
    User,
    WithdrawRequest,
)
from ...services.notification_service import notify_admins, send_notification
from ...shared.dates import utcnow
from ...shared.formatting import format_idr, to_decimal
from ..wallets.service import WalletService
from .repository import WithdrawRepository
from .schemas import WithdrawCreate

logger = logging.getLogger(__name__)


class WithdrawService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = WithdrawRepository()
        self.wallets = WalletService(db)

    def create_request(self, optometrist: User, data: WithdrawCreate) -> WithdrawRequest:
        amount = to_decimal(data.amount)
        if amount <= 0:
            raise HTTPException(status_code=400, detail="Invalid withdrawal amount")
        if amount < MINIMUM_WITHDRAWAL:
            raise HTTPException(
                status_code=400, detail=f"Minimum withdrawal amount is {format_idr(MINIMUM_WITHDRAWAL)}"
            )

        # Hold and request row share one transaction
        self.wallets.hold_balance(optometrist.id, amount, commit=False)
        request = self.repo.create(
            self.db,
            optometrist_id=optometrist.id,
            amount=amount,
            bank_name=data.bank_name,
            bank_account_number=data.bank_account_number,
            bank_account_name=data.bank_account_name,
            status=WITHDRAW_PENDING,
        )
        self.db.commit()
        self.db.refresh(request)
        logger.info(f"🏦 Withdrawal {request.id} of {format_idr(amount)} requested by {optometrist.id}")

        notify_admins(
            self.db,
            "New withdrawal request",
            f"{optometrist.name} requested a withdrawal of {format_idr(amount)}",
            "withdrawal",
            {"type": "withdrawal", "id": request.id},
        )
        return request

    def list_requests(
        self, user: User, status: Optional[str] = None, optometrist_id: Optional[str] = None
    ) -> list[WithdrawRequest]:
        if status and status not in WITHDRAW_STATUSES:
            raise HTTPException(status_code=400, detail=f"Invalid status: {status}")
        if user.role == ROLE_OPTOMETRIST:
            return self.repo.list_requests(self.db, optometrist_id=user.id, status=status)
        if user.role == ROLE_ADMIN:
            return self.repo.list_requests(self.db, optometrist_id=optometrist_id, status=status)
        raise HTTPException(status_code=403, detail="Access denied")

    def _get_for_review(self, request_id: str, expected_status: str, action: str) -> WithdrawRequest:
        request = self.repo.get_by_id(self.db, request_id, for_update=True)
        if not request:
            raise HTTPException(status_code=404, detail="Withdrawal request not found")
        if request.status != expected_status:
            raise HTTPException(
                status_code=400, detail=f"Only {expected_status.lower()} requests can be {action}"
            )
        return request

    def _notify(self, request: WithdrawRequest, title: str, body: str):
        send_notification(
            self.db,
            request.optometrist_id,
            title,
            body,
            "withdrawal",
            {"type": "withdrawal", "id": request.id, "status": request.status},
        )

    def approve(self, request_id: str, admin: User) -> WithdrawRequest:
        request = self._get_for_review(request_id, WITHDRAW_PENDING, "approved")
        request.status = WITHDRAW_APPROVED
        request.reviewed_by_admin_id = admin.id
        request.reviewed_at = utcnow()
        self.db.commit()
        self.db.refresh(request)
        logger.info(f"✅ Withdrawal {request.id} approved by {admin.id}")

        self._notify(
            request,
            "Withdrawal approved",
            f"Your withdrawal of {format_idr(request.amount)} was approved and will be transferred soon.",
        )
        return request

    def reject(self, request_id: str, admin: User, reason: Optional[str]) -> WithdrawRequest:
        if not reason or not reason.strip():
            raise HTTPException(status_code=400, detail="Rejection reason is required")

        request = self._get_for_review(request_id, WITHDRAW_PENDING, "rejected")
        self.wallets.release_hold(request.optometrist_id, request.amount, commit=False)
        request.status = WITHDRAW_REJECTED
        request.reviewed_by_admin_id = admin.id
        request.reviewed_at = utcnow()
        request.note = reason.strip()
        self.db.commit()
        self.db.refresh(request)
        logger.info(f"Withdrawal {request.id} rejected by {admin.id}")

        self._notify(
            request,
            "Withdrawal rejected",
            f"Your withdrawal of {format_idr(request.amount)} was rejected. Reason: {request.note}. "
            "The amount has been returned to your balance.",
        )
        return request

    def mark_paid(self, request_id: str, admin: User) -> WithdrawRequest:
        request = self._get_for_review(request_id, WITHDRAW_APPROVED, "marked as paid")
        self.wallets.deduct_hold(request.optometrist_id, request.amount, commit=False)
        request.status = WITHDRAW_PAID
        if not request.reviewed_by_admin_id:
            request.reviewed_by_admin_id = admin.id
        self.db.commit()
        self.db.refresh(request)
        logger.info(f"💸 Withdrawal {request.id} paid out")

        self._notify(
            request,
            "Withdrawal transferred",
            f"{format_idr(request.amount)} has been transferred to your bank account.",
        )
        return request
