"""Withdrawal repository"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import WithdrawRequest


class WithdrawRepository:
    @staticmethod
    def create(db: Session, **data) -> WithdrawRequest:
        request = WithdrawRequest(**data)
        db.add(request)
        db.flush()
        return request

    @staticmethod
    def get_by_id(db: Session, request_id: str, for_update: bool = False) -> Optional[WithdrawRequest]:
        query = db.query(WithdrawRequest).filter(WithdrawRequest.id == request_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    @staticmethod
    def list_requests(
        db: Session, optometrist_id: Optional[str] = None, status: Optional[str] = None
    ) -> list[WithdrawRequest]:
        query = db.query(WithdrawRequest).options(
            joinedload(WithdrawRequest.optometrist), joinedload(WithdrawRequest.reviewed_by_admin)
        )
        if optometrist_id:
            query = query.filter(WithdrawRequest.optometrist_id == optometrist_id)
        if status:
            query = query.filter(WithdrawRequest.status == status)
        return query.order_by(WithdrawRequest.requested_at.desc()).all()
