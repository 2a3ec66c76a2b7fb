"""Bank account router"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_admin
from ...database import get_db
from ...models import User
from .schemas import BankAccountCreate, BankAccountResponse, BankAccountUpdate
from .service import BankAccountService

router = APIRouter(prefix="/bank-accounts", tags=["Bank Accounts"])


def get_bank_account_service(db: Session = Depends(get_db)) -> BankAccountService:
    return BankAccountService(db)


@router.get("/active", response_model=list[BankAccountResponse])
async def active_bank_accounts(
    _: User = Depends(get_current_user),
    service: BankAccountService = Depends(get_bank_account_service),
):
    return service.list_accounts(is_active=True)


@router.get("", response_model=list[BankAccountResponse])
async def list_bank_accounts(
    is_active: Optional[bool] = Query(None),
    _: User = Depends(require_admin),
    service: BankAccountService = Depends(get_bank_account_service),
):
    return service.list_accounts(is_active=is_active)


@router.get("/{account_id}", response_model=BankAccountResponse)
async def get_bank_account(
    account_id: str,
    _: User = Depends(require_admin),
    service: BankAccountService = Depends(get_bank_account_service),
):
    return service.get_account(account_id)


@router.post("", response_model=BankAccountResponse, status_code=201)
async def create_bank_account(
    data: BankAccountCreate,
    _: User = Depends(require_admin),
    service: BankAccountService = Depends(get_bank_account_service),
):
    return service.create_account(data)


@router.put("/{account_id}", response_model=BankAccountResponse)
async def update_bank_account(
    account_id: str,
    data: BankAccountUpdate,
    _: User = Depends(require_admin),
    service: BankAccountService = Depends(get_bank_account_service),
):
    return service.update_account(account_id, data)


@router.patch("/{account_id}/toggle", response_model=BankAccountResponse)
async def toggle_bank_account(
    account_id: str,
    _: User = Depends(require_admin),
    service: BankAccountService = Depends(get_bank_account_service),
):
    return service.toggle(account_id)


@router.delete("/{account_id}")
async def delete_bank_account(
    account_id: str,
    _: User = Depends(require_admin),
    service: BankAccountService = Depends(get_bank_account_service),
):
    service.delete_account(account_id)
    return {"message": "Bank account deleted"}


__all__ = ["router"]
