"""Bank account service - platform receiving accounts for manual transfers"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import BankAccount
from .repository import BankAccountRepository
from .schemas import BankAccountCreate, BankAccountUpdate

logger = logging.getLogger(__name__)


class BankAccountService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = BankAccountRepository()

    def list_accounts(self, is_active: Optional[bool] = None) -> list[BankAccount]:
        return self.repo.list_accounts(self.db, is_active=is_active)

    def get_account(self, account_id: str) -> BankAccount:
        account = self.repo.get_by_id(self.db, account_id)
        if not account:
            raise HTTPException(status_code=404, detail="Bank account not found")
        return account

    def create_account(self, data: BankAccountCreate) -> BankAccount:
        account = self.repo.save(self.db, BankAccount(**data.model_dump()))
        logger.info(f"🏦 Bank account {account.id} ({account.bank_name}) added")
        return account

    def update_account(self, account_id: str, data: BankAccountUpdate) -> BankAccount:
        account = self.get_account(account_id)
        for key, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(account, key, value)
        return self.repo.save(self.db, account)

    def toggle(self, account_id: str) -> BankAccount:
        account = self.get_account(account_id)
        account.is_active = not account.is_active
        return self.repo.save(self.db, account)

    def delete_account(self, account_id: str) -> None:
        self.repo.delete(self.db, self.get_account(account_id))
