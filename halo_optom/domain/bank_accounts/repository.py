"""Bank account repository"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import BankAccount


class BankAccountRepository:
    @staticmethod
    def list_accounts(db: Session, is_active: Optional[bool] = None) -> list[BankAccount]:
        query = db.query(BankAccount)
        if is_active is not None:
            query = query.filter(BankAccount.is_active == is_active)
        return query.order_by(BankAccount.created_at.desc()).all()

    @staticmethod
    def get_by_id(db: Session, account_id: str) -> Optional[BankAccount]:
        return db.query(BankAccount).filter(BankAccount.id == account_id).first()

    @staticmethod
    def save(db: Session, account: BankAccount) -> BankAccount:
        db.add(account)
        db.commit()
        db.refresh(account)
        return account

    @staticmethod
    def delete(db: Session, account: BankAccount) -> None:
        db.delete(account)
        db.commit()
