"""Wallet repository - Database operations for optometrist wallets"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import ROLE_OPTOMETRIST, Wallet


class WalletRepository:
    @staticmethod
    def get_by_user_id(db: Session, user_id: str, for_update: bool = False) -> Optional[Wallet]:
        """Fetch a wallet; `for_update` locks the row until the transaction ends"""
        query = db.query(Wallet).filter(Wallet.user_id == user_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    @staticmethod
    def create(db: Session, user_id: str, role: str = ROLE_OPTOMETRIST) -> Wallet:
        wallet = Wallet(user_id=user_id, role=role, balance=0, hold_balance=0)
        db.add(wallet)
        db.flush()
        return wallet
