"""
Wallet service - optometrist commission balances

balance is the withdrawable amount, hold_balance is reserved by pending or approved
withdrawals. Every mutation locks the wallet row for the rest of the transaction.
Methods take `commit=False` when they run inside a larger unit of work (payment
transitions, withdrawal reviews).
"""

import logging
from decimal import Decimal

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Wallet
from ...shared.formatting import Number, format_idr, to_decimal
from ..users.repository import UserRepository
from .repository import WalletRepository

logger = logging.getLogger(__name__)


def _positive(amount: Number) -> Decimal:
    value = to_decimal(amount)
    if value <= 0:
        raise HTTPException(status_code=400, detail="Amount must be greater than zero")
    return value


class WalletService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = WalletRepository()
        self.users = UserRepository()

    def _finish(self, wallet: Wallet, commit: bool) -> Wallet:
        if commit:
            self.db.commit()
            self.db.refresh(wallet)
        else:
            self.db.flush()
        return wallet

    def get_or_create_wallet(self, user_id: str, for_update: bool = False) -> Wallet:
        wallet = self.repo.get_by_user_id(self.db, user_id, for_update=for_update)
        if wallet:
            return wallet

        user = self.users.get_by_id(self.db, user_id)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")

        wallet = self.repo.create(self.db, user_id)
        logger.info(f"💼 Wallet created for optometrist {user_id}")
        return wallet

    def add_commission(self, user_id: str, amount: Number, commit: bool = True) -> Wallet:
        """Credit a paid appointment's commission"""
        value = _positive(amount)
        wallet = self.get_or_create_wallet(user_id, for_update=True)
        wallet.balance = to_decimal(wallet.balance) + value
        logger.info(f"💰 Credited {format_idr(value)} commission to wallet of {user_id}")
        return self._finish(wallet, commit)

    def adjust_balance(self, user_id: str, delta: Number, commit: bool = True) -> Wallet:
        """Apply a signed correction (commission recalculation)"""
        value = to_decimal(delta)
        wallet = self.get_or_create_wallet(user_id, for_update=True)
        if value == 0:
            return wallet
        wallet.balance = to_decimal(wallet.balance) + value
        logger.info(f"Adjusted wallet of {user_id} by {format_idr(value)}")
        return self._finish(wallet, commit)

    def hold_balance(self, user_id: str, amount: Number, commit: bool = True) -> Wallet:
        """Move an amount from balance to hold_balance for a withdrawal"""
        value = _positive(amount)
        wallet = self.get_or_create_wallet(user_id, for_update=True)
        if to_decimal(wallet.balance) < value:
            raise HTTPException(status_code=400, detail="Insufficient balance")
        wallet.balance = to_decimal(wallet.balance) - value
        wallet.hold_balance = to_decimal(wallet.hold_balance) + value
        return self._finish(wallet, commit)

    def release_hold(self, user_id: str, amount: Number, commit: bool = True) -> Wallet:
        """Return a held amount to balance (withdrawal rejected)"""
        value = _positive(amount)
        wallet = self.get_or_create_wallet(user_id, for_update=True)
        if to_decimal(wallet.hold_balance) < value:
            raise HTTPException(status_code=400, detail="Insufficient held balance")
        wallet.balance = to_decimal(wallet.balance) + value
        wallet.hold_balance = to_decimal(wallet.hold_balance) - value
        return self._finish(wallet, commit)

    def deduct_hold(self, user_id: str, amount: Number, commit: bool = True) -> Wallet:
        """Drop a held amount for good (withdrawal paid out)"""
        value = _positive(amount)
        wallet = self.get_or_create_wallet(user_id, for_update=True)
        if to_decimal(wallet.hold_balance) < value:
            raise HTTPException(status_code=400, detail="Insufficient held balance")
        wallet.hold_balance = to_decimal(wallet.hold_balance) - value
        return self._finish(wallet, commit)

    def get_balance(self, user_id: str) -> dict:
        wallet = self.get_or_create_wallet(user_id)
        self.db.commit()
        balance = to_decimal(wallet.balance)
        hold = to_decimal(wallet.hold_balance)
        return {
            "balance": float(balance),
            "hold_balance": float(hold),
            "available_balance": float(balance),
            "total_earned": float(balance + hold),
            "formatted": {
                "balance": format_idr(balance),
                "hold_balance": format_idr(hold),
                "available_balance": format_idr(balance),
            },
        }
