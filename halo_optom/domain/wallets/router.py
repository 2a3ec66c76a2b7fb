"""Wallet router - the optometrist's own balance"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import require_optometrist
from ...database import get_db
from ...models import User
from .service import WalletService

router = APIRouter(prefix="/wallet", tags=["Wallet"])


def get_wallet_service(db: Session = Depends(get_db)) -> WalletService:
    return WalletService(db)


@router.get("/balance")
async def get_balance(
    current_user: User = Depends(require_optometrist),
    service: WalletService = Depends(get_wallet_service),
):
    """Withdrawable balance, held balance and their IDR formatting"""
    return {"data": service.get_balance(current_user.id)}


__all__ = ["router"]
