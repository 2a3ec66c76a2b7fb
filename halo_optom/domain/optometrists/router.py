"""Optometrist router - public directory plus the practitioner's own balance"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_optometrist
from ...database import get_db
from ...models import User
from ..wallets.service import WalletService
from .schemas import AvailableSlot, OptometristDetail, OptometristListItem
from .service import OptometristService

router = APIRouter(prefix="/optometrists", tags=["Optometrists"])


def get_optometrist_service(db: Session = Depends(get_db)) -> OptometristService:
    return OptometristService(db)


@router.get("")
async def list_optometrists(service: OptometristService = Depends(get_optometrist_service)):
    return {"data": [OptometristListItem(**o) for o in service.list_optometrists()]}


@router.get("/featured")
async def featured_optometrists(service: OptometristService = Depends(get_optometrist_service)):
    return {"data": [OptometristListItem(**o) for o in service.featured()]}


@router.get("/balance")
async def my_balance(current_user: User = Depends(require_optometrist), db: Session = Depends(get_db)):
    return {"data": WalletService(db).get_balance(current_user.id)}


@router.get("/{optometrist_id}")
async def get_optometrist(optometrist_id: str, service: OptometristService = Depends(get_optometrist_service)):
    return {"data": OptometristDetail(**service.get_detail(optometrist_id))}


@router.get("/{optometrist_id}/schedules")
async def available_schedules(
    optometrist_id: str,
    on_date: Optional[date] = Query(None, alias="date"),
    service: OptometristService = Depends(get_optometrist_service),
):
    return {"data": [AvailableSlot(**s) for s in service.available_slots(optometrist_id, on_date)]}


__all__ = ["router"]
