"""Service pricing router"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from ...models import User
from .schemas import PricingCreate, PricingResponse, PricingUpdate
from .service import ServicePricingService

router = APIRouter(prefix="/services/pricing", tags=["Service Pricing"])


def get_pricing_service(db: Session = Depends(get_db)) -> ServicePricingService:
    return ServicePricingService(db)


@router.get("")
async def list_pricing(service: ServicePricingService = Depends(get_pricing_service)):
    return {"data": service.list_pricing()}


@router.get("/lookup")
async def lookup_pricing(
    type: str = Query(...),
    method: Optional[str] = Query(None),
    service: ServicePricingService = Depends(get_pricing_service),
):
    return {"data": service.lookup(type, method)}


@router.post("")
async def create_pricing(
    data: PricingCreate,
    _: User = Depends(require_admin),
    service: ServicePricingService = Depends(get_pricing_service),
):
    pricing, created = service.upsert(data)
    body = PricingResponse.model_validate(pricing).model_dump(mode="json")
    return JSONResponse(
        status_code=201 if created else 200,
        content={"message": "Pricing created" if created else "Pricing updated", "data": body},
    )


@router.put("/{pricing_id}")
async def update_pricing(
    pricing_id: str,
    data: PricingUpdate,
    _: User = Depends(require_admin),
    service: ServicePricingService = Depends(get_pricing_service),
):
    pricing = service.update(pricing_id, data)
    return {"message": "Pricing updated", "data": PricingResponse.model_validate(pricing)}


@router.delete("/{pricing_id}")
async def delete_pricing(
    pricing_id: str,
    _: User = Depends(require_admin),
    service: ServicePricingService = Depends(get_pricing_service),
):
    service.delete(pricing_id)
    return {"message": "Pricing deleted"}


__all__ = ["router"]
