"""Service pricing - admin-managed base prices for online consultations (cached)"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...cache import (
    build_pricing_list_key,
    build_pricing_lookup_key,
    cached,
    invalidate_service_pricing_cache,
)
from ...models import ServicePricing
from .repository import ServicePricingRepository
from .schemas import PricingCreate, PricingResponse, PricingUpdate

logger = logging.getLogger(__name__)

PRICING_CACHE_TTL = 600
HOMECARE_PRICING_ERROR = "Homecare is paid outside the platform; no pricing setup is needed"


def _serialize(pricing: ServicePricing) -> dict:
    return PricingResponse.model_validate(pricing).model_dump(mode="json")


class ServicePricingService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ServicePricingRepository()

    @cached(lambda self: build_pricing_list_key(), ttl=PRICING_CACHE_TTL)
    def list_pricing(self) -> list[dict]:
        return [_serialize(p) for p in self.repo.list_all(self.db)]

    @cached(
        lambda self, service_type, method=None: build_pricing_lookup_key(service_type, method),
        ttl=PRICING_CACHE_TTL,
    )
    def _lookup_payload(self, service_type: str, method: Optional[str] = None) -> Optional[dict]:
        pricing = self.repo.get_by_pair(self.db, service_type, method, active_only=True)
        return _serialize(pricing) if pricing else None

    def lookup(self, service_type: str, method: Optional[str] = None) -> dict:
        payload = self._lookup_payload(service_type, method)
        if payload is None:
            raise HTTPException(status_code=404, detail="Pricing not found")
        return payload

    def upsert(self, data: PricingCreate) -> tuple[ServicePricing, bool]:
        """Create or update the row for (type, method); returns (row, created)"""
        if data.type == "homecare":
            raise HTTPException(status_code=400, detail=HOMECARE_PRICING_ERROR)

        existing = self.repo.get_by_pair(self.db, data.type, data.method)
        if existing:
            existing.base_price = data.base_price
            if data.is_active is not None:
                existing.is_active = data.is_active
            pricing = self.repo.save(self.db, existing)
            created = False
        else:
            pricing = self.repo.save(
                self.db,
                ServicePricing(
                    type=data.type,
                    method=data.method,
                    base_price=data.base_price,
                    is_active=True if data.is_active is None else data.is_active,
                ),
            )
            created = True

        invalidate_service_pricing_cache()
        logger.info(f"Pricing {data.type}/{data.method} {'created' if created else 'updated'}")
        return pricing, created

    def _get(self, pricing_id: str) -> ServicePricing:
        pricing = self.repo.get_by_id(self.db, pricing_id)
        if not pricing:
            raise HTTPException(status_code=404, detail="Pricing not found")
        return pricing

    def update(self, pricing_id: str, data: PricingUpdate) -> ServicePricing:
        pricing = self._get(pricing_id)
        if pricing.type == "homecare":
            raise HTTPException(status_code=400, detail=HOMECARE_PRICING_ERROR)
        if data.base_price is not None:
            pricing.base_price = data.base_price
        if data.is_active is not None:
            pricing.is_active = data.is_active
        pricing = self.repo.save(self.db, pricing)
        invalidate_service_pricing_cache()
        return pricing

    def delete(self, pricing_id: str) -> None:
        self.repo.delete(self.db, self._get(pricing_id))
        invalidate_service_pricing_cache()
