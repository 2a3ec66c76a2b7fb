"""Service pricing repository"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import ServicePricing


class ServicePricingRepository:
    @staticmethod
    def list_all(db: Session) -> list[ServicePricing]:
        return db.query(ServicePricing).order_by(ServicePricing.updated_at.desc()).all()

    @staticmethod
    def get_by_id(db: Session, pricing_id: str) -> Optional[ServicePricing]:
        return db.query(ServicePricing).filter(ServicePricing.id == pricing_id).first()

    @staticmethod
    def get_by_pair(
        db: Session, service_type: str, method: Optional[str], active_only: bool = False
    ) -> Optional[ServicePricing]:
        query = db.query(ServicePricing).filter(ServicePricing.type == service_type)
        if method is None:
            query = query.filter(ServicePricing.method.is_(None))
        else:
            query = query.filter(ServicePricing.method == method)
        if active_only:
            query = query.filter(ServicePricing.is_active.is_(True))
        return query.first()

    @staticmethod
    def save(db: Session, pricing: ServicePricing) -> ServicePricing:
        db.add(pricing)
        db.commit()
        db.refresh(pricing)
        return pricing

    @staticmethod
    def delete(db: Session, pricing: ServicePricing) -> None:
        db.delete(pricing)
        db.commit()
