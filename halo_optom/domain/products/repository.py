"""Product repository"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import Product


class ProductRepository:
    @staticmethod
    def list_products(
        db: Session,
        category: Optional[str] = None,
        search: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> list[Product]:
        query = db.query(Product)
        if category:
            query = query.filter(Product.category == category)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Product.name.ilike(pattern), Product.description.ilike(pattern)))
        if is_active is not None:
            query = query.filter(Product.is_active.is_(is_active))
        return query.order_by(Product.created_at.desc()).all()

    @staticmethod
    def recommended(db: Session, limit: int = 8) -> list[Product]:
        return (
            db.query(Product)
            .filter(Product.is_active.is_(True), Product.stock > 0)
            .order_by(Product.created_at.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def get_by_id(db: Session, product_id: str, for_update: bool = False) -> Optional[Product]:
        query = db.query(Product).filter(Product.id == product_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    @staticmethod
    def save(db: Session, product: Product) -> Product:
        db.add(product)
        db.commit()
        db.refresh(product)
        return product

    @staticmethod
    def delete(db: Session, product: Product) -> None:
        db.delete(product)
        db.commit()
