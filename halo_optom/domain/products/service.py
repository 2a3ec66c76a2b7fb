"""Product service - eyewear catalogue"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Product
from .repository import ProductRepository
from .schemas import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)

RECOMMENDED_LIMIT = 8


class ProductService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = ProductRepository()

    def list_products(self, category=None, search=None, is_active: Optional[bool] = None) -> list[Product]:
        return self.repo.list_products(self.db, category=category, search=search, is_active=is_active)

    def recommended(self) -> list[Product]:
        return self.repo.recommended(self.db, RECOMMENDED_LIMIT)

    def get_product(self, product_id: str) -> Product:
        product = self.repo.get_by_id(self.db, product_id)
        if not product:
            raise HTTPException(status_code=404, detail="Product not found")
        return product

    @staticmethod
    def _check_discount(price, discount_price):
        if discount_price is not None and price is not None and discount_price > price:
            raise HTTPException(status_code=400, detail="discount_price cannot exceed price")

    def create_product(self, data: ProductCreate) -> Product:
        self._check_discount(data.price, data.discount_price)
        product = self.repo.save(self.db, Product(**data.model_dump()))
        logger.info(f"🛍️ Product {product.id} created")
        return product

    def update_product(self, product_id: str, data: ProductUpdate) -> Product:
        product = self.get_product(product_id)
        updates = data.model_dump(exclude_unset=True)
        self._check_discount(
            updates.get("price", product.price), updates.get("discount_price", product.discount_price)
        )
        for key, value in updates.items():
            setattr(product, key, value)
        return self.repo.save(self.db, product)

    def delete_product(self, product_id: str) -> None:
        self.repo.delete(self.db, self.get_product(product_id))
