"""Product router"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from ...models import User
from .schemas import ProductCreate, ProductResponse, ProductUpdate
from .service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])


def get_product_service(db: Session = Depends(get_db)) -> ProductService:
    return ProductService(db)


@router.get("", response_model=list[ProductResponse])
async def list_products(
    category: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    service: ProductService = Depends(get_product_service),
):
    return service.list_products(category=category, search=search, is_active=is_active)


@router.get("/recommended", response_model=list[ProductResponse])
async def recommended_products(service: ProductService = Depends(get_product_service)):
    return service.recommended()


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: str, service: ProductService = Depends(get_product_service)):
    return service.get_product(product_id)


@router.post("", response_model=ProductResponse, status_code=201)
async def create_product(
    data: ProductCreate,
    _: User = Depends(require_admin),
    service: ProductService = Depends(get_product_service),
):
    return service.create_product(data)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    data: ProductUpdate,
    _: User = Depends(require_admin),
    service: ProductService = Depends(get_product_service),
):
    return service.update_product(product_id, data)


@router.delete("/{product_id}")
async def delete_product(
    product_id: str,
    _: User = Depends(require_admin),
    service: ProductService = Depends(get_product_service),
):
    service.delete_product(product_id)
    return {"message": "Product deleted"}


__all__ = ["router"]
