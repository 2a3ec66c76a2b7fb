"""Order router"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user, require_admin
from ...database import get_db
from ...models import User
from ..payments.schemas import PaymentResponse
from ..payments.service import PaymentService
from .schemas import OrderCreate, OrderResponse, OrderStatusUpdate
from .service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])


def get_order_service(db: Session = Depends(get_db)) -> OrderService:
    return OrderService(db)


@router.post("", status_code=201)
async def create_order(
    data: OrderCreate,
    current_user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    order = service.create_order(current_user, data)
    return {"message": "Order created", "order": OrderResponse.model_validate(order)}


@router.get("", response_model=list[OrderResponse])
async def list_orders(
    current_user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    return service.list_orders(current_user)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: str,
    current_user: User = Depends(get_current_user),
    service: OrderService = Depends(get_order_service),
):
    return service.get_for_user(order_id, current_user)


@router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str,
    data: OrderStatusUpdate,
    _: User = Depends(require_admin),
    service: OrderService = Depends(get_order_service),
):
    return service.update_status(order_id, data.status)


@router.post("/{order_id}/payment")
async def create_order_payment(
    order_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a Xendit invoice for a pending order"""
    result = await PaymentService(db).create_invoice_payment("order", order_id, current_user)
    result["payment"] = PaymentResponse.model_validate(result["payment"])
    return result


__all__ = ["router"]
