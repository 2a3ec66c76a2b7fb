"""Order service - product checkout"""

import logging
from decimal import Decimal

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import ROLE_ADMIN, Order, OrderItem, User
from ...shared.formatting import to_decimal
from ...utils.sanitization import sanitize_dict
from ..products.repository import ProductRepository
from .repository import OrderRepository
from .schemas import OrderCreate

logger = logging.getLogger(__name__)

# Stock goes back on the shelf when an order in one of these states is cancelled
RESTOCK_FROM = ("pending", "paid")


def effective_price(product) -> Decimal:
    """The discount price when one is set, otherwise the list price"""
    if product.discount_price is not None and to_decimal(product.discount_price) > 0:
        return to_decimal(product.discount_price)
    return to_decimal(product.price)


class OrderService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepository()
        self.products = ProductRepository()

    def create_order(self, user: User, data: OrderCreate) -> Order:
        if not data.items:
            raise HTTPException(status_code=400, detail="Order items cannot be empty")

        total = Decimal("0.00")
        items = []
        for item in data.items:
            product = self.products.get_by_id(self.db, item.product_id, for_update=True)
            if not product:
                raise HTTPException(status_code=404, detail=f"Product {item.product_id} not found")
            if not product.is_active:
                raise HTTPException(status_code=400, detail=f"Product {product.name} is not available")
            if product.stock < item.quantity:
                raise HTTPException(status_code=400, detail=f"Insufficient stock for {product.name}")

            unit_price = effective_price(product)
            total += unit_price * item.quantity
            product.stock -= item.quantity
            items.append(OrderItem(product_id=product.id, quantity=item.quantity, price=unit_price))

        shipping = data.shipping_address.model_dump() if data.shipping_address else None
        order = Order(
            patient_id=user.id,
            total=total,
            status="pending",
            payment_data=data.payment_data,
            shipping_address=sanitize_dict(shipping),
        )
        order.items = items
        self.repo.add(self.db, order)
        self.db.commit()
        logger.info(f"🛒 Order {order.id} created by {user.id} ({len(items)} items, total {total})")
        return self.repo.get_by_id(self.db, order.id)

    def list_orders(self, user: User) -> list[Order]:
        if user.role == ROLE_ADMIN:
            return self.repo.list_orders(self.db)
        return self.repo.list_orders(self.db, patient_id=user.id)

    def get_order(self, order_id: str) -> Order:
        order = self.repo.get_by_id(self.db, order_id)
        if not order:
            raise HTTPException(status_code=404, detail="Order not found")
        return order

    def get_for_user(self, order_id: str, user: User) -> Order:
        order = self.get_order(order_id)
        if user.role != ROLE_ADMIN and order.patient_id != user.id:
            raise HTTPException(status_code=403, detail="You are not allowed to access this order")
        return order

    def set_status(self, order: Order, status: str, commit: bool = True) -> Order:
        """Move an order to a new status; cancelling an unshipped order restocks its items"""
        if status == "cancelled" and order.status in RESTOCK_FROM:
            for item in order.items:
                if item.product is not None:
                    item.product.stock += item.quantity
        order.status = status
        if commit:
            self.db.commit()
            self.db.refresh(order)
        return order

    def update_status(self, order_id: str, status: str) -> Order:
        order = self.get_order(order_id)
        logger.info(f"Order {order.id} status {order.status} -> {status}")
        return self.set_status(order, status)
