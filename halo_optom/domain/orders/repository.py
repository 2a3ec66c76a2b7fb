"""Order repository"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload, selectinload

from ...models import Order, OrderItem


class OrderRepository:
    @staticmethod
    def _query(db: Session):
        return db.query(Order).options(
            joinedload(Order.patient), selectinload(Order.items).joinedload(OrderItem.product)
        )

    @staticmethod
    def get_by_id(db: Session, order_id: str) -> Optional[Order]:
        return OrderRepository._query(db).filter(Order.id == order_id).first()

    @staticmethod
    def list_orders(db: Session, patient_id: Optional[str] = None) -> list[Order]:
        query = OrderRepository._query(db)
        if patient_id:
            query = query.filter(Order.patient_id == patient_id)
        return query.order_by(Order.created_at.desc()).all()

    @staticmethod
    def add(db: Session, order: Order) -> Order:
        db.add(order)
        db.flush()
        return order
