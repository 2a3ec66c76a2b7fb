"""Admin service - user management and dashboard counters"""

import logging

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Order, Product, Schedule, User
from ..users.repository import UserRepository

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository()

    def list_users(self) -> list[User]:
        return self.users.list_users(self.db)

    def delete_user(self, user_id: str, admin: User) -> str:
        if user_id == admin.id:
            raise HTTPException(status_code=400, detail="You cannot delete your own account")
        user = self.users.get_by_id(self.db, user_id)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        self.users.delete_user(self.db, user)
        logger.info(f"🗑️ User {user_id} deleted by admin {admin.id}")
        return user_id

    def dashboard_stats(self) -> dict:
        def count(model):
            return self.db.query(func.count(model.id)).scalar() or 0

        return {
            "total_users": count(User),
            "total_orders": count(Order),
            "total_products": count(Product),
            "total_schedules": count(Schedule),
        }
