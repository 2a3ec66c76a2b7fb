"""Notification service - in-app notifications for patients, optometrists and admins"""

import logging
from typing import Any, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import NOTIFICATION_TYPES, Notification, User
from ..users.repository import UserRepository
from .repository import NotificationRepository

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = NotificationRepository()
        self.users = UserRepository()

    def create_notification(
        self,
        user_id: str,
        title: str,
        body: str,
        type: str = "general",
        meta: Optional[dict[str, Any]] = None,
    ) -> Notification:
        if type not in NOTIFICATION_TYPES:
            raise HTTPException(status_code=400, detail=f"Invalid notification type: {type}")
        if not self.users.get_by_id(self.db, user_id):
            raise HTTPException(status_code=404, detail="User not found")

        notification = self.repo.create(
            self.db, user_id=user_id, title=title, body=body, type=type, meta=meta, is_read=False
        )
        logger.info(f"🔔 Notification '{title}' created for user {user_id}")
        return notification

    def list_notifications(self, user: User, limit: int = 20, offset: int = 0) -> dict:
        rows, total = self.repo.list_for_user(self.db, user.id, limit=limit, offset=offset)
        return {"data": rows, "total": total, "unread": self.repo.unread_count(self.db, user.id)}

    def unread_count(self, user: User) -> int:
        return self.repo.unread_count(self.db, user.id)

    def _get_own(self, notification_id: str, user: User) -> Notification:
        notification = self.repo.get_for_user(self.db, notification_id, user.id)
        if not notification:
            raise HTTPException(status_code=404, detail="Notification not found")
        return notification

    def mark_as_read(self, notification_id: str, user: User) -> Notification:
        notification = self._get_own(notification_id, user)
        notification.is_read = True
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def mark_all_as_read(self, user: User) -> int:
        return self.repo.mark_all_read(self.db, user.id)

    def delete_notification(self, notification_id: str, user: User) -> None:
        self.repo.delete(self.db, self._get_own(notification_id, user))
