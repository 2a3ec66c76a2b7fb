"""
Unified Notification Service
Fires in-app notifications as a side effect of workflow events (appointments, payments,
withdrawals). A failed notification is logged and never fails the triggering operation.
"""

import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from ..domain.notifications.service import NotificationService
from ..domain.users.repository import UserRepository
from ..models import ROLE_ADMIN

logger = logging.getLogger(__name__)


def send_notification(
    db: Session,
    user_id: Optional[str],
    title: str,
    body: str,
    notification_type: str = "general",
    meta: Optional[dict[str, Any]] = None,
) -> bool:
    """
    Create one notification, swallowing failures.

    Call after the triggering operation has committed: a failure here rolls the
    session back.

    Returns:
        True when the notification was stored
    """
    if not user_id:
        return False

    try:
        NotificationService(db).create_notification(user_id, title, body, notification_type, meta)
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to send {notification_type} notification to {user_id}: {e}")
        return False


def notify_admins(
    db: Session,
    title: str,
    body: str,
    notification_type: str = "general",
    meta: Optional[dict[str, Any]] = None,
) -> int:
    """Notify every admin; returns how many notifications were stored"""
    admins = UserRepository.list_by_role(db, ROLE_ADMIN)
    sent = 0
    for admin in admins:
        if send_notification(db, admin.id, title, body, notification_type, meta):
            sent += 1
    logger.info(f"📣 {title}: notified {sent}/{len(admins)} admins")
    return sent
