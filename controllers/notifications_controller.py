"""
Notifications Controller - the in-app notification list.
"""

from typing import Optional

from config.auth import get_current_user
from config.database import SessionLocal
from services.errors import AppError, log_error
from services.notification_service import NotificationItem, NotificationService


class NotificationsController:
    """Controller for the notifications screen and badge."""

    def __init__(self):
        self.user = get_current_user()

    def get_notifications(self) -> list[NotificationItem]:
        if not self.user:
            return []
        db = SessionLocal()
        try:
            return NotificationService(db).fetch(self.user.user_id)
        finally:
            db.close()

    def get_unread_count(self) -> int:
        if not self.user:
            return 0
        db = SessionLocal()
        try:
            return NotificationService(db).unread_count(self.user.user_id)
        finally:
            db.close()

    def mark_as_read(self, notification_id: int) -> tuple[bool, Optional[str]]:
        db = SessionLocal()
        try:
            NotificationService(db).mark_as_read(notification_id, self.user.user_id)
            return True, None
        except AppError as e:
            return False, log_error(e, "Mark notification read").user_message
        finally:
            db.close()

    def mark_all_as_read(self) -> int:
        db = SessionLocal()
        try:
            return NotificationService(db).mark_all_as_read(self.user.user_id)
        finally:
            db.close()
