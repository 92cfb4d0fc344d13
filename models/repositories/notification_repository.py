"""
Notification Repository - Data access for in-app notifications.
"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from models.entities import Notification


class NotificationRepository:
    """Repository for notification database operations."""

    def __init__(self, db: Session):
        """Initialize with a database session."""
        self.db = db

    def create(
        self,
        user_id: str,
        type: str,
        title: str,
        message: str,
        actor_id: Optional[str] = None,
        data: Optional[dict] = None,
    ) -> Notification:
        notification = Notification(
            UserId=user_id,
            ActorId=actor_id,
            Type=type,
            Title=title,
            Message=message,
            Data=data,
        )
        self.db.add(notification)
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def get_by_id(self, notification_id: int) -> Optional[Notification]:
        return self.db.get(Notification, notification_id)

    def list_for_user(self, user_id: str, limit: int = 50) -> list[Notification]:
        """Newest first, with the actor profile loaded."""
        return self.db.query(Notification).options(
            joinedload(Notification.actor)
        ).filter(
            Notification.UserId == user_id
        ).order_by(
            Notification.CreatedAt.desc(), Notification.NotificationId.desc()
        ).limit(limit).all()

    def unread_count(self, user_id: str) -> int:
        return self.db.query(func.count(Notification.NotificationId)).filter(
            Notification.UserId == user_id,
            Notification.IsRead.is_(False),
        ).scalar() or 0

    def mark_read(self, notification: Notification) -> Notification:
        notification.IsRead = True
        self.db.commit()
        self.db.refresh(notification)
        return notification

    def mark_all_read(self, user_id: str) -> int:
        updated = self.db.query(Notification).filter(
            Notification.UserId == user_id,
            Notification.IsRead.is_(False),
        ).update({Notification.IsRead: True}, synchronize_session=False)
        self.db.commit()
        return updated
