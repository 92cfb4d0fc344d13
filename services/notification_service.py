"""
Notification Service - in-app notifications.

Other services call the notify_* helpers when something happens to a
user (new follower, new message, new recipe from someone they follow).
The notifications screen reads them back newest first.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from models.entities import Notification, Profile, NOTIFICATION_TYPES
from models.repositories import NotificationRepository
from services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50


@dataclass
class NotificationItem:
    """Notification ready for display."""
    id: int
    type: str
    title: str
    message: str
    is_read: bool
    created_at: datetime
    data: Optional[dict[str, Any]] = None
    actor_id: Optional[str] = None
    actor_name: Optional[str] = None
    actor_avatar_url: Optional[str] = None


def _to_item(notification: Notification) -> NotificationItem:
    actor = notification.actor
    return NotificationItem(
        id=notification.NotificationId,
        type=notification.Type,
        title=notification.Title,
        message=notification.Message,
        is_read=notification.IsRead,
        created_at=notification.CreatedAt,
        data=notification.Data,
        actor_id=notification.ActorId,
        actor_name=actor.display_name if actor else None,
        actor_avatar_url=actor.AvatarUrl if actor else None,
    )


class NotificationService:
    """Service for creating and reading in-app notifications."""

    def __init__(self, db: Session):
        self.repo = NotificationRepository(db)

    def create(
        self,
        user_id: str,
        type: str,
        title: str,
        message: str,
        actor_id: Optional[str] = None,
        data: Optional[dict[str, Any]] = None,
    ) -> NotificationItem:
        if type not in NOTIFICATION_TYPES:
            raise ValidationError(f"Unknown notification type: {type}")
        notification = self.repo.create(user_id, type, title, message, actor_id=actor_id, data=data)
        logger.info(f"Notification {notification.NotificationId} ({type}) for {user_id}")
        return _to_item(notification)

    def fetch(self, user_id: str, limit: int = DEFAULT_LIMIT) -> list[NotificationItem]:
        return [_to_item(n) for n in self.repo.list_for_user(user_id, limit=limit)]

    def unread_count(self, user_id: str) -> int:
        return self.repo.unread_count(user_id)

    def mark_as_read(self, notification_id: int, user_id: str) -> NotificationItem:
        """
        Mark one of the user's notifications as read.

        Raises:
            NotFoundError if it doesn't exist or belongs to someone else
        """
        notification = self.repo.get_by_id(notification_id)
        if not notification or notification.UserId != user_id:
            raise NotFoundError("Notification not found")
        return _to_item(self.repo.mark_read(notification))

    def mark_all_as_read(self, user_id: str) -> int:
        return self.repo.mark_all_read(user_id)

    # ==========================================
    # Event helpers
    # ==========================================

    def notify_follow(self, follower: Profile, followed_id: str) -> NotificationItem:
        return self.create(
            followed_id,
            "follow",
            "New follower",
            f"{follower.display_name} started following you",
            actor_id=follower.ProfileId,
            data={"follower_id": follower.ProfileId},
        )

    def notify_message(self, sender: Profile, recipient_id: str, conversation_id: int, preview: str) -> NotificationItem:
        snippet = preview if len(preview) <= 80 else preview[:80] + "..."
        return self.create(
            recipient_id,
            "message",
            f"New message from {sender.display_name}",
            snippet,
            actor_id=sender.ProfileId,
            data={"conversation_id": conversation_id},
        )

    def notify_recipe_created(self, author: Profile, follower_id: str, recipe_id: int, title: str) -> NotificationItem:
        return self.create(
            follower_id,
            "recipe_created",
            "New recipe",
            f"{author.display_name} shared a new recipe: {title}",
            actor_id=author.ProfileId,
            data={"recipe_id": recipe_id},
        )
