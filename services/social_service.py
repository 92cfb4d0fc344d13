"""
Social Service - follow graph operations.

Rules:
- Users can't follow themselves
- Following twice is a no-op
- Each new follow notifies the followed user
"""

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.entities import Follower
from models.repositories import FollowerRepository, ProfileRepository
from services.errors import NotFoundError, ValidationError
from services.notification_service import NotificationService
from services.profile_service import ProfileSummary

logger = logging.getLogger(__name__)


class SocialService:
    """Service for following and unfollowing users."""

    def __init__(self, db: Session, notifications: Optional[NotificationService] = None):
        self.db = db
        self.followers = FollowerRepository(db)
        self.profiles = ProfileRepository(db)
        self.notifications = notifications or NotificationService(db)

    def follow(self, follower_id: str, following_id: str) -> Follower:
        """
        Follow a user.

        Raises:
            ValidationError when following yourself
            NotFoundError when either user doesn't exist
        """
        if follower_id == following_id:
            raise ValidationError("You can't follow yourself.")

        existing = self.followers.get(follower_id, following_id)
        if existing:
            return existing

        follower = self.profiles.get_by_id(follower_id)
        if not follower or not self.profiles.get_by_id(following_id):
            raise NotFoundError("User not found")

        try:
            edge = self.followers.create(follower_id, following_id)
        except IntegrityError:
            # Lost a race with an identical follow
            self.db.rollback()
            return self.followers.get(follower_id, following_id)

        logger.info(f"{follower_id} followed {following_id}")
        self.notifications.notify_follow(follower, following_id)
        return edge

    def unfollow(self, follower_id: str, following_id: str) -> bool:
        removed = self.followers.delete(follower_id, following_id)
        if removed:
            logger.info(f"{follower_id} unfollowed {following_id}")
        return removed

    def toggle_follow(self, follower_id: str, following_id: str) -> bool:
        """Follow or unfollow. Returns the new following state."""
        if self.is_following(follower_id, following_id):
            self.unfollow(follower_id, following_id)
            return False
        self.follow(follower_id, following_id)
        return True

    def is_following(self, follower_id: str, following_id: str) -> bool:
        return self.followers.get(follower_id, following_id) is not None

    def list_followers(self, user_id: str, viewer_id: Optional[str] = None) -> list[ProfileSummary]:
        return self._with_follow_flags(self.followers.list_followers(user_id), viewer_id)

    def list_following(self, user_id: str, viewer_id: Optional[str] = None) -> list[ProfileSummary]:
        return self._with_follow_flags(self.followers.list_following(user_id), viewer_id)

    def follower_count(self, user_id: str) -> int:
        return self.profiles.count_followers(user_id)

    def following_count(self, user_id: str) -> int:
        return self.profiles.count_following(user_id)

    def _with_follow_flags(self, profiles, viewer_id: Optional[str]) -> list[ProfileSummary]:
        followed = set()
        if viewer_id:
            followed = self.followers.following_ids(viewer_id, [p.ProfileId for p in profiles])
        return [
            ProfileSummary.from_entity(p, is_following=(p.ProfileId in followed) if viewer_id else None)
            for p in profiles
        ]
