"""
Profile Service - profile editing, avatars, stats and user search.

Avatars are stored on disk under settings.avatar_storage_dir in a folder
per user: <avatar_dir>/<user_id>/avatar-<timestamp>.<ext>. The profile's
AvatarUrl holds the path relative to the storage root.
"""

import logging
import os
import re
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from sqlalchemy.orm import Session

from config.settings import get_settings
from models.entities import Profile
from models.repositories import ProfileRepository
from services.errors import NotFoundError, StorageError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_AVATAR_EXTENSIONS = {"jpg", "jpeg", "png", "webp"}
USERNAME_PATTERN = re.compile(r"^[a-z0-9_.]{3,30}$")


@dataclass
class ProfileSummary:
    """Public view of a profile."""
    id: str
    email: str
    username: Optional[str]
    full_name: Optional[str]
    avatar_url: Optional[str]
    bio: Optional[str]
    created_at: Optional[datetime] = None
    is_following: Optional[bool] = None

    @property
    def display_name(self) -> str:
        return self.full_name or self.username or self.email

    @classmethod
    def from_entity(cls, profile: Profile, is_following: Optional[bool] = None) -> "ProfileSummary":
        return cls(
            id=profile.ProfileId,
            email=profile.Email,
            username=profile.Username,
            full_name=profile.FullName,
            avatar_url=profile.AvatarUrl,
            bio=profile.Bio,
            created_at=profile.CreatedAt,
            is_following=is_following,
        )


@dataclass
class UserStats:
    recipes_count: int
    followers_count: int
    following_count: int


class ProfileService:
    """Service for profile management."""

    def __init__(self, db: Session, storage_dir: Optional[str] = None):
        settings = get_settings()
        self.repo = ProfileRepository(db)
        self.storage_dir = Path(storage_dir or settings.avatar_storage_dir)
        self.max_avatar_bytes = settings.max_avatar_bytes

    def get_profile(self, user_id: str) -> ProfileSummary:
        return ProfileSummary.from_entity(self._require(user_id))

    def update_profile(
        self,
        user_id: str,
        username: Optional[str] = None,
        full_name: Optional[str] = None,
        bio: Optional[str] = None,
    ) -> ProfileSummary:
        """
        Update editable profile fields. None leaves a field unchanged;
        an empty string clears full name or bio.

        Raises:
            ValidationError for a malformed or taken username
        """
        profile = self._require(user_id)
        changes = {}

        if username is not None:
            username = username.strip().lower()
            if not USERNAME_PATTERN.match(username):
                raise ValidationError(
                    "Username must be 3-30 characters: lowercase letters, numbers, dots or underscores."
                )
            existing = self.repo.get_by_username(username)
            if existing and existing.ProfileId != user_id:
                raise ValidationError("This username is already taken.")
            changes["Username"] = username
        if full_name is not None:
            changes["FullName"] = full_name.strip() or None
        if bio is not None:
            changes["Bio"] = bio.strip() or None

        profile = self.repo.update(profile, **changes)
        logger.info(f"Updated profile {user_id}: {', '.join(changes) or 'no changes'}")
        return ProfileSummary.from_entity(profile)

    def get_user_stats(self, user_id: str) -> UserStats:
        return UserStats(
            recipes_count=self.repo.count_recipes(user_id),
            followers_count=self.repo.count_followers(user_id),
            following_count=self.repo.count_following(user_id),
        )

    def search_users(self, query: str, current_user_id: Optional[str] = None, limit: int = 20) -> list[ProfileSummary]:
        if not query or not query.strip():
            return []
        return [
            ProfileSummary.from_entity(p)
            for p in self.repo.search(query, exclude_id=current_user_id, limit=limit)
        ]

    # ==========================================
    # Avatars
    # ==========================================

    def upload_avatar(self, user_id: str, filename: str, data: bytes) -> ProfileSummary:
        """
        Store a new avatar and replace the old one.

        Raises:
            ValidationError for disallowed types or oversized files
            StorageError if the file can't be written
        """
        profile = self._require(user_id)
        ext = Path(filename or "").suffix.lower().lstrip(".") or "jpg"
        if ext not in ALLOWED_AVATAR_EXTENSIONS:
            raise ValidationError("File type not allowed. Please use JPG, PNG, or WebP images.")
        if not data:
            raise ValidationError("The selected image is empty.")
        if len(data) > self.max_avatar_bytes:
            raise ValidationError("Image file is too large. Please use an image smaller than 5MB.")

        self._delete_avatar_file(profile)

        relative_path = f"{user_id}/avatar-{int(time.time() * 1000)}.{ext}"
        target = self.storage_dir / relative_path
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            raise StorageError(f"Failed to save avatar: {e}") from e

        profile = self.repo.update(profile, AvatarUrl=relative_path)
        logger.info(f"Uploaded avatar for {user_id} ({len(data)} bytes)")
        return ProfileSummary.from_entity(profile)

    def remove_avatar(self, user_id: str) -> ProfileSummary:
        profile = self._require(user_id)
        self._delete_avatar_file(profile)
        profile = self.repo.update(profile, AvatarUrl=None)
        return ProfileSummary.from_entity(profile)

    def avatar_path(self, avatar_url: Optional[str]) -> Optional[Path]:
        """Local file for an AvatarUrl, if it exists."""
        if not avatar_url:
            return None
        path = self.storage_dir / avatar_url
        return path if path.is_file() else None

    def _delete_avatar_file(self, profile: Profile):
        # Only files inside the user's own folder are ever removed
        if not profile.AvatarUrl or not profile.AvatarUrl.startswith(f"{profile.ProfileId}/"):
            return
        path = self.storage_dir / profile.AvatarUrl
        try:
            if path.is_file():
                os.remove(path)
                logger.info(f"Deleted old avatar {profile.AvatarUrl}")
        except OSError as e:
            logger.warning(f"Could not delete old avatar: {e}")

    def _require(self, user_id: str) -> Profile:
        profile = self.repo.get_by_id(user_id)
        if not profile:
            raise NotFoundError("User not found")
        return profile
