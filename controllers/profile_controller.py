"""
Profile Controller - the signed-in user's profile and preferences.
"""

import logging
from typing import Optional

from config.auth import get_current_user
from config.database import SessionLocal
from controllers.speech import load_preferences, save_preferences_section
from models.user_preferences import (
    UserPreferencesData,
    VOICE_OPTIONS,
    rate_to_slider_value,
    slider_value_to_rate,
)
from services.errors import AppError, log_error
from services.profile_service import ProfileService, ProfileSummary, UserStats

logger = logging.getLogger(__name__)


class ProfileController:
    """Controller for profile editing and settings."""

    def __init__(self):
        self.user = get_current_user()

    def get_profile(self) -> Optional[ProfileSummary]:
        db = SessionLocal()
        try:
            return ProfileService(db).get_profile(self.user.user_id)
        except AppError as e:
            log_error(e, "Load own profile")
            return None
        finally:
            db.close()

    def get_stats(self) -> UserStats:
        db = SessionLocal()
        try:
            return ProfileService(db).get_user_stats(self.user.user_id)
        finally:
            db.close()

    def update_profile(
        self,
        username: Optional[str],
        full_name: Optional[str],
        bio: Optional[str],
    ) -> tuple[bool, Optional[str]]:
        """
        Save profile edits. A blank username leaves it unchanged.

        Returns (success, error_message)
        """
        db = SessionLocal()
        try:
            ProfileService(db).update_profile(
                self.user.user_id,
                username=username or None,
                full_name=full_name,
                bio=bio,
            )
            return True, None
        except AppError as e:
            return False, log_error(e, "Update profile").user_message
        finally:
            db.close()

    def upload_avatar(self, filename: str, data: bytes) -> tuple[bool, Optional[str]]:
        db = SessionLocal()
        try:
            ProfileService(db).upload_avatar(self.user.user_id, filename, data)
            return True, None
        except AppError as e:
            return False, log_error(e, "Upload avatar").user_message
        finally:
            db.close()

    def remove_avatar(self) -> tuple[bool, Optional[str]]:
        db = SessionLocal()
        try:
            ProfileService(db).remove_avatar(self.user.user_id)
            return True, None
        except AppError as e:
            return False, log_error(e, "Remove avatar").user_message
        finally:
            db.close()

    def avatar_bytes(self, avatar_url: Optional[str]) -> Optional[bytes]:
        db = SessionLocal()
        try:
            path = ProfileService(db).avatar_path(avatar_url)
        finally:
            db.close()
        return path.read_bytes() if path else None

    # Preferences
    def get_preferences(self) -> UserPreferencesData:
        return load_preferences(self.user)

    def get_voice_options(self) -> dict[str, str]:
        return VOICE_OPTIONS

    def get_speed_slider_value(self, prefs: UserPreferencesData) -> int:
        return rate_to_slider_value(prefs.voice.rate)

    def save_voice(self, voice_name: str, slider_value: int) -> bool:
        return save_preferences_section(self.user, "voice", {
            "name": voice_name,
            "rate": slider_value_to_rate(slider_value),
        })

    def save_tts(self, **values) -> bool:
        return save_preferences_section(self.user, "tts", values)
