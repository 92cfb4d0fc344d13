"""
User Preferences Repository - Data access for user preferences.

This repository handles all database operations related to user preferences,
providing typed access through Pydantic models.
"""

from typing import Optional

from pydantic import BaseModel
from sqlalchemy.orm import Session

from models.entities import UserPreference, utcnow
from models.user_preferences import UserPreferencesData


class UserPreferencesRepository:
    """Repository for user preferences database operations."""

    def __init__(self, db: Session):
        """Initialize with a database session."""
        self.db = db

    def get(self, user_id: str) -> UserPreferencesData:
        """
        Get user preferences, returning defaults if not found.

        Args:
            user_id: Profile ID of the user

        Returns:
            UserPreferencesData with user's preferences or defaults
        """
        record = self.get_record(user_id)
        if record:
            return UserPreferencesData.from_json(record.Preferences)
        return UserPreferencesData()

    def get_record(self, user_id: str) -> Optional[UserPreference]:
        """Get the raw database record for user preferences."""
        return self.db.query(UserPreference).filter(
            UserPreference.UserId == user_id
        ).first()

    def save(self, user_id: str, preferences: UserPreferencesData) -> UserPreference:
        """Save user preferences (upsert)."""
        record = self.get_record(user_id)

        if record:
            record.Preferences = preferences.to_json()
            record.UpdatedAt = utcnow()
        else:
            record = UserPreference(
                UserId=user_id,
                Preferences=preferences.to_json()
            )
            self.db.add(record)

        self.db.commit()
        self.db.refresh(record)
        return record

    def update_voice(self, user_id: str, voice_name: str, voice_rate: str) -> UserPreferencesData:
        """Update edge-tts voice preferences specifically."""
        prefs = self.get(user_id)
        prefs.voice.name = voice_name
        prefs.voice.rate = voice_rate
        self.save(user_id, prefs)
        return prefs

    def update_section(self, user_id: str, section: str, values: BaseModel | dict) -> UserPreferencesData:
        """
        Replace or patch one preference group (e.g. 'assistant', 'tts').

        Args:
            user_id: Profile ID of the user
            section: Name of the group on UserPreferencesData
            values: A full model for the group, or a dict of fields to change

        Raises:
            KeyError if the section doesn't exist
        """
        prefs = self.get(user_id)
        if section not in UserPreferencesData.model_fields:
            raise KeyError(f"Unknown preferences section: {section}")

        current = getattr(prefs, section)
        if isinstance(values, BaseModel):
            updated = values
        else:
            updated = current.model_validate({**current.model_dump(), **values})
        setattr(prefs, section, updated)
        self.save(user_id, prefs)
        return prefs

    def delete(self, user_id: str) -> bool:
        """Delete user preferences. Returns True if a record was removed."""
        result = self.db.query(UserPreference).filter(
            UserPreference.UserId == user_id
        ).delete()
        self.db.commit()
        return result > 0
