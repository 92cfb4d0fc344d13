"""
Shared speech helpers for controllers: the per-session TTS service and
user preferences access.
"""

import logging
from typing import Optional

import streamlit as st
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from config.auth import UserContext
from config.database import SessionLocal
from models.repositories.user_preferences_repository import UserPreferencesRepository
from models.user_preferences import UserPreferencesData
from services.tts import KyutaiTTSOptions, TTSService

logger = logging.getLogger(__name__)

# Assistant language -> speech recognition / synthesis locale
SPEECH_LOCALES = {
    "en": "en-US",
    "yo": "yo-NG",
    "ig": "ig-NG",
    "ha": "ha-NG",
}


def get_tts_service() -> TTSService:
    """One TTSService per browser session (it probes Kyutai on creation)."""
    if "tts_service" not in st.session_state:
        st.session_state.tts_service = TTSService()
    return st.session_state.tts_service


def rate_to_multiplier(rate: str) -> float:
    """Convert an edge-tts rate string ('+20%') to a speed multiplier."""
    try:
        return 1.0 + int(rate.strip().rstrip("%")) / 100
    except (AttributeError, ValueError):
        return 1.0


def speech_options(prefs: UserPreferencesData, **overrides) -> KyutaiTTSOptions:
    """TTS options from the user's voice and Kyutai preferences."""
    options = KyutaiTTSOptions(
        voice=prefs.voice.name,
        rate=rate_to_multiplier(prefs.voice.rate),
        pitch=prefs.tts.pitch,
        language=prefs.tts.language,
        voice_style=prefs.tts.voice_style,
        model=prefs.tts.model,
        low_latency=prefs.tts.low_latency or None,
        real_time=prefs.tts.real_time,
        streaming=prefs.tts.streaming or None,
    )
    for key, value in overrides.items():
        setattr(options, key, value)
    return options


def load_preferences(user: Optional[UserContext]) -> UserPreferencesData:
    """Stored preferences for a user, or defaults."""
    if not user:
        return UserPreferencesData()
    db = SessionLocal()
    try:
        return UserPreferencesRepository(db).get(user.user_id)
    except SQLAlchemyError as e:
        logger.warning(f"Could not load preferences for {user.user_id}: {e}")
        return UserPreferencesData()
    finally:
        db.close()


def save_preferences_section(user: Optional[UserContext], section: str, values: BaseModel | dict) -> bool:
    """Persist one preferences group. Returns False when not saved."""
    if not user:
        return False
    db = SessionLocal()
    try:
        UserPreferencesRepository(db).update_section(user.user_id, section, values)
        return True
    except SQLAlchemyError as e:
        logger.warning(f"Could not save {section} preferences for {user.user_id}: {e}")
        return False
    finally:
        db.close()
