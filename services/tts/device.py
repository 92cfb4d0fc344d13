"""
Device speech engine.

Plays the role of the platform speech API (expo-speech on mobile, the
Web Speech API in browsers) using edge-tts through AudioService.
"""

import logging
from typing import Optional

from models.user_preferences import (
    VOICE_OPTIONS,
    DEFAULT_VOICE_NAME,
    speed_multiplier_to_rate,
    pitch_multiplier_to_hz,
)
from services.audio_service import AudioService

logger = logging.getLogger(__name__)

DEVICE_MIME_TYPE = "audio/mpeg"


class DeviceSpeechEngine:
    """Synthesizes speech with edge-tts voices."""

    def __init__(self, audio: Optional[AudioService] = None):
        self.audio = audio or AudioService()
        self._speaking = False

    @property
    def is_speaking(self) -> bool:
        return self._speaking

    def resolve_voice(self, voice: Optional[str], language: str) -> str:
        """
        Pick an edge-tts voice.

        An explicit voice wins if it is an edge voice ID; otherwise the
        first known voice for the language, then the default voice.
        """
        if voice and voice.endswith("Neural"):
            return voice
        if voice:
            # Allow partial matches on the display name, like "Sonia"
            for voice_id, name in VOICE_OPTIONS.items():
                if voice.lower() in name.lower():
                    return voice_id
        for voice_id in VOICE_OPTIONS:
            if voice_id.startswith(language):
                return voice_id
        return DEFAULT_VOICE_NAME

    def synthesize(self, text: str, voice: Optional[str], rate: float, pitch: float, language: str) -> tuple[bytes, str]:
        """
        Synthesize text. Returns (audio, voice_id).

        Raises:
            SpeechSynthesisError on failure
        """
        voice_id = self.resolve_voice(voice, language)
        self._speaking = True
        try:
            audio = self.audio.synthesize(
                text,
                voice=voice_id,
                rate=speed_multiplier_to_rate(rate or 1.0),
                pitch=pitch_multiplier_to_hz(pitch or 1.0),
            )
        finally:
            self._speaking = False
        return audio, voice_id

    def stop(self):
        self._speaking = False

    def list_voices(self) -> list[dict[str, str]]:
        return [
            {"identifier": voice_id, "name": name, "language": "-".join(voice_id.split("-")[:2])}
            for voice_id, name in VOICE_OPTIONS.items()
        ]
