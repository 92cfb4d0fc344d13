"""
Audio Service - handles speech recognition and device text-to-speech.

This service is pure Python with no Streamlit dependencies.
Uses edge-tts for high-quality neural text-to-speech; it is the "device
speech" strategy of the TTS service and the voice of the chef assistant.
"""

import asyncio
import logging
import os
import tempfile
from typing import Optional

import edge_tts
import speech_recognition as sr

from models.user_preferences import (
    VOICE_OPTIONS,
    DEFAULT_VOICE_NAME,
    DEFAULT_VOICE_RATE,
)
from services.errors import ExternalServiceError

logger = logging.getLogger(__name__)

DEFAULT_PITCH = "+0Hz"


class SpeechSynthesisError(ExternalServiceError):
    """edge-tts failed or produced no audio."""


class AudioService:
    """Service for audio transcription and text-to-speech."""

    def __init__(self):
        self.recognizer = sr.Recognizer()

    def transcribe(self, audio_bytes: bytes, language: str = "en-US") -> Optional[str]:
        """
        Transcribe audio to text using Google Speech Recognition.

        Args:
            audio_bytes: Raw audio data (WAV format)
            language: BCP-47 language tag

        Returns:
            Transcribed text, or None if transcription failed
        """
        temp_path = None
        try:
            with tempfile.NamedTemporaryFile(suffix=".wav", delete=False) as f:
                f.write(audio_bytes)
                temp_path = f.name

            with sr.AudioFile(temp_path) as source:
                audio_data = self.recognizer.record(source)
                return self.recognizer.recognize_google(audio_data, language=language)

        except sr.UnknownValueError:
            logger.warning("Could not understand audio")
            return None
        except sr.RequestError as e:
            logger.error(f"Speech recognition service error: {e}")
            return None
        except (ValueError, OSError) as e:
            # Unreadable or non-WAV audio
            logger.error(f"Transcription error: {e}")
            return None
        finally:
            if temp_path and os.path.exists(temp_path):
                os.unlink(temp_path)

    async def _synthesize_async(self, text: str, voice: str, rate: str, pitch: str) -> bytes:
        communicate = edge_tts.Communicate(text, voice, rate=rate, pitch=pitch)
        audio_bytes = b""
        async for chunk in communicate.stream():
            if chunk["type"] == "audio":
                audio_bytes += chunk["data"]
        return audio_bytes

    def synthesize(
        self,
        text: str,
        voice: str = DEFAULT_VOICE_NAME,
        rate: str = DEFAULT_VOICE_RATE,
        pitch: str = DEFAULT_PITCH,
    ) -> bytes:
        """
        Convert text to MP3 audio using edge-tts.

        Raises:
            SpeechSynthesisError if edge-tts fails or returns no audio
        """
        try:
            audio = asyncio.run(self._synthesize_async(text, voice, rate, pitch))
        except Exception as e:
            raise SpeechSynthesisError(f"Edge-TTS error: {e}") from e
        if not audio:
            raise SpeechSynthesisError("Edge-TTS returned no audio")
        return audio

    @staticmethod
    def get_available_voices() -> dict[str, str]:
        """Get available voice options as {voice_id: display_name}."""
        return VOICE_OPTIONS.copy()
