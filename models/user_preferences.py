"""
User Preferences - Pydantic models for typed JSON access.

These models define the structure of the Preferences JSON blob
stored in the UserPreferences table. Each screen owns one group:
voice (device speech), tts (Kyutai options), assistant (chef assistant
settings), voice_chat (realtime voice screen) and unmute (realtime
server session).
"""

import json
from typing import Literal, Optional

from pydantic import BaseModel, Field


# Available edge-tts voices for English (US, UK, Ireland)
VOICE_OPTIONS = {
    "en-US-AriaNeural": "Aria (US, Female)",
    "en-US-GuyNeural": "Guy (US, Male)",
    "en-US-JennyNeural": "Jenny (US, Female)",
    "en-US-ChristopherNeural": "Christopher (US, Male)",
    "en-GB-SoniaNeural": "Sonia (UK, Female)",
    "en-GB-RyanNeural": "Ryan (UK, Male)",
    "en-IE-EmilyNeural": "Emily (Ireland, Female)",
    "en-IE-ConnorNeural": "Connor (Ireland, Male)",
    "en-NG-EzinneNeural": "Ezinne (Nigeria, Female)",
    "en-NG-AbeoNeural": "Abeo (Nigeria, Male)",
}

# Default voice settings
DEFAULT_VOICE_NAME = "en-US-AriaNeural"
DEFAULT_VOICE_RATE = "+0%"  # Normal speed

# Speed presets for the slider (maps slider value to edge-tts rate)
SPEED_OPTIONS = {
    -2: "-20%",   # Slower
    -1: "-10%",   # Slightly slower
    0: "+0%",     # Normal
    1: "+10%",    # Slightly faster
    2: "+20%",    # Faster
    3: "+30%",    # Much faster
    4: "+40%",    # Very fast
}

KyutaiVoiceStyle = Literal["natural-female", "natural-male", "expressive", "calm"]
KyutaiModel = Literal["kyutai-tts-1b", "kyutai-tts-2.6b"]

KYUTAI_VOICE_STYLES = ["natural-female", "natural-male", "expressive", "calm"]
KYUTAI_MODELS = ["kyutai-tts-1b", "kyutai-tts-2.6b"]

ASSISTANT_LANGUAGES = {
    "en": "English",
    "yo": "Yoruba",
    "ig": "Igbo",
    "ha": "Hausa",
}

UNMUTE_VOICES = ["alloy", "echo", "fable", "onyx", "nova", "shimmer"]
UNMUTE_LANGUAGES = ["en", "es", "fr", "de", "it", "pt", "ru", "ja", "ko", "zh"]
DEFAULT_UNMUTE_INSTRUCTIONS = (
    "You are a helpful voice assistant. Respond naturally and conversationally."
)


class VoicePreferences(BaseModel):
    """Voice-related preferences."""
    name: str = Field(default=DEFAULT_VOICE_NAME, description="Edge-TTS voice ID")
    rate: str = Field(default=DEFAULT_VOICE_RATE, description="Speech rate (e.g., '+20%')")


class TTSPreferences(BaseModel):
    """Kyutai strategy hints used by the TTS service."""
    low_latency: bool = False
    real_time: bool = False
    streaming: bool = False
    voice_style: KyutaiVoiceStyle = "natural-female"
    model: KyutaiModel = "kyutai-tts-1b"
    pitch: float = Field(default=1.0, ge=0.5, le=2.0)
    language: str = "en-US"


class AssistantPreferences(BaseModel):
    """Chef assistant settings."""
    language: Literal["en", "yo", "ig", "ha"] = "en"
    voice_enabled: bool = True
    camera_analysis_enabled: bool = True
    selected_chef_id: Optional[str] = None


class VoiceChatPreferences(BaseModel):
    """Realtime voice chat screen settings."""
    selected_voice: str = "natural-female-1"
    selected_language: str = "en-US"
    auto_play: bool = True
    push_to_talk: bool = False


class UnmutePreferences(BaseModel):
    """Session config for the Unmute realtime server."""
    server_url: Optional[str] = None  # None = use settings.unmute_server_url
    voice: str = "alloy"
    language: str = "en"
    instructions: str = DEFAULT_UNMUTE_INSTRUCTIONS
    temperature: float = Field(default=0.8, ge=0.0, le=2.0)
    max_tokens: int = Field(default=150, gt=0)


class UserPreferencesData(BaseModel):
    """
    Root preferences model.

    Extensible structure - add new preference groups as needed.
    """
    voice: VoicePreferences = Field(default_factory=VoicePreferences)
    tts: TTSPreferences = Field(default_factory=TTSPreferences)
    assistant: AssistantPreferences = Field(default_factory=AssistantPreferences)
    voice_chat: VoiceChatPreferences = Field(default_factory=VoiceChatPreferences)
    unmute: UnmutePreferences = Field(default_factory=UnmutePreferences)

    @classmethod
    def from_json(cls, json_str: str) -> "UserPreferencesData":
        """Parse preferences from JSON string, with defaults for missing fields."""
        try:
            data = json.loads(json_str) if json_str else {}
            return cls.model_validate(data)
        except (json.JSONDecodeError, ValueError):
            return cls()

    def to_json(self) -> str:
        """Serialize preferences to JSON string."""
        return self.model_dump_json()


def get_voice_display_name(voice_id: str) -> str:
    """Get the display name for a voice ID."""
    return VOICE_OPTIONS.get(voice_id, voice_id)


def rate_to_slider_value(rate: str) -> int:
    """Convert edge-tts rate string to slider value."""
    for slider_val, rate_str in SPEED_OPTIONS.items():
        if rate_str == rate:
            return slider_val
    return 0  # Default to normal


def slider_value_to_rate(slider_val: int) -> str:
    """Convert slider value to edge-tts rate string."""
    return SPEED_OPTIONS.get(slider_val, "+0%")


def speed_multiplier_to_rate(rate: float) -> str:
    """Convert a 1.0-based speed multiplier to an edge-tts rate string."""
    percent = round((rate - 1.0) * 100)
    return f"{percent:+d}%"


def pitch_multiplier_to_hz(pitch: float) -> str:
    """Convert a 1.0-based pitch multiplier to an edge-tts pitch offset."""
    hz = round((pitch - 1.0) * 50)
    return f"{hz:+d}Hz"
