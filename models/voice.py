"""
Voice chat state models.

Shared by the Kyutai voice pipeline (services/voice_chat_service.py) and
the Unmute realtime client (services/unmute_client.py).
"""

import uuid
from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

ConnectionStatus = Literal["connecting", "connected", "disconnected", "error"]
LogLevel = Literal["info", "warn", "error", "success"]

MAX_DEBUG_LOGS = 100

# Kyutai voices: id -> (display name, Kyutai voice style)
KYUTAI_VOICES = {
    "natural-female-1": ("Sarah", "natural-female"),
    "natural-male-1": ("David", "natural-male"),
    "natural-female-2": ("Emma", "natural-female"),
    "natural-male-2": ("James", "natural-male"),
    "natural-child-1": ("Alex", "expressive"),
}

SUPPORTED_LANGUAGES = {
    "en-US": "English (US)",
    "en-GB": "English (UK)",
    "fr-FR": "French",
    "es-ES": "Spanish",
    "de-DE": "German",
    "it-IT": "Italian",
    "pt-BR": "Portuguese (Brazil)",
    "ja-JP": "Japanese",
    "ko-KR": "Korean",
    "zh-CN": "Chinese (Simplified)",
}

DEFAULT_KYUTAI_VOICE = "natural-female-1"


def voice_style_for(voice_id: str) -> str:
    """Kyutai voice style for a voice ID (unknown IDs use natural-female)."""
    return KYUTAI_VOICES.get(voice_id, ("", "natural-female"))[1]


class VoiceMessage(BaseModel):
    """A transcribed or generated utterance in a voice conversation."""
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: Literal["user", "assistant"]
    text: str
    audio: Optional[bytes] = None
    timestamp: datetime = Field(default_factory=datetime.now)


class DebugLog(BaseModel):
    """Entry in the voice chat debug panel."""
    level: LogLevel
    message: str
    timestamp: datetime = Field(default_factory=datetime.now)
    data: Optional[Any] = None


class VoiceChatState(BaseModel):
    """State of the voice chat screen."""
    connection_status: ConnectionStatus = "disconnected"
    is_recording: bool = False
    is_listening: bool = False
    messages: list[VoiceMessage] = Field(default_factory=list)
    debug_logs: list[DebugLog] = Field(default_factory=list)
    selected_voice: str = DEFAULT_KYUTAI_VOICE
    selected_language: str = "en-US"
    auto_play: bool = True
    push_to_talk: bool = False

    @property
    def is_connected(self) -> bool:
        return self.connection_status == "connected"

    @property
    def is_connecting(self) -> bool:
        return self.connection_status == "connecting"

    def set_status(self, status: ConnectionStatus):
        self.connection_status = status
        if status != "connected":
            self.is_recording = False
            self.is_listening = False

    def add_message(self, message: VoiceMessage):
        self.messages.append(message)

    def add_debug_log(self, level: LogLevel, message: str, data: Any = None) -> DebugLog:
        """Append a debug entry, keeping only the newest MAX_DEBUG_LOGS."""
        entry = DebugLog(level=level, message=message, data=data)
        self.debug_logs.append(entry)
        if len(self.debug_logs) > MAX_DEBUG_LOGS:
            self.debug_logs = self.debug_logs[-MAX_DEBUG_LOGS:]
        return entry

    def clear_messages(self):
        self.messages = []

    def clear_debug_logs(self):
        self.debug_logs = []
