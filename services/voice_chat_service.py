"""
Realtime Voice Chat - the Kyutai voice pipeline.

Speech in (SpeechRecognition) -> reply (Claude) -> speech out (Kyutai
TTS with device fallback). Callers receive messages, status changes and
debug entries through callbacks so the UI state stays outside this
service.
"""

import logging
from typing import Any, Callable, Optional

from models.voice import (
    ConnectionStatus,
    DEFAULT_KYUTAI_VOICE,
    LogLevel,
    VoiceMessage,
    voice_style_for,
)
from services.audio_service import AudioService
from services.claude_service import ClaudeService
from services.tts import KyutaiTTSOptions, SpeechResult, TTSService

logger = logging.getLogger(__name__)


class RealtimeVoiceChat:
    """A voice conversation with the assistant."""

    def __init__(
        self,
        on_message: Callable[[VoiceMessage], None],
        on_status_change: Callable[[ConnectionStatus], None],
        on_debug_log: Callable[[LogLevel, str, Any], None],
        tts: Optional[TTSService] = None,
        llm: Optional[ClaudeService] = None,
        audio: Optional[AudioService] = None,
        voice: str = DEFAULT_KYUTAI_VOICE,
        language: str = "en-US",
        auto_play: bool = True,
        instructions: Optional[str] = None,
    ):
        self.on_message = on_message
        self.on_status_change = on_status_change
        self.on_debug_log = on_debug_log
        self.tts = tts or TTSService(check_availability=False)
        self.llm = llm or ClaudeService()
        self.audio = audio or AudioService()
        self.voice = voice
        self.language = language
        self.auto_play = auto_play
        self.instructions = instructions

        self.status: ConnectionStatus = "disconnected"
        self.is_recording = False
        self.history: list[dict] = []
        self.last_speech: Optional[SpeechResult] = None

    @property
    def is_connected(self) -> bool:
        return self.status == "connected"

    def connect(self):
        """Check the speech backend and mark the conversation live."""
        self._set_status("connecting")
        self._log("info", "Checking Kyutai TTS availability...")
        try:
            available = self.tts.check_kyutai_availability()
        except Exception as e:
            self._set_status("error")
            self._log("error", "Failed to connect", str(e))
            raise

        if available:
            self._log("success", "Kyutai TTS server available")
        else:
            self._log("warn", "Kyutai TTS unavailable, using device speech")
        self._set_status("connected")

    def disconnect(self):
        self.is_recording = False
        self.tts.stop()
        self._set_status("disconnected")
        self._log("info", "Disconnected")

    def start_recording(self) -> bool:
        if not self.is_connected:
            self._log("warn", "Cannot start recording - not connected")
            return False
        self.is_recording = True
        self._log("info", "Recording started")
        return True

    def stop_recording(self, audio_bytes: bytes) -> Optional[VoiceMessage]:
        """
        Transcribe the recording and reply to it.

        Returns:
            The assistant's reply, or None when nothing was understood
        """
        if not self.is_recording:
            self._log("warn", "Cannot stop recording - not currently recording")
            return None
        self.is_recording = False
        self._log("info", "Recording stopped, transcribing...", {"bytes": len(audio_bytes or b"")})

        transcription = self.audio.transcribe(audio_bytes, language=self.language) if audio_bytes else None
        if not transcription or not transcription.strip():
            self._log("warn", "No speech detected in recording")
            return None

        self._log("success", "Transcription complete", {"text": transcription[:100]})
        return self.send_text_message(transcription)

    def send_text_message(self, text: str) -> Optional[VoiceMessage]:
        """Send user text and emit (and speak) the assistant's reply."""
        if not self.is_connected:
            self._log("error", "Cannot send message - not connected")
            return None
        text = (text or "").strip()
        if not text:
            return None

        self.on_message(VoiceMessage(role="user", text=text))

        self._log("info", "Generating response...")
        reply = self.llm.voice_reply(text, self.history, self.instructions)
        self.history.extend([
            {"role": "user", "content": text},
            {"role": "assistant", "content": reply},
        ])

        audio = None
        if self.auto_play:
            self.last_speech = self.tts.speak(reply, self.speech_options())
            if self.last_speech.success:
                audio = self.last_speech.audio
                self._log("success", f"Spoke reply via {self.last_speech.strategy.value}", {
                    "latencyMs": self.last_speech.latency_ms,
                    "chunks": self.last_speech.chunks,
                })
            else:
                self._log("error", "Failed to speak reply", self.last_speech.error)

        message = VoiceMessage(role="assistant", text=reply, audio=audio)
        self.on_message(message)
        return message

    def speech_options(self) -> KyutaiTTSOptions:
        return KyutaiTTSOptions(
            language=self.language,
            voice_style=voice_style_for(self.voice),
            real_time=True,
            low_latency=True,
        )

    def set_voice(self, voice: str):
        self.voice = voice
        self._log("info", "Voice changed", {"voice": voice})

    def set_language(self, language: str):
        self.language = language
        self._log("info", "Language changed", {"language": language})

    def _set_status(self, status: ConnectionStatus):
        self.status = status
        if status != "connected":
            self.is_recording = False
        self.on_status_change(status)

    def _log(self, level: LogLevel, message: str, data: Any = None):
        logger.debug(f"[VoiceChat] {message}")
        self.on_debug_log(level, message, data)
