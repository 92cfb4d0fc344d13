"""
Voice Chat Controller - realtime voice conversations.

Two modes share one VoiceChatState:
- kyutai: speech recognition -> Claude -> Kyutai TTS (RealtimeVoiceChat)
- unmute: a WebSocket session with an Unmute server (UnmuteClient)

Every action is recorded in the debug log shown on the screen.
"""

import logging
from typing import Any, Literal, Optional

import streamlit as st

from config.auth import get_current_user
from controllers.rate_limit import check_rate_limit
from controllers.speech import get_tts_service, load_preferences, save_preferences_section
from models.user_preferences import UnmutePreferences
from models.voice import (
    ConnectionStatus,
    KYUTAI_VOICES,
    LogLevel,
    SUPPORTED_LANGUAGES,
    VoiceChatState,
    VoiceMessage,
)
from services.errors import log_error
from services.tts import PlaybackItem
from services.unmute_client import UnmuteClient, UnmuteConfig
from services.voice_chat_service import RealtimeVoiceChat

logger = logging.getLogger(__name__)

VoiceMode = Literal["kyutai", "unmute"]


class VoiceChatController:
    """Controller for the voice chat screen."""

    def __init__(self):
        self._init_session_state()

    def _init_session_state(self):
        if "voice_chat" not in st.session_state:
            prefs = load_preferences(get_current_user())
            st.session_state.voice_chat = {
                "state": VoiceChatState(
                    selected_voice=prefs.voice_chat.selected_voice,
                    selected_language=prefs.voice_chat.selected_language,
                    auto_play=prefs.voice_chat.auto_play,
                    push_to_talk=prefs.voice_chat.push_to_talk,
                ),
                "unmute_prefs": prefs.unmute,
                "mode": "kyutai",
                "pipeline": None,
                "unmute": None,
                "pending_audio": [],
                "audio_key": 0,
            }

    @property
    def state(self) -> VoiceChatState:
        return st.session_state.voice_chat["state"]

    # Callbacks shared by both modes
    def _on_message(self, message: VoiceMessage):
        self.state.add_message(message)

    def _on_status_change(self, status: ConnectionStatus):
        self.state.set_status(status)

    def _on_debug_log(self, level: LogLevel, message: str, data: Any = None):
        self.state.add_debug_log(level, message, data)

    def log(self, level: LogLevel, message: str, data: Any = None):
        self._on_debug_log(level, message, data)

    # Accessors
    def get_mode(self) -> VoiceMode:
        return st.session_state.voice_chat["mode"]

    def get_voices(self) -> dict[str, tuple[str, str]]:
        return KYUTAI_VOICES

    def get_languages(self) -> dict[str, str]:
        return SUPPORTED_LANGUAGES

    def get_unmute_preferences(self) -> UnmutePreferences:
        return st.session_state.voice_chat["unmute_prefs"]

    def get_pending_audio(self) -> list[PlaybackItem]:
        pending = st.session_state.voice_chat["pending_audio"]
        st.session_state.voice_chat["pending_audio"] = []
        return pending

    def get_audio_key(self) -> int:
        return st.session_state.voice_chat["audio_key"]

    def increment_audio_key(self):
        st.session_state.voice_chat["audio_key"] += 1

    def set_mode(self, mode: VoiceMode):
        if mode == self.get_mode():
            return
        self.disconnect()
        st.session_state.voice_chat["mode"] = mode
        self.log("info", f"Switched to {mode} mode")

    # Connection
    def _pipeline(self) -> RealtimeVoiceChat:
        session = st.session_state.voice_chat
        if session["pipeline"] is None:
            session["pipeline"] = RealtimeVoiceChat(
                on_message=self._on_message,
                on_status_change=self._on_status_change,
                on_debug_log=self._on_debug_log,
                tts=get_tts_service(),
                voice=self.state.selected_voice,
                language=self.state.selected_language,
                auto_play=self.state.auto_play,
            )
        return session["pipeline"]

    def _unmute(self) -> UnmuteClient:
        session = st.session_state.voice_chat
        if session["unmute"] is None:
            session["unmute"] = UnmuteClient(
                on_message=self._on_message,
                on_status_change=self._on_status_change,
                on_debug_log=self._on_debug_log,
                config=UnmuteConfig.from_preferences(session["unmute_prefs"]),
            )
        return session["unmute"]

    def connect(self) -> tuple[bool, Optional[str]]:
        """
        Connect in the current mode. A no-op while connected or connecting.

        Returns (success, error_message)
        """
        if self.state.is_connected or self.state.is_connecting:
            self.log("warn", "Already connected or connecting")
            return True, None

        self.log("info", f"Connecting ({self.get_mode()})...")
        try:
            if self.get_mode() == "unmute":
                self._unmute().connect()
            else:
                self._pipeline().connect()
        except Exception as e:
            info = log_error(e, "Voice chat connect")
            self.state.set_status("error")
            self.log("error", "Connection failed", info.message)
            return False, info.user_message
        return True, None

    def disconnect(self):
        session = st.session_state.voice_chat
        if session["unmute"] is not None:
            session["unmute"].disconnect()
            session["unmute"] = None
        if session["pipeline"] is not None:
            session["pipeline"].disconnect()
            session["pipeline"] = None
        self.state.set_status("disconnected")

    # Conversation
    def send_text_message(self, text: str) -> tuple[bool, Optional[str]]:
        """
        Send a typed message.

        Returns (success, error_message)
        """
        if not self.state.is_connected:
            self.log("error", "Cannot send message - not connected")
            return False, "Connect first to start talking."
        if not check_rate_limit():
            return False, "Too many requests. Please wait a moment."

        try:
            if self.get_mode() == "unmute":
                return self._unmute_exchange(lambda client: client.send_text_message(text))
            reply = self._pipeline().send_text_message(text)
        except Exception as e:
            info = log_error(e, "Voice chat message")
            self.log("error", "Message failed", info.message)
            return False, info.user_message

        self._queue_reply_audio(reply)
        return True, None

    def start_recording(self) -> bool:
        if not self.state.is_connected:
            self.log("warn", "Cannot start recording - not connected")
            return False
        started = (
            self._unmute().start_recording()
            if self.get_mode() == "unmute"
            else self._pipeline().start_recording()
        )
        self.state.is_recording = started
        return started

    def submit_recording(self, audio_bytes: bytes) -> tuple[bool, Optional[str]]:
        """
        Handle a finished recording from the audio widget.

        Returns (success, error_message)
        """
        if not self.state.is_connected:
            return False, "Connect first to start talking."
        if not check_rate_limit():
            return False, "Too many requests. Please wait a moment."

        self.start_recording()
        try:
            if self.get_mode() == "unmute":
                def exchange(client: UnmuteClient) -> bool:
                    client.append_audio(audio_bytes)
                    return client.stop_recording()
                return self._unmute_exchange(exchange)
            reply = self._pipeline().stop_recording(audio_bytes)
        except Exception as e:
            info = log_error(e, "Voice chat recording")
            self.log("error", "Recording failed", info.message)
            return False, info.user_message
        finally:
            self.state.is_recording = False

        if reply is None:
            return False, "I didn't catch that. Please try again."
        self._queue_reply_audio(reply)
        return True, None

    def _unmute_exchange(self, send) -> tuple[bool, Optional[str]]:
        client = self._unmute()
        if not send(client):
            return False, "Message could not be sent."
        response = client.receive_until_done()
        audio = client.take_audio()
        if response.text:
            self._on_message(VoiceMessage(role="assistant", text=response.text, audio=audio))
        if audio and self.state.auto_play:
            st.session_state.voice_chat["pending_audio"].append(
                PlaybackItem(audio=audio, mime_type="audio/wav", source="unmute")
            )
        return True, None

    def _queue_reply_audio(self, reply: Optional[VoiceMessage]):
        if reply is None or not reply.audio:
            return
        st.session_state.voice_chat["pending_audio"].extend(get_tts_service().player.take_pending())

    def stop_speaking(self):
        get_tts_service().stop()
        self.log("info", "Playback stopped")

    # Settings
    def set_voice(self, voice_id: str):
        if voice_id not in KYUTAI_VOICES:
            raise KeyError(f"Unknown voice: {voice_id}")
        self.state.selected_voice = voice_id
        pipeline = st.session_state.voice_chat["pipeline"]
        if pipeline is not None:
            pipeline.set_voice(voice_id)
        self._save_voice_chat_preferences()

    def set_language(self, language: str):
        if language not in SUPPORTED_LANGUAGES:
            raise KeyError(f"Unknown language: {language}")
        self.state.selected_language = language
        pipeline = st.session_state.voice_chat["pipeline"]
        if pipeline is not None:
            pipeline.set_language(language)
        self._save_voice_chat_preferences()

    def set_auto_play(self, auto_play: bool):
        self.state.auto_play = auto_play
        pipeline = st.session_state.voice_chat["pipeline"]
        if pipeline is not None:
            pipeline.auto_play = auto_play
        self._save_voice_chat_preferences()

    def set_push_to_talk(self, push_to_talk: bool):
        self.state.push_to_talk = push_to_talk
        self._save_voice_chat_preferences()

    def update_unmute_settings(self, **changes) -> tuple[bool, Optional[str]]:
        session = st.session_state.voice_chat
        try:
            prefs = session["unmute_prefs"].model_validate({**session["unmute_prefs"].model_dump(), **changes})
        except ValueError as e:
            return False, str(e)
        session["unmute_prefs"] = prefs
        if session["unmute"] is not None:
            config = UnmuteConfig.from_preferences(prefs)
            session["unmute"].update_config(**vars(config))
        save_preferences_section(get_current_user(), "unmute", prefs)
        return True, None

    def _save_voice_chat_preferences(self):
        state = self.state
        save_preferences_section(get_current_user(), "voice_chat", {
            "selected_voice": state.selected_voice,
            "selected_language": state.selected_language,
            "auto_play": state.auto_play,
            "push_to_talk": state.push_to_talk,
        })

    def clear_messages(self):
        self.state.clear_messages()
        pipeline = st.session_state.voice_chat["pipeline"]
        if pipeline is not None:
            pipeline.history = []

    def clear_debug_logs(self):
        self.state.clear_debug_logs()
