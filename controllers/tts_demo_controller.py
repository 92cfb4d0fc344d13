"""
TTS Demo Controller - try the speech strategies and watch latency.
"""

import logging
from typing import Optional

import streamlit as st

from controllers.speech import get_tts_service
from services.errors import AppError, log_error
from services.tts import KyutaiTTSOptions, LatencyStats, PlaybackItem, SpeechResult

logger = logging.getLogger(__name__)

DEFAULT_DEMO_TEXT = (
    "Hello! I'm your cooking assistant. Let's make some delicious jollof rice together."
)


class TTSDemoController:
    """Controller for the TTS demo screen."""

    def __init__(self):
        if "tts_demo" not in st.session_state:
            st.session_state.tts_demo = {
                "text": DEFAULT_DEMO_TEXT,
                "chunks_received": 0,
                "events": [],
                "last_result": None,
                "pending_audio": [],
            }

    @property
    def tts(self):
        return get_tts_service()

    def get_text(self) -> str:
        return st.session_state.tts_demo["text"]

    def get_chunks_received(self) -> int:
        return st.session_state.tts_demo["chunks_received"]

    def get_events(self) -> list[str]:
        return st.session_state.tts_demo["events"]

    def get_last_result(self) -> Optional[SpeechResult]:
        return st.session_state.tts_demo["last_result"]

    def get_pending_audio(self) -> list[PlaybackItem]:
        pending = st.session_state.tts_demo["pending_audio"]
        st.session_state.tts_demo["pending_audio"] = []
        return pending

    def is_kyutai_available(self) -> bool:
        return self.tts.is_kyutai_available

    def refresh_availability(self) -> bool:
        return self.tts.check_kyutai_availability()

    def get_latency_stats(self) -> LatencyStats:
        return self.tts.get_latency_stats()

    def get_platform(self) -> str:
        return self.tts.platform.value

    def speak(
        self,
        text: str,
        voice_style: str = "natural-female",
        model: str = "kyutai-tts-1b",
        low_latency: bool = True,
        real_time: bool = False,
        streaming: bool = False,
        rate: float = 1.0,
        pitch: float = 1.0,
    ) -> tuple[bool, Optional[str]]:
        """
        Speak text with the chosen options.

        Returns (success, error_message)
        """
        demo = st.session_state.tts_demo
        demo["text"] = text
        demo["chunks_received"] = 0
        demo["events"] = []

        def on_chunk(chunk: bytes):
            demo["chunks_received"] += 1

        options = KyutaiTTSOptions(
            rate=rate,
            pitch=pitch,
            voice_style=voice_style,
            model=model,
            low_latency=low_latency or None,
            real_time=real_time,
            streaming=streaming or None,
            on_start=lambda: demo["events"].append("started"),
            on_done=lambda: demo["events"].append("done"),
            on_stopped=lambda: demo["events"].append("stopped"),
            on_error=lambda e: demo["events"].append(f"error: {e}"),
            on_chunk=on_chunk,
        )

        try:
            result = self.tts.speak(text, options)
        except AppError as e:
            return False, log_error(e, "TTS demo").user_message

        demo["last_result"] = result
        demo["pending_audio"].extend(self.tts.player.take_pending())
        if not result.success:
            return False, result.error or "Speech failed"
        return True, None

    def stop(self):
        self.tts.stop()
