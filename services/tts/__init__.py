"""
Text-to-speech: Kyutai (streaming, batch, simulated on-device) with
device speech fallback.
"""

from services.tts.options import (
    TTSOptions,
    KyutaiTTSOptions,
    SpeechResult,
    LatencyStats,
    Platform,
    Strategy,
)
from services.tts.kyutai import KyutaiClient, BackendTTSClient, KyutaiError
from services.tts.device import DeviceSpeechEngine
from services.tts.player import AudioPlayer, PlaybackItem
from services.tts.service import TTSService, RealtimeConversation

__all__ = [
    "TTSOptions",
    "KyutaiTTSOptions",
    "SpeechResult",
    "LatencyStats",
    "Platform",
    "Strategy",
    "KyutaiClient",
    "BackendTTSClient",
    "KyutaiError",
    "DeviceSpeechEngine",
    "AudioPlayer",
    "PlaybackItem",
    "TTSService",
    "RealtimeConversation",
]
