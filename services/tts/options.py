"""
Option and result types for the TTS service.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

Callback = Optional[Callable[[], None]]
ErrorCallback = Optional[Callable[[BaseException], None]]
ChunkCallback = Optional[Callable[[bytes], None]]

DEFAULT_VOICE_STYLE = "natural-female"
DEFAULT_MODEL = "kyutai-tts-1b"


class Platform(str, Enum):
    WEB = "web"
    IOS = "ios"
    ANDROID = "android"


class Strategy(str, Enum):
    """How an utterance was actually produced."""
    DEVICE = "device"
    WEB_SPEECH = "web_speech"
    KYUTAI_SERVER = "kyutai_server"
    KYUTAI_STREAM = "kyutai_stream"
    KYUTAI_MLX = "kyutai_mlx"


@dataclass
class TTSOptions:
    """Options understood by every strategy."""
    voice: Optional[str] = None
    rate: float = 1.0
    pitch: float = 1.0
    language: str = "en-US"
    on_start: Callback = None
    on_done: Callback = None
    on_stopped: Callback = None
    on_error: ErrorCallback = None


@dataclass
class KyutaiTTSOptions(TTSOptions):
    """
    Options for Kyutai synthesis.

    `streaming` and `low_latency` are tri-state: None means "not asked
    for" when choosing a strategy, but the batch request treats None as
    True.
    """
    streaming: Optional[bool] = None
    low_latency: Optional[bool] = None
    voice_style: str = DEFAULT_VOICE_STYLE
    model: str = DEFAULT_MODEL
    real_time: bool = False
    on_chunk: ChunkCallback = None

    def wants_kyutai(self) -> bool:
        return bool(self.low_latency or self.real_time)


@dataclass
class SpeechResult:
    """Outcome of a speak() call."""
    success: bool
    strategy: Strategy
    audio: Optional[bytes] = None
    mime_type: Optional[str] = None
    latency_ms: Optional[float] = None
    voice_used: Optional[str] = None
    chunks: int = 0
    error: Optional[str] = None
    fallbacks: list[str] = field(default_factory=list)


@dataclass
class LatencyStats:
    average_latency: float
    last_latency: float
    voice_model: str
    is_mlx_enabled: bool
    is_streaming_enabled: bool
    samples: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "averageLatency": self.average_latency,
            "lastLatency": self.last_latency,
            "voiceModel": self.voice_model,
            "isMLXEnabled": self.is_mlx_enabled,
            "isStreamingEnabled": self.is_streaming_enabled,
            "samples": self.samples,
        }
