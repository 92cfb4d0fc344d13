"""
TTS Service - picks a speech strategy and manages playback.

Strategies, in the order they are considered:

    web platform:
        Kyutai server (if available and low latency / real time requested)
        -> web speech (device engine) on failure or otherwise

    ios / android:
        Kyutai (if available and low latency / real time requested)
            ios: simulated on-device MLX inference, then the server path
            android: server path
        -> device speech on failure or otherwise

    Kyutai server path:
        real time or streaming requested -> POST {endpoint}/stream
            -> batch route with streaming/real time off if streaming fails
        otherwise -> batch route (POST /kyutai/tts), then fetch audio_url

Callers get a SpeechResult describing which strategy produced the audio.
Only the Kyutai paths fall back; device speech reports failure through
on_error and the result instead of raising.
"""

import logging
import time
from collections import deque
from dataclasses import dataclass, fields, replace
from typing import Callable, Optional

from config.settings import get_settings
from services.errors import ValidationError
from services.tts.device import DeviceSpeechEngine, DEVICE_MIME_TYPE
from services.tts.kyutai import BackendTTSClient, KyutaiClient, KyutaiError
from services.tts.options import (
    KyutaiTTSOptions,
    LatencyStats,
    Platform,
    SpeechResult,
    Strategy,
    TTSOptions,
    DEFAULT_MODEL,
)
from services.tts.player import AudioPlayer

logger = logging.getLogger(__name__)

STREAM_MIME_TYPE = "audio/wav"
MLX_SIMULATED_DELAY_SECONDS = 0.05
DEFAULT_AVERAGE_LATENCY_MS = 50.0
DEFAULT_LAST_LATENCY_MS = 45.0


@dataclass
class RealtimeConversation:
    """Handle returned by TTSService.start_realtime_conversation()."""
    speak: Callable[[str], SpeechResult]
    stop: Callable[[], None]


class TTSService:
    """Text-to-speech with Kyutai and device speech strategies."""

    def __init__(
        self,
        platform: Platform | str | None = None,
        kyutai: Optional[KyutaiClient] = None,
        device: Optional[DeviceSpeechEngine] = None,
        player: Optional[AudioPlayer] = None,
        backend: Optional[BackendTTSClient] = None,
        check_availability: bool = True,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.platform = Platform(platform or get_settings().tts_platform)
        self.kyutai = kyutai or KyutaiClient()
        self.device = device or DeviceSpeechEngine()
        self.player = player or AudioPlayer()
        self.backend = backend or BackendTTSClient()
        self._sleep = sleep
        self._latencies: deque[float] = deque(maxlen=100)
        self._active: Optional[TTSOptions] = None
        self.is_kyutai_available = False

        if check_availability:
            self.check_kyutai_availability()

    # ==========================================
    # Capability detection
    # ==========================================

    def check_kyutai_availability(self) -> bool:
        """Probe the Kyutai server and remember the answer."""
        self.is_kyutai_available = self.kyutai.check_health()
        return self.is_kyutai_available

    # ==========================================
    # Strategy selection
    # ==========================================

    def speak(self, text: str, options: Optional[TTSOptions] = None) -> SpeechResult:
        """
        Speak text with the best available strategy.

        Raises:
            ValidationError if text is empty
        """
        if not text or not text.strip():
            raise ValidationError("Text is required")

        options = _as_kyutai_options(options)
        self._active = options
        logger.info(f"TTS speak on {self.platform.value}: {text[:50]!r}")

        if self.platform == Platform.WEB:
            result = self._speak_web(text, options)
        elif self.is_kyutai_available and options.wants_kyutai():
            result = self._speak_kyutai(text, options)
        else:
            result = self._speak_device(text, options)

        # Handed-out clips keep playing in the browser until stop()
        if not result.success:
            self._active = None
        return result

    def _speak_web(self, text: str, options: KyutaiTTSOptions) -> SpeechResult:
        if not (self.is_kyutai_available and options.wants_kyutai()):
            return self._speak_device(text, options, strategy=Strategy.WEB_SPEECH)

        _emit(options.on_start)
        try:
            result = self._speak_kyutai_server(text, options)
        except Exception as e:
            logger.warning(f"Kyutai TTS failed on web, falling back to web speech: {e}")
            return self._speak_device(
                text,
                options,
                strategy=Strategy.WEB_SPEECH,
                announce=False,
                fallbacks=[f"{Strategy.KYUTAI_SERVER.value}: {e}"],
            )
        _emit(options.on_done)
        return result

    def _speak_kyutai(self, text: str, options: KyutaiTTSOptions) -> SpeechResult:
        logger.info("Using Kyutai TTS for natural voice synthesis")
        _emit(options.on_start)
        try:
            if self.platform == Platform.IOS:
                result = self._speak_kyutai_mlx(text, options)
            else:
                result = self._speak_kyutai_server(text, options)
        except Exception as e:
            logger.error(f"Kyutai TTS error, falling back to device speech: {e}")
            _emit(options.on_error, e)
            return self._speak_device(text, options, fallbacks=[f"kyutai: {e}"])
        _emit(options.on_done)
        return result

    def _speak_kyutai_mlx(self, text: str, options: KyutaiTTSOptions) -> SpeechResult:
        # No on-device model is bundled; simulate its latency and use the server
        logger.info("Simulating on-device MLX inference")
        self._sleep(MLX_SIMULATED_DELAY_SECONDS)
        result = self._speak_kyutai_server(text, replace(options, low_latency=True))
        result.strategy = Strategy.KYUTAI_MLX
        return result

    def _speak_kyutai_server(self, text: str, options: KyutaiTTSOptions) -> SpeechResult:
        if options.real_time or options.streaming:
            return self._speak_kyutai_streaming(text, options)
        return self._speak_kyutai_batch(text, options)

    def _speak_kyutai_batch(self, text: str, options: KyutaiTTSOptions) -> SpeechResult:
        payload = {
            "text": text,
            "voice_style": options.voice_style,
            "model": options.model,
            "streaming": options.streaming is not False,
            "rate": options.rate or 1.0,
            "pitch": options.pitch or 1.0,
            "low_latency": options.low_latency is not False,
        }
        started = time.perf_counter()
        result = self.backend.tts(payload)
        if not (result.get("success") and result.get("audio_url")):
            raise KyutaiError("Failed to get audio from Kyutai TTS")

        audio, mime_type = self.backend.fetch_audio(result["audio_url"])
        latency = result.get("latency_ms") or _elapsed_ms(started)
        voice_used = result.get("voice_used") or options.voice_style
        logger.info(f"Kyutai TTS: {latency:.0f}ms latency, using {voice_used} voice")

        self._record_latency(latency)
        self.player.play_bytes(audio, mime_type, source=Strategy.KYUTAI_SERVER.value)
        return SpeechResult(
            success=True,
            strategy=Strategy.KYUTAI_SERVER,
            audio=audio,
            mime_type=mime_type,
            latency_ms=latency,
            voice_used=voice_used,
        )

    def _speak_kyutai_streaming(self, text: str, options: KyutaiTTSOptions) -> SpeechResult:
        payload = {
            "text": text,
            "voice_style": options.voice_style,
            "model": options.model,
            "streaming": True,
            "low_latency": True,
            "real_time": bool(options.real_time),
            "rate": options.rate or 1.0,
            "pitch": options.pitch or 1.0,
        }
        started = time.perf_counter()
        first_chunk_latency = None
        chunks: list[bytes] = []

        try:
            for chunk in self.kyutai.stream(payload):
                chunks.append(chunk)
                if first_chunk_latency is None:
                    first_chunk_latency = _elapsed_ms(started)
                    if options.real_time:
                        self.player.start_realtime(chunk, STREAM_MIME_TYPE, source=Strategy.KYUTAI_STREAM.value)
                elif options.real_time:
                    self.player.append_chunk(chunk)
                _emit(options.on_chunk, chunk)
                logger.debug(f"Received audio chunk: {len(chunk)} bytes")

            if not chunks:
                raise KyutaiError("Streaming TTS returned no audio")
        except Exception as e:
            logger.warning(f"Kyutai streaming TTS error, retrying without streaming: {e}")
            self.player.cancel_realtime()
            result = self._speak_kyutai_batch(text, replace(options, streaming=False, real_time=False))
            result.fallbacks.insert(0, f"{Strategy.KYUTAI_STREAM.value}: {e}")
            return result

        audio = b"".join(chunks)
        if options.real_time:
            self.player.finish_realtime()
        else:
            self.player.play_bytes(audio, STREAM_MIME_TYPE, source=Strategy.KYUTAI_STREAM.value)

        self._record_latency(first_chunk_latency)
        return SpeechResult(
            success=True,
            strategy=Strategy.KYUTAI_STREAM,
            audio=audio,
            mime_type=STREAM_MIME_TYPE,
            latency_ms=first_chunk_latency,
            voice_used=options.voice_style,
            chunks=len(chunks),
        )

    def _speak_device(
        self,
        text: str,
        options: KyutaiTTSOptions,
        strategy: Strategy = Strategy.DEVICE,
        announce: bool = True,
        fallbacks: Optional[list[str]] = None,
    ) -> SpeechResult:
        logger.info(f"Using {strategy.value} for TTS")
        if announce:
            _emit(options.on_start)
        try:
            audio, voice_id = self.device.synthesize(
                text,
                voice=options.voice,
                rate=options.rate,
                pitch=options.pitch,
                language=options.language or "en-US",
            )
        except Exception as e:
            logger.error(f"{strategy.value} TTS error: {e}")
            _emit(options.on_error, e)
            return SpeechResult(success=False, strategy=strategy, error=str(e), fallbacks=fallbacks or [])

        self.player.play_bytes(audio, DEVICE_MIME_TYPE, source=strategy.value)
        _emit(options.on_done)
        return SpeechResult(
            success=True,
            strategy=strategy,
            audio=audio,
            mime_type=DEVICE_MIME_TYPE,
            voice_used=voice_id,
            fallbacks=fallbacks or [],
        )

    # ==========================================
    # Playback lifecycle
    # ==========================================

    def stop(self):
        """Stop playback and notify the active utterance."""
        logger.info("Stopping TTS playback")
        self.player.stop()
        self.device.stop()
        if self._active is not None:
            _emit(self._active.on_stopped)
        self._active = None

    def is_speaking(self) -> bool:
        return self.player.is_playing or self.device.is_speaking

    def get_available_voices(self) -> list[dict[str, str]]:
        return self.device.list_voices()

    def start_realtime_conversation(self, options: Optional[KyutaiTTSOptions] = None) -> RealtimeConversation:
        """Get a speak/stop pair that always asks for real-time, low-latency Kyutai."""
        logger.info("Starting real-time voice conversation")
        base = _as_kyutai_options(options)

        def speak(text: str) -> SpeechResult:
            return self.speak(text, replace(base, real_time=True, low_latency=True))

        return RealtimeConversation(speak=speak, stop=self.stop)

    def get_latency_stats(self) -> LatencyStats:
        if self._latencies:
            average = sum(self._latencies) / len(self._latencies)
            last = self._latencies[-1]
        else:
            average, last = DEFAULT_AVERAGE_LATENCY_MS, DEFAULT_LAST_LATENCY_MS
        return LatencyStats(
            average_latency=round(average, 1),
            last_latency=round(last, 1),
            voice_model=DEFAULT_MODEL,
            is_mlx_enabled=self.platform == Platform.IOS,
            is_streaming_enabled=self.is_kyutai_available,
            samples=len(self._latencies),
        )

    def _record_latency(self, latency_ms: Optional[float]):
        if latency_ms is not None:
            self._latencies.append(float(latency_ms))


def _emit(callback, *args):
    if callback is not None:
        callback(*args)


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


def _as_kyutai_options(options: Optional[TTSOptions]) -> KyutaiTTSOptions:
    if options is None:
        return KyutaiTTSOptions()
    if isinstance(options, KyutaiTTSOptions):
        return options
    return KyutaiTTSOptions(**{f.name: getattr(options, f.name) for f in fields(TTSOptions)})
