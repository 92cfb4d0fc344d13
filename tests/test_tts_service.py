import pytest

from services.errors import ValidationError
from services.tts import AudioPlayer, KyutaiError, KyutaiTTSOptions, Strategy, TTSOptions, TTSService


class FakeKyutai:
    def __init__(self, available=True, chunks=(b"RIFF", b"data"), error=None):
        self.available = available
        self.chunks = list(chunks)
        self.error = error
        self.payloads = []

    def check_health(self):
        return self.available

    def stream(self, payload):
        self.payloads.append(payload)
        if self.error:
            raise self.error
        yield from self.chunks


class FakeDevice:
    is_speaking = False

    def __init__(self, error=None):
        self.error = error
        self.calls = []
        self.stopped = False

    def synthesize(self, text, voice, rate, pitch, language):
        self.calls.append({"text": text, "voice": voice, "rate": rate, "pitch": pitch, "language": language})
        if self.error:
            raise self.error
        return b"mp3-audio", "en-US-AriaNeural"

    def stop(self):
        self.stopped = True

    def list_voices(self):
        return [{"identifier": "en-US-AriaNeural", "name": "Aria (US, Female)", "language": "en-US"}]


class FakeBackend:
    def __init__(self, result=None):
        self.result = result or {
            "success": True,
            "audio_url": "/kyutai/audio/abc",
            "latency_ms": 120.0,
            "voice_used": "natural-female",
        }
        self.payloads = []
        self.fetched = []

    def tts(self, payload):
        self.payloads.append(payload)
        return self.result

    def fetch_audio(self, audio_url):
        self.fetched.append(audio_url)
        return b"wav-audio", "audio/wav"


class Recorder:
    """Collects callback invocations by name."""

    def __init__(self):
        self.events = []

    def options(self, cls=KyutaiTTSOptions, **kwargs):
        return cls(
            on_start=lambda: self.events.append("start"),
            on_done=lambda: self.events.append("done"),
            on_stopped=lambda: self.events.append("stopped"),
            on_error=lambda e: self.events.append(f"error: {e}"),
            **kwargs,
        )


def make_service(platform="web", available=True, kyutai=None, device=None, backend=None, sleep=None):
    service = TTSService(
        platform=platform,
        kyutai=kyutai or FakeKyutai(available=available),
        device=device or FakeDevice(),
        player=AudioPlayer(),
        backend=backend or FakeBackend(),
        sleep=sleep or (lambda seconds: None),
    )
    return service


class TestValidation:
    def test_empty_text_rejected(self):
        with pytest.raises(ValidationError, match="Text is required"):
            make_service().speak("   ")

    def test_availability_checked_on_startup(self):
        assert make_service(available=True).is_kyutai_available
        assert not make_service(available=False).is_kyutai_available


class TestWebPlatform:
    def test_web_speech_when_kyutai_unavailable(self):
        recorder = Recorder()
        service = make_service(available=False)

        result = service.speak("Hello", recorder.options(low_latency=True))

        assert result.success
        assert result.strategy == Strategy.WEB_SPEECH
        assert result.audio == b"mp3-audio"
        assert recorder.events == ["start", "done"]
        pending = service.player.take_pending()
        assert [(p.mime_type, p.source) for p in pending] == [("audio/mpeg", "web_speech")]

    def test_web_speech_when_low_latency_not_requested(self):
        """An available server is only used when asked for low latency or real time."""
        backend = FakeBackend()
        service = make_service(backend=backend)

        result = service.speak("Hello", KyutaiTTSOptions())

        assert result.strategy == Strategy.WEB_SPEECH
        assert backend.payloads == []

    def test_batch_route_for_low_latency(self):
        """Unset streaming/low_latency flags are sent as True to the batch route."""
        recorder = Recorder()
        backend = FakeBackend()
        service = make_service(backend=backend)

        result = service.speak("Hello", recorder.options(low_latency=True, voice_style="calm"))

        assert result.strategy == Strategy.KYUTAI_SERVER
        assert result.audio == b"wav-audio"
        assert result.latency_ms == 120.0
        assert result.voice_used == "natural-female"
        assert backend.fetched == ["/kyutai/audio/abc"]
        payload = backend.payloads[0]
        assert payload["streaming"] is True
        assert payload["low_latency"] is True
        assert payload["voice_style"] == "calm"
        assert payload["model"] == "kyutai-tts-1b"
        assert recorder.events == ["start", "done"]

    def test_realtime_streams_chunks(self):
        chunks = []
        kyutai = FakeKyutai(chunks=[b"one", b"two", b"three"])
        service = make_service(kyutai=kyutai)

        result = service.speak("Hello", KyutaiTTSOptions(real_time=True, on_chunk=chunks.append))

        assert result.strategy == Strategy.KYUTAI_STREAM
        assert result.chunks == 3
        assert result.audio == b"onetwothree"
        assert chunks == [b"one", b"two", b"three"]
        assert kyutai.payloads[0]["real_time"] is True
        pending = service.player.take_pending()
        assert len(pending) == 1
        assert pending[0].realtime
        assert pending[0].audio == b"onetwothree"

    def test_stream_failure_falls_back_to_batch(self):
        """A failed stream is retried on the batch route with streaming off."""
        kyutai = FakeKyutai(error=KyutaiError("Streaming TTS failed: 503"))
        backend = FakeBackend()
        service = make_service(kyutai=kyutai, backend=backend)

        result = service.speak("Hello", KyutaiTTSOptions(streaming=True, low_latency=True))

        assert result.strategy == Strategy.KYUTAI_SERVER
        assert result.fallbacks == ["kyutai_stream: Streaming TTS failed: 503"]
        assert backend.payloads[0]["streaming"] is False

    def test_empty_stream_falls_back_to_batch(self):
        service = make_service(kyutai=FakeKyutai(chunks=[]))
        result = service.speak("Hello", KyutaiTTSOptions(real_time=True))
        assert result.strategy == Strategy.KYUTAI_SERVER
        assert result.fallbacks == ["kyutai_stream: Streaming TTS returned no audio"]

    def test_server_failure_falls_back_to_web_speech(self):
        """The fallback announces nothing new: one start, one done."""
        recorder = Recorder()
        service = make_service(backend=FakeBackend(result={"success": False, "message": "down"}))

        result = service.speak("Hello", recorder.options(low_latency=True))

        assert result.success
        assert result.strategy == Strategy.WEB_SPEECH
        assert result.fallbacks == ["kyutai_server: Failed to get audio from Kyutai TTS"]
        assert recorder.events == ["start", "done"]


class TestMobilePlatforms:
    def test_android_uses_server(self):
        result = make_service(platform="android").speak("Hello", KyutaiTTSOptions(low_latency=True))
        assert result.strategy == Strategy.KYUTAI_SERVER

    def test_ios_simulates_on_device_inference(self):
        sleeps = []
        backend = FakeBackend()
        service = make_service(platform="ios", backend=backend, sleep=sleeps.append)

        result = service.speak("Hello", KyutaiTTSOptions(real_time=False, low_latency=True))

        assert result.strategy == Strategy.KYUTAI_MLX
        assert sleeps == [0.05]
        assert backend.payloads[0]["low_latency"] is True

    def test_kyutai_failure_falls_back_to_device(self):
        recorder = Recorder()
        service = make_service(platform="android", backend=FakeBackend(result={"success": False}))

        result = service.speak("Hello", recorder.options(low_latency=True))

        assert result.success
        assert result.strategy == Strategy.DEVICE
        assert result.fallbacks == ["kyutai: Failed to get audio from Kyutai TTS"]
        assert "error: Failed to get audio from Kyutai TTS" in recorder.events
        assert recorder.events[-1] == "done"

    def test_device_used_without_kyutai(self):
        device = FakeDevice()
        service = make_service(platform="android", available=False, device=device)

        result = service.speak("Hello", TTSOptions(voice="Sonia", rate=1.2, language="en-GB"))

        assert result.strategy == Strategy.DEVICE
        assert device.calls[0] == {"text": "Hello", "voice": "Sonia", "rate": 1.2, "pitch": 1.0, "language": "en-GB"}

    def test_device_failure_is_reported_not_raised(self):
        recorder = Recorder()
        service = make_service(platform="android", available=False, device=FakeDevice(error=RuntimeError("no voices")))

        result = service.speak("Hello", recorder.options())

        assert not result.success
        assert result.error == "no voices"
        assert recorder.events == ["start", "error: no voices"]


class TestLifecycle:
    def test_stop_notifies_active_utterance(self):
        recorder = Recorder()
        service = make_service(available=False)
        service.speak("Hello", recorder.options())
        assert service.is_speaking()

        service.stop()

        assert recorder.events[-1] == "stopped"
        assert not service.is_speaking()
        assert service.device.stopped

    def test_stop_after_clips_were_rendered(self):
        """Clips already handed to the page still count as the active utterance."""
        recorder = Recorder()
        service = make_service(platform="android", available=False)
        service.speak("Hello", recorder.options())
        service.player.take_pending()

        service.stop()

        assert recorder.events == ["start", "done", "stopped"]

    def test_stop_fires_once(self):
        recorder = Recorder()
        service = make_service(available=False)
        service.speak("Hello", recorder.options())

        service.stop()
        service.stop()

        assert recorder.events.count("stopped") == 1

    def test_failed_utterance_is_not_stopped(self):
        recorder = Recorder()
        service = make_service(platform="android", available=False, device=FakeDevice(error=RuntimeError("no voices")))
        service.speak("Hello", recorder.options())

        service.stop()

        assert "stopped" not in recorder.events

    def test_stop_when_idle_is_quiet(self):
        service = make_service()
        service.stop()
        assert not service.is_speaking()

    def test_realtime_conversation_forces_realtime(self):
        kyutai = FakeKyutai()
        service = make_service(kyutai=kyutai)

        conversation = service.start_realtime_conversation()
        result = conversation.speak("Hi there")

        assert result.strategy == Strategy.KYUTAI_STREAM
        assert kyutai.payloads[0]["real_time"] is True

    def test_latency_stats(self):
        service = make_service(platform="ios")
        defaults = service.get_latency_stats()
        assert (defaults.average_latency, defaults.last_latency, defaults.samples) == (50.0, 45.0, 0)
        assert defaults.is_mlx_enabled
        assert defaults.is_streaming_enabled

        service.speak("One", KyutaiTTSOptions(low_latency=True))
        service.backend.result = {**service.backend.result, "latency_ms": 80.0}
        service.speak("Two", KyutaiTTSOptions(low_latency=True))

        stats = service.get_latency_stats()
        assert (stats.average_latency, stats.last_latency, stats.samples) == (100.0, 80.0, 2)
        assert stats.to_dict()["voiceModel"] == "kyutai-tts-1b"

    def test_available_voices_come_from_device(self):
        assert make_service().get_available_voices()[0]["identifier"] == "en-US-AriaNeural"
