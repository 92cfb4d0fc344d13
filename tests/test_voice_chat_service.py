import pytest

from services.tts import SpeechResult, Strategy
from services.voice_chat_service import RealtimeVoiceChat


class FakeTTS:
    def __init__(self, available=True, result=None, error=None):
        self.available = available
        self.error = error
        self.result = result or SpeechResult(success=True, strategy=Strategy.KYUTAI_STREAM, audio=b"wav", chunks=2)
        self.spoken = []
        self.stopped = False

    def check_kyutai_availability(self):
        if self.error:
            raise self.error
        return self.available

    def speak(self, text, options):
        self.spoken.append((text, options))
        return self.result

    def stop(self):
        self.stopped = True


class FakeLLM:
    def __init__(self, reply="Add a pinch of salt."):
        self.reply = reply
        self.calls = []

    def voice_reply(self, message, history, instructions=None):
        self.calls.append((message, list(history), instructions))
        return self.reply


class FakeAudio:
    def __init__(self, transcription="How long do I boil yam?"):
        self.transcription = transcription
        self.calls = []

    def transcribe(self, audio_bytes, language="en-US"):
        self.calls.append((audio_bytes, language))
        return self.transcription


class Harness:
    def __init__(self, tts=None, llm=None, audio=None, **kwargs):
        self.messages = []
        self.statuses = []
        self.logs = []
        self.tts = tts or FakeTTS()
        self.llm = llm or FakeLLM()
        self.audio = audio or FakeAudio()
        self.chat = RealtimeVoiceChat(
            on_message=self.messages.append,
            on_status_change=self.statuses.append,
            on_debug_log=lambda level, message, data=None: self.logs.append((level, message)),
            tts=self.tts,
            llm=self.llm,
            audio=self.audio,
            **kwargs,
        )


class TestConnection:
    def test_connect_with_kyutai(self):
        harness = Harness()
        harness.chat.connect()
        assert harness.chat.is_connected
        assert harness.statuses == ["connecting", "connected"]
        assert ("success", "Kyutai TTS server available") in harness.logs

    def test_connect_without_kyutai_still_connects(self):
        harness = Harness(tts=FakeTTS(available=False))
        harness.chat.connect()
        assert harness.chat.is_connected
        assert ("warn", "Kyutai TTS unavailable, using device speech") in harness.logs

    def test_connect_failure_sets_error(self):
        harness = Harness(tts=FakeTTS(error=RuntimeError("boom")))
        with pytest.raises(RuntimeError):
            harness.chat.connect()
        assert harness.statuses[-1] == "error"

    def test_disconnect_stops_speech(self):
        harness = Harness()
        harness.chat.connect()
        harness.chat.start_recording()

        harness.chat.disconnect()

        assert harness.tts.stopped
        assert not harness.chat.is_recording
        assert harness.statuses[-1] == "disconnected"


class TestConversation:
    def test_text_message_gets_spoken_reply(self):
        harness = Harness(voice="natural-male-1", language="fr-FR")
        harness.chat.connect()

        reply = harness.chat.send_text_message("  Hello chef  ")

        assert [(m.role, m.text) for m in harness.messages] == [
            ("user", "Hello chef"),
            ("assistant", "Add a pinch of salt."),
        ]
        assert reply.audio == b"wav"
        text, options = harness.tts.spoken[0]
        assert text == "Add a pinch of salt."
        assert options.voice_style == "natural-male"
        assert options.language == "fr-FR"
        assert options.real_time and options.low_latency

    def test_history_accumulates(self):
        harness = Harness()
        harness.chat.connect()
        harness.chat.send_text_message("First")
        harness.chat.send_text_message("Second")

        _, history, _ = harness.llm.calls[1]
        assert history == [
            {"role": "user", "content": "First"},
            {"role": "assistant", "content": "Add a pinch of salt."},
        ]

    def test_auto_play_off_skips_speech(self):
        harness = Harness(auto_play=False)
        harness.chat.connect()

        reply = harness.chat.send_text_message("Hello")

        assert reply.audio is None
        assert harness.tts.spoken == []

    def test_failed_speech_still_returns_text(self):
        failed = SpeechResult(success=False, strategy=Strategy.WEB_SPEECH, error="no audio")
        harness = Harness(tts=FakeTTS(result=failed))
        harness.chat.connect()

        reply = harness.chat.send_text_message("Hello")

        assert reply.text == "Add a pinch of salt."
        assert reply.audio is None
        assert ("error", "Failed to speak reply") in harness.logs

    def test_not_connected(self):
        harness = Harness()
        assert harness.chat.send_text_message("Hello") is None
        assert not harness.chat.start_recording()
        assert harness.messages == []


class TestRecording:
    def test_recording_is_transcribed_and_answered(self):
        harness = Harness(language="en-GB")
        harness.chat.connect()
        harness.chat.start_recording()

        reply = harness.chat.stop_recording(b"wav-bytes")

        assert harness.audio.calls == [(b"wav-bytes", "en-GB")]
        assert harness.messages[0].text == "How long do I boil yam?"
        assert reply.role == "assistant"

    def test_silence_produces_no_reply(self):
        harness = Harness(audio=FakeAudio(transcription=None))
        harness.chat.connect()
        harness.chat.start_recording()

        assert harness.chat.stop_recording(b"wav-bytes") is None
        assert harness.llm.calls == []
        assert ("warn", "No speech detected in recording") in harness.logs

    def test_stop_without_start(self):
        harness = Harness()
        harness.chat.connect()
        assert harness.chat.stop_recording(b"wav-bytes") is None
