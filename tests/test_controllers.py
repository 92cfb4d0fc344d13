import pytest
import streamlit as st

from controllers.chef_assistant_controller import (
    IMAGE_FAILED_MESSAGE,
    REPLY_FAILED_MESSAGE,
    VOICE_FAILED_MESSAGE,
    ChefAssistantController,
)
from controllers.voice_chat_controller import VoiceChatController
from models.chat import ImageAnalysis
from services.tts import AudioPlayer, TTSService


class SessionState(dict):
    """Attribute and item access, like st.session_state."""

    def __getattr__(self, key):
        try:
            return self[key]
        except KeyError as e:
            raise AttributeError(key) from e

    def __setattr__(self, key, value):
        self[key] = value


class FakeDevice:
    is_speaking = False

    def __init__(self):
        self.spoken = []

    def synthesize(self, text, voice, rate, pitch, language):
        self.spoken.append(text)
        return b"mp3-audio", voice

    def stop(self):
        pass


class FakeClaude:
    def __init__(self, reply="Stir gently.", error=None, analysis=None):
        self.reply = reply
        self.error = error
        self.analysis = analysis or ImageAnalysis(guidance="Your onions look perfect.")
        self.calls = []

    def chat_chef(self, message, history, chef, session=None):
        self.calls.append(message)
        if self.error:
            raise self.error
        return self.reply

    def analyze_image(self, image, chef, media_type="image/jpeg", prompt=None):
        self.calls.append(prompt)
        if self.error:
            raise self.error
        return self.analysis


class FakeAudio:
    def __init__(self, transcription="What goes in next?"):
        self.transcription = transcription
        self.languages = []

    def transcribe(self, audio_bytes, language="en-US"):
        self.languages.append(language)
        return self.transcription

    @staticmethod
    def get_available_voices():
        return {}


@pytest.fixture
def session_state(monkeypatch):
    state = SessionState()
    monkeypatch.setattr(st, "session_state", state)
    monkeypatch.delenv("DEV_USER_ID", raising=False)
    return state


@pytest.fixture
def device(session_state):
    device = FakeDevice()
    session_state.tts_service = TTSService(
        platform="android",
        kyutai=object(),
        device=device,
        player=AudioPlayer(),
        backend=object(),
        check_availability=False,
    )
    return device


def make_chef_controller(claude=None, audio=None):
    return ChefAssistantController(claude=claude or FakeClaude(), audio=audio or FakeAudio())


class TestChefAssistantMessages:
    def test_next_step_advances_active_session(self, device):
        controller = make_chef_controller()
        controller.start_session("Jollof Rice", total_steps=5)

        assert controller.send_message("Ready for the NEXT STEP") == (True, None)

        assert controller.get_session().current_step == 2
        assert controller.get_messages()[-1].content == "Stir gently."

    def test_next_step_without_session_changes_nothing(self, device):
        controller = make_chef_controller()

        assert controller.send_message("next step please") == (True, None)

        assert controller.get_session() is None

    def test_reply_failure_posts_fallback(self, device):
        controller = make_chef_controller(claude=FakeClaude(error=RuntimeError("overloaded")))
        controller.start_session("Egusi", total_steps=5)

        assert controller.send_message("next step") == (False, None)

        assert controller.get_messages()[-1].content == REPLY_FAILED_MESSAGE
        assert controller.get_session().current_step == 1
        assert not controller.state.is_typing

    def test_image_failure_posts_fallback(self, device):
        claude = FakeClaude(error=RuntimeError("bad image"))
        controller = make_chef_controller(claude=claude)

        assert controller.send_message("", image=b"jpeg-bytes") == (False, None)

        user, reply = controller.get_messages()
        assert user.content == "What do you think of this?"
        assert user.image == b"jpeg-bytes"
        assert reply.content == IMAGE_FAILED_MESSAGE
        assert not controller.state.is_analyzing

    def test_image_analysis_becomes_reply(self, device):
        controller = make_chef_controller()

        assert controller.send_message("Are these done?", image=b"jpeg-bytes") == (True, None)

        assert controller.get_messages()[-1].content == "Your onions look perfect."
        assert controller.state.last_analysis.guidance == "Your onions look perfect."

    def test_empty_message_rejected(self, device):
        controller = make_chef_controller()
        assert controller.send_message("   ") == (False, "Please type a message.")
        assert controller.get_messages() == []


class TestChefAssistantVoice:
    def test_empty_transcription_posts_fallback(self, device):
        claude = FakeClaude()
        controller = make_chef_controller(claude=claude, audio=FakeAudio(transcription=None))

        assert controller.process_voice_command(b"wav") == (False, None)

        assert [m.content for m in controller.get_messages()] == [VOICE_FAILED_MESSAGE]
        assert claude.calls == []
        assert not controller.state.is_listening

    def test_transcription_uses_assistant_language(self, device):
        audio = FakeAudio()
        controller = make_chef_controller(audio=audio)
        controller.state.update_settings(language="yo")

        assert controller.process_voice_command(b"wav") == (True, None)

        assert audio.languages == ["yo-NG"]
        assert controller.get_messages()[0].content == "What goes in next?"
        assert controller.get_messages()[0].audio == b"wav"

    def test_reply_audio_is_queued_when_voice_enabled(self, device):
        controller = make_chef_controller()

        controller.send_message("Hello chef")

        pending = controller.get_pending_audio()
        assert [(p.audio, p.mime_type) for p in pending] == [(b"mp3-audio", "audio/mpeg")]
        assert controller.get_messages()[-1].audio == b"mp3-audio"
        assert device.spoken == ["Stir gently."]
        assert controller.get_pending_audio() == []

    def test_no_audio_when_voice_disabled(self, device):
        controller = make_chef_controller()
        controller.state.update_settings(voice_enabled=False)

        controller.send_message("Hello chef")

        assert controller.get_pending_audio() == []
        assert device.spoken == []


class FakePipeline:
    def __init__(self, controller, error=None):
        self.controller = controller
        self.error = error
        self.connects = 0

    def connect(self):
        self.connects += 1
        if self.error:
            raise self.error
        self.controller._on_status_change("connecting")
        self.controller._on_status_change("connected")

    def disconnect(self):
        self.controller._on_status_change("disconnected")


def voice_controller_with(session_state, error=None):
    controller = VoiceChatController()
    pipeline = FakePipeline(controller, error=error)
    session_state.voice_chat["pipeline"] = pipeline
    return controller, pipeline


class TestVoiceChatConnect:
    def test_connect_is_noop_while_connected(self, session_state):
        controller, pipeline = voice_controller_with(session_state)

        assert controller.connect() == (True, None)
        assert controller.connect() == (True, None)

        assert pipeline.connects == 1
        last = controller.state.debug_logs[-1]
        assert (last.level, last.message) == ("warn", "Already connected or connecting")

    def test_connect_is_noop_while_connecting(self, session_state):
        controller, pipeline = voice_controller_with(session_state)
        controller.state.set_status("connecting")

        assert controller.connect() == (True, None)

        assert pipeline.connects == 0

    def test_connect_failure_sets_error(self, session_state):
        controller, pipeline = voice_controller_with(session_state, error=RuntimeError("no route"))

        success, error = controller.connect()

        assert not success
        assert error
        assert controller.state.connection_status == "error"
        assert controller.state.debug_logs[-1].message == "Connection failed"

    def test_reconnect_after_disconnect(self, session_state):
        controller, pipeline = voice_controller_with(session_state)
        controller.connect()

        controller.disconnect()
        assert controller.state.connection_status == "disconnected"

        session_state.voice_chat["pipeline"] = pipeline
        controller.connect()
        assert pipeline.connects == 2
