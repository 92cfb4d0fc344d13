import pytest

from models.chat import ChefAssistantState
from models.chefs import DEFAULT_CHEFS, get_chef
from models.repositories import UserPreferencesRepository
from models.user_preferences import (
    UserPreferencesData,
    pitch_multiplier_to_hz,
    rate_to_slider_value,
    slider_value_to_rate,
    speed_multiplier_to_rate,
)
from models.voice import MAX_DEBUG_LOGS, VoiceChatState, VoiceMessage, voice_style_for


class TestChefAssistantState:
    def test_start_session_posts_welcome(self):
        state = ChefAssistantState()
        state.select_agent("healthy-chef")

        session = state.start_session("Moi Moi", total_steps=5)

        assert state.is_session_active
        assert session.current_step == 1
        assert len(state.messages) == 1
        assert state.messages[0].role == "assistant"
        assert "I'm Chef Kemi" in state.messages[0].content
        assert "Moi Moi" in state.messages[0].content

    def test_advance_step_stops_at_last_step(self):
        state = ChefAssistantState()
        assert state.advance_step() == 0

        state.start_session("Suya", total_steps=2)

        assert state.advance_step() == 2
        assert state.advance_step() == 2

    def test_end_session_clears_state(self):
        state = ChefAssistantState()
        state.start_session("Suya")
        state.is_typing = True

        state.end_session()

        assert not state.is_session_active
        assert state.messages == []
        assert not state.is_typing

    def test_unknown_agent(self):
        with pytest.raises(KeyError):
            ChefAssistantState().select_agent("gordon")

    def test_update_settings(self):
        state = ChefAssistantState()
        state.update_settings(language="yo", voice_enabled=False)
        assert state.language == "yo"
        assert not state.voice_enabled
        with pytest.raises(KeyError):
            state.update_settings(theme="dark")

    def test_history_for_llm(self):
        state = ChefAssistantState()
        state.add_message("user", "Hi")
        state.add_message("assistant", "Hello!", image=b"img")
        assert state.history_for_llm() == [
            {"role": "user", "content": "Hi"},
            {"role": "assistant", "content": "Hello!"},
        ]

    def test_get_chef_falls_back_to_default(self):
        assert get_chef("unknown").id == DEFAULT_CHEFS[0].id
        assert get_chef("international-chef").name == "Chef Marcus"


class TestVoiceChatState:
    def test_leaving_connected_stops_recording(self):
        state = VoiceChatState()
        state.set_status("connected")
        state.is_recording = True
        state.is_listening = True

        state.set_status("error")

        assert not state.is_connected
        assert not state.is_recording
        assert not state.is_listening

    def test_debug_log_is_bounded(self):
        """Only the newest MAX_DEBUG_LOGS entries are kept."""
        state = VoiceChatState()
        for i in range(MAX_DEBUG_LOGS + 5):
            state.add_debug_log("info", f"entry {i}")

        assert len(state.debug_logs) == MAX_DEBUG_LOGS
        assert state.debug_logs[0].message == "entry 5"

    def test_messages(self):
        state = VoiceChatState()
        state.add_message(VoiceMessage(role="user", text="Hello"))
        assert [m.text for m in state.messages] == ["Hello"]
        state.clear_messages()
        assert state.messages == []

    def test_voice_styles(self):
        assert voice_style_for("natural-male-2") == "natural-male"
        assert voice_style_for("natural-child-1") == "expressive"
        assert voice_style_for("nobody") == "natural-female"


class TestPreferences:
    def test_defaults_when_missing(self, db):
        prefs = UserPreferencesRepository(db).get("nobody")
        assert prefs.voice.name == "en-US-AriaNeural"
        assert prefs.assistant.voice_enabled

    def test_update_section_patches_one_group(self, db):
        repo = UserPreferencesRepository(db)
        repo.update_section("user-1", "tts", {"low_latency": True, "voice_style": "calm"})
        repo.update_voice("user-1", "en-GB-SoniaNeural", "+10%")

        prefs = repo.get("user-1")
        assert prefs.tts.low_latency
        assert prefs.tts.voice_style == "calm"
        assert prefs.voice.name == "en-GB-SoniaNeural"
        assert prefs.unmute.voice == "alloy"

    def test_unknown_section(self, db):
        with pytest.raises(KeyError):
            UserPreferencesRepository(db).update_section("user-1", "theme", {})

    def test_delete(self, db):
        repo = UserPreferencesRepository(db)
        repo.save("user-1", UserPreferencesData())
        assert repo.delete("user-1")
        assert not repo.delete("user-1")

    def test_corrupt_json_gives_defaults(self):
        assert UserPreferencesData.from_json("{not json") == UserPreferencesData()

    def test_rate_conversions(self):
        assert slider_value_to_rate(2) == "+20%"
        assert slider_value_to_rate(99) == "+0%"
        assert rate_to_slider_value("-10%") == -1
        assert speed_multiplier_to_rate(1.25) == "+25%"
        assert speed_multiplier_to_rate(0.8) == "-20%"
        assert pitch_multiplier_to_hz(1.2) == "+10Hz"
