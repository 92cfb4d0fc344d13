"""
Chef Assistant Controller - manages the chef assistant screen.

This controller handles:
- Session state initialization (ChefAssistantState)
- Text, photo and voice messages to the selected chef
- Rate limiting
- Spoken replies through the TTS service
- Saving chats for signed-in users
- Assistant settings (persisted to the database for signed-in users)
"""

import logging
from typing import Optional

import streamlit as st

from config.auth import get_current_user
from config.database import SessionLocal
from controllers.rate_limit import check_rate_limit
from controllers.speech import (
    SPEECH_LOCALES,
    get_tts_service,
    load_preferences,
    save_preferences_section,
    speech_options,
)
from models.chat import AssistantMessage, ChefAssistantState, CookingSession
from models.chefs import ChefAgent
from models.user_preferences import UserPreferencesData, rate_to_slider_value, slider_value_to_rate
from services.audio_service import AudioService
from services.chat_history_service import ChatHistoryService, SavedChat
from services.claude_service import ClaudeService
from services.errors import AppError, log_error
from services.tts import PlaybackItem

logger = logging.getLogger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests. Please wait a moment."
REPLY_FAILED_MESSAGE = (
    "I'm having trouble responding right now. Please check your internet connection and try again."
)
IMAGE_FAILED_MESSAGE = (
    "I'm having trouble analyzing the image right now. "
    "Could you describe what you're cooking or ask me a specific question?"
)
VOICE_FAILED_MESSAGE = "I couldn't process your voice message. Please try typing your question instead."


class ChefAssistantController:
    """Controller for the chef assistant."""

    def __init__(self, claude: Optional[ClaudeService] = None, audio: Optional[AudioService] = None):
        self.claude = claude or ClaudeService()
        self.audio = audio or AudioService()
        self._init_session_state()
        self._load_user_preferences()

    def _init_session_state(self):
        """Initialize session state if not already set."""
        if "chef_assistant" not in st.session_state:
            st.session_state.chef_assistant = {
                "state": ChefAssistantState(),
                "preferences": UserPreferencesData(),
                "chat_id": None,
                "pending_audio": [],
                "audio_key": 0,
                "preferences_loaded": False,
            }

    def _load_user_preferences(self):
        """Load assistant settings from the database once per session."""
        session = st.session_state.chef_assistant
        if session["preferences_loaded"]:
            return

        prefs = load_preferences(get_current_user())
        state = session["state"]
        session["preferences"] = prefs
        state.update_settings(
            language=prefs.assistant.language,
            voice_enabled=prefs.assistant.voice_enabled,
            camera_analysis_enabled=prefs.assistant.camera_analysis_enabled,
        )
        if prefs.assistant.selected_chef_id:
            try:
                state.select_agent(prefs.assistant.selected_chef_id)
            except KeyError:
                logger.warning(f"Saved chef {prefs.assistant.selected_chef_id} no longer exists")
        session["preferences_loaded"] = True

    @property
    def state(self) -> ChefAssistantState:
        return st.session_state.chef_assistant["state"]

    # Session state accessors
    def get_messages(self) -> list[AssistantMessage]:
        return self.state.messages

    def get_session(self) -> Optional[CookingSession]:
        return self.state.current_session

    def is_session_active(self) -> bool:
        return self.state.is_session_active

    def get_agents(self) -> list[ChefAgent]:
        return self.state.available_agents

    def get_selected_agent(self) -> ChefAgent:
        return self.state.selected_agent

    def get_chat_id(self) -> Optional[str]:
        return st.session_state.chef_assistant["chat_id"]

    def get_pending_audio(self) -> list[PlaybackItem]:
        """Get queued reply audio for playback and clear it."""
        pending = st.session_state.chef_assistant["pending_audio"]
        st.session_state.chef_assistant["pending_audio"] = []
        return pending

    def get_audio_key(self) -> int:
        """Get current audio input key for widget uniqueness."""
        return st.session_state.chef_assistant["audio_key"]

    def increment_audio_key(self):
        """Increment audio key to reset widget."""
        st.session_state.chef_assistant["audio_key"] += 1

    # Cooking session
    def start_session(self, recipe_name: str, total_steps: int = 10) -> CookingSession:
        recipe_name = recipe_name.strip() or "something delicious"
        session = self.state.start_session(recipe_name, total_steps)
        st.session_state.chef_assistant["chat_id"] = None
        logger.info(f"Started cooking session for {recipe_name!r}")
        return session

    def end_session(self):
        self.state.end_session()
        st.session_state.chef_assistant["chat_id"] = None
        get_tts_service().stop()

    def advance_step(self) -> int:
        return self.state.advance_step()

    def new_chat(self):
        self.state.clear_messages()
        st.session_state.chef_assistant["chat_id"] = None

    # Settings
    def select_agent(self, agent_id: str) -> ChefAgent:
        agent = self.state.select_agent(agent_id)
        self._save_assistant_preferences()
        chat_id = self.get_chat_id()
        user = get_current_user()
        if chat_id and user:
            db = SessionLocal()
            try:
                ChatHistoryService(db).set_session_chef(chat_id, user.user_id, agent)
            except AppError as e:
                log_error(e, "Update chat chef")
            finally:
                db.close()
        return agent

    def update_settings(self, **settings):
        self.state.update_settings(**settings)
        self._save_assistant_preferences()

    def get_available_voices(self) -> dict[str, str]:
        """Get available voices as {voice_id: display_name}."""
        return self.audio.get_available_voices()

    def get_voice_name(self) -> str:
        return st.session_state.chef_assistant["preferences"].voice.name

    def set_voice_name(self, voice_name: str):
        prefs = st.session_state.chef_assistant["preferences"]
        prefs.voice.name = voice_name
        save_preferences_section(get_current_user(), "voice", prefs.voice)

    def get_speed_slider_value(self) -> int:
        """Get current speed as slider value (-2 to +4)."""
        return rate_to_slider_value(st.session_state.chef_assistant["preferences"].voice.rate)

    def set_speed_from_slider(self, slider_value: int):
        prefs = st.session_state.chef_assistant["preferences"]
        prefs.voice.rate = slider_value_to_rate(slider_value)
        save_preferences_section(get_current_user(), "voice", prefs.voice)

    def _save_assistant_preferences(self):
        state = self.state
        values = {
            "language": state.language,
            "voice_enabled": state.voice_enabled,
            "camera_analysis_enabled": state.camera_analysis_enabled,
            "selected_chef_id": state.selected_agent.id,
        }
        st.session_state.chef_assistant["preferences"].assistant = (
            st.session_state.chef_assistant["preferences"].assistant.model_validate(values)
        )
        save_preferences_section(get_current_user(), "assistant", values)

    # Messaging
    def send_message(
        self,
        content: str,
        image: Optional[bytes] = None,
        media_type: str = "image/jpeg",
        audio: Optional[bytes] = None,
    ) -> tuple[bool, Optional[str]]:
        """
        Send a message (optionally with a photo) to the chef.

        Failures post the chef's fallback reply into the chat.

        Returns (success, error_message)
        """
        if not check_rate_limit():
            return False, RATE_LIMIT_MESSAGE

        content = (content or "").strip()
        if not content and not image:
            return False, "Please type a message."
        if image and not content:
            content = "What do you think of this?"

        state = self.state
        history = state.history_for_llm()
        state.add_message("user", content, image=image, audio=audio)
        self._persist("user", content, "image" if image else "voice" if audio else "text")

        if image:
            return self.analyze_image(image, media_type, prompt=content)

        state.is_typing = True
        try:
            reply = self.claude.chat_chef(content, history, state.selected_agent, state.current_session)
        except Exception as e:
            log_error(e, "Chef reply")
            state.add_message("assistant", REPLY_FAILED_MESSAGE)
            return False, None
        finally:
            state.is_typing = False

        if "next step" in content.lower() and state.is_session_active:
            state.advance_step()

        self._post_reply(reply)
        return True, None

    def analyze_image(
        self,
        image: bytes,
        media_type: str = "image/jpeg",
        prompt: Optional[str] = None,
    ) -> tuple[bool, Optional[str]]:
        """
        Ask the chef to analyse a cooking photo.

        Returns (success, error_message)
        """
        state = self.state
        if not state.camera_analysis_enabled:
            return False, "Camera analysis is turned off in settings."

        state.is_analyzing = True
        try:
            analysis = self.claude.analyze_image(image, state.selected_agent, media_type, prompt=prompt)
        except Exception as e:
            log_error(e, "Image analysis")
            state.add_message("assistant", IMAGE_FAILED_MESSAGE)
            return False, None
        finally:
            state.is_analyzing = False

        state.last_analysis = analysis
        self._post_reply(analysis.guidance, metadata=analysis.model_dump())
        return True, None

    def process_voice_command(self, audio_bytes: bytes) -> tuple[bool, Optional[str]]:
        """
        Transcribe a voice question and send it.

        Returns (success, error_message)
        """
        state = self.state
        state.is_listening = True
        try:
            language = SPEECH_LOCALES.get(state.language, "en-US")
            transcription = self.audio.transcribe(audio_bytes, language=language)
            if not transcription:
                state.add_message("assistant", VOICE_FAILED_MESSAGE)
                return False, None
            return self.send_message(transcription, audio=audio_bytes)
        finally:
            state.is_listening = False

    def _post_reply(self, reply: str, metadata: Optional[dict] = None):
        message = self.state.add_message("assistant", reply, metadata=metadata)
        self._persist("chef", reply, metadata=metadata)

        if not self.state.voice_enabled or not reply.strip():
            return
        prefs = st.session_state.chef_assistant["preferences"]
        tts = get_tts_service()
        result = tts.speak(reply, speech_options(prefs))
        if result.success:
            message.audio = result.audio
            st.session_state.chef_assistant["pending_audio"].extend(tts.player.take_pending())
        else:
            logger.warning(f"Reply was not spoken: {result.error}")

    # Saved chats
    def _persist(self, sender: str, content: str, message_type: str = "text", metadata: Optional[dict] = None):
        """Save a message to the current chat for signed-in users."""
        user = get_current_user()
        if not user:
            return
        db = SessionLocal()
        try:
            history = ChatHistoryService(db)
            chat_id = self.get_chat_id()
            if not chat_id:
                chat_id = history.create_session(user.user_id, self.state.selected_agent).id
                st.session_state.chef_assistant["chat_id"] = chat_id
            history.add_message(chat_id, user.user_id, sender, content, message_type, metadata)
        except AppError as e:
            log_error(e, "Save chat message")
        finally:
            db.close()

    def list_saved_chats(self) -> list[SavedChat]:
        user = get_current_user()
        if not user:
            return []
        db = SessionLocal()
        try:
            return ChatHistoryService(db).list_sessions(user.user_id)
        finally:
            db.close()

    def load_saved_chat(self, chat_id: str) -> tuple[bool, Optional[str]]:
        user = get_current_user()
        if not user:
            return False, "Please sign in to see saved chats."
        db = SessionLocal()
        try:
            chat = ChatHistoryService(db).load_session(chat_id, user.user_id)
        except AppError as e:
            return False, log_error(e, "Load chat").user_message
        finally:
            db.close()

        state = self.state
        state.clear_messages()
        try:
            state.select_agent(chat.chef.id)
        except KeyError:
            logger.warning(f"Chat {chat_id} uses unknown chef {chat.chef.id}")
        for saved in chat.messages:
            state.add_message("user" if saved.sender == "user" else "assistant", saved.content, metadata=saved.metadata)
        st.session_state.chef_assistant["chat_id"] = chat.id
        return True, None

    def rename_saved_chat(self, chat_id: str, title: str) -> tuple[bool, Optional[str]]:
        user = get_current_user()
        if not user:
            return False, "Please sign in to manage saved chats."
        db = SessionLocal()
        try:
            ChatHistoryService(db).rename_session(chat_id, user.user_id, title)
            return True, None
        except AppError as e:
            return False, log_error(e, "Rename chat").user_message
        finally:
            db.close()

    def delete_saved_chat(self, chat_id: str) -> tuple[bool, Optional[str]]:
        user = get_current_user()
        if not user:
            return False, "Please sign in to manage saved chats."
        db = SessionLocal()
        try:
            ChatHistoryService(db).delete_session(chat_id, user.user_id)
        except AppError as e:
            return False, log_error(e, "Delete chat").user_message
        finally:
            db.close()
        if self.get_chat_id() == chat_id:
            self.new_chat()
        return True, None
