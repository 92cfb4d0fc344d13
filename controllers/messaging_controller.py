"""
Messaging Controller - conversation list, conversation view and composer.
"""

import logging
from typing import Optional

import streamlit as st

from config.auth import get_current_user
from config.database import SessionLocal
from services.errors import AppError, log_error
from services.messaging_service import ConversationItem, MessageItem, MessagingService

logger = logging.getLogger(__name__)


class MessagingController:
    """Controller for direct messages."""

    def __init__(self):
        self.user = get_current_user()
        if "messaging" not in st.session_state:
            st.session_state.messaging = {
                "open_conversation_id": None,
                "composer_key": 0,
            }

    def get_open_conversation_id(self) -> Optional[int]:
        return st.session_state.messaging["open_conversation_id"]

    def open_conversation(self, conversation_id: Optional[int]):
        st.session_state.messaging["open_conversation_id"] = conversation_id

    def get_composer_key(self) -> int:
        return st.session_state.messaging["composer_key"]

    def check_status(self) -> tuple[bool, str]:
        """Returns (working, message) for the messaging status banner."""
        db = SessionLocal()
        try:
            return MessagingService(db).check_messaging_status()
        except AppError as e:
            return False, log_error(e, "Messaging status").user_message
        finally:
            db.close()

    def get_conversations(self) -> list[ConversationItem]:
        db = SessionLocal()
        try:
            return MessagingService(db).list_conversations(self.user.user_id)
        finally:
            db.close()

    def get_conversation(self, conversation_id: int) -> Optional[ConversationItem]:
        db = SessionLocal()
        try:
            return MessagingService(db).get_conversation(conversation_id, self.user.user_id)
        except AppError as e:
            log_error(e, "Load conversation")
            return None
        finally:
            db.close()

    def start_conversation(self, other_user_id: str) -> tuple[bool, Optional[str]]:
        """
        Open (or create) the conversation with another user.

        Returns (success, error_message)
        """
        db = SessionLocal()
        try:
            conversation = MessagingService(db).get_or_create_conversation(self.user.user_id, other_user_id)
        except AppError as e:
            return False, log_error(e, "Start conversation").user_message
        finally:
            db.close()
        self.open_conversation(conversation.id)
        return True, None

    def get_messages(self, conversation_id: int, mark_read: bool = True) -> list[MessageItem]:
        db = SessionLocal()
        try:
            service = MessagingService(db)
            messages = service.get_messages(conversation_id, self.user.user_id)
            if mark_read:
                service.mark_conversation_read(conversation_id, self.user.user_id)
            return messages
        except AppError as e:
            log_error(e, "Load messages")
            return []
        finally:
            db.close()

    def send_message(self, conversation_id: int, content: str) -> tuple[bool, Optional[str]]:
        """
        Post a message to the open conversation.

        Returns (success, error_message)
        """
        db = SessionLocal()
        try:
            MessagingService(db).send_message(conversation_id, self.user.user_id, content)
        except AppError as e:
            return False, log_error(e, "Send message").user_message
        finally:
            db.close()
        st.session_state.messaging["composer_key"] += 1
        return True, None
