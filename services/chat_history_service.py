"""
Chat History Service - saved conversations with chef assistants.

A session starts titled "Chat with <chef>" and takes its title from the
first thing the user says (first 50 characters).
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.orm import Session

from models.chefs import ChefAgent, get_chef
from models.entities import ChatMessage, ChatSession
from models.repositories import ChatSessionRepository
from services.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 50
SENDERS = ("user", "chef")
MESSAGE_TYPES = ("text", "image", "voice")


@dataclass
class SavedMessage:
    id: int
    sender: str
    content: str
    type: str
    created_at: datetime
    metadata: Optional[dict[str, Any]] = None


@dataclass
class SavedChat:
    id: str
    title: str
    chef: ChefAgent
    created_at: datetime
    updated_at: datetime
    messages: list[SavedMessage] = field(default_factory=list)


def title_from_message(content: str) -> str:
    content = content.strip()
    if len(content) > TITLE_MAX_LENGTH:
        return content[:TITLE_MAX_LENGTH] + "..."
    return content


def _saved_message(message: ChatMessage) -> SavedMessage:
    return SavedMessage(
        id=message.ChatMessageId,
        sender=message.Sender,
        content=message.Content,
        type=message.MessageType,
        created_at=message.CreatedAt,
        metadata=message.MessageMetadata,
    )


def _saved_chat(session: ChatSession, with_messages: bool = True) -> SavedChat:
    return SavedChat(
        id=session.ChatSessionId,
        title=session.Title,
        chef=get_chef(session.ChefId),
        created_at=session.CreatedAt,
        updated_at=session.UpdatedAt,
        messages=[_saved_message(m) for m in session.messages] if with_messages else [],
    )


class ChatHistoryService:
    """Service for persisted chef chats."""

    def __init__(self, db: Session):
        self.repo = ChatSessionRepository(db)

    def create_session(self, user_id: str, chef: ChefAgent) -> SavedChat:
        session = self.repo.create(user_id, chef.id, f"Chat with {chef.name}")
        logger.info(f"Created chat session {session.ChatSessionId} with {chef.id}")
        return _saved_chat(session)

    def list_sessions(self, user_id: str) -> list[SavedChat]:
        return [_saved_chat(s, with_messages=False) for s in self.repo.list_for_user(user_id)]

    def load_session(self, session_id: str, user_id: str) -> SavedChat:
        return _saved_chat(self._require(session_id, user_id))

    def add_message(
        self,
        session_id: str,
        user_id: str,
        sender: str,
        content: str,
        message_type: str = "text",
        metadata: Optional[dict[str, Any]] = None,
    ) -> SavedMessage:
        if sender not in SENDERS:
            raise ValidationError(f"Unknown sender: {sender}")
        if message_type not in MESSAGE_TYPES:
            raise ValidationError(f"Unknown message type: {message_type}")
        if not content or not content.strip():
            raise ValidationError("Message content is required")

        session = self._require(session_id, user_id)
        is_first_user_message = sender == "user" and self.repo.count_messages(session) == 0

        message = self.repo.add_message(session, sender, content, message_type, metadata)
        if is_first_user_message:
            self.repo.touch(session, Title=title_from_message(content))
        return _saved_message(message)

    def update_message(self, session_id: str, user_id: str, message_id: int, content: str) -> SavedMessage:
        session = self._require(session_id, user_id)
        message = self.repo.get_message(session, message_id)
        if not message:
            raise NotFoundError("Message not found")
        message.Content = content
        self.repo.touch(session)
        return _saved_message(message)

    def delete_message(self, session_id: str, user_id: str, message_id: int) -> None:
        session = self._require(session_id, user_id)
        message = self.repo.get_message(session, message_id)
        if not message:
            raise NotFoundError("Message not found")
        self.repo.delete_message(message)
        self.repo.touch(session)

    def delete_session(self, session_id: str, user_id: str) -> None:
        self.repo.delete(self._require(session_id, user_id))
        logger.info(f"Deleted chat session {session_id}")

    def rename_session(self, session_id: str, user_id: str, title: str) -> SavedChat:
        title = (title or "").strip()
        if not title:
            raise ValidationError("Title is required")
        return _saved_chat(self.repo.touch(self._require(session_id, user_id), Title=title))

    def set_session_chef(self, session_id: str, user_id: str, chef: ChefAgent) -> SavedChat:
        return _saved_chat(self.repo.touch(self._require(session_id, user_id), ChefId=chef.id))

    def _require(self, session_id: str, user_id: str) -> ChatSession:
        session = self.repo.get(session_id, user_id)
        if not session:
            raise NotFoundError("Chat not found")
        return session
