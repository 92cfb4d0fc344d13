"""
Messaging Service - direct conversations between users.

A pair of users shares exactly one two-person conversation; asking for
it again returns the existing one. Only participants can read or post.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from models.entities import Conversation, Message
from models.repositories import ConversationRepository, ProfileRepository
from services.errors import AuthorizationError, DatabaseError, NotFoundError, ValidationError
from services.notification_service import NotificationService
from services.profile_service import ProfileSummary

logger = logging.getLogger(__name__)

MESSAGING_OK = "Messaging system is working correctly"
MESSAGING_SETUP_HINT = (
    "Messaging tables are missing or unreachable. "
    "Run the database initialisation (init_db) and try again."
)


@dataclass
class MessageItem:
    id: int
    conversation_id: int
    sender_id: str
    content: str
    is_read: bool
    created_at: datetime
    sender: Optional[ProfileSummary] = None


@dataclass
class ConversationItem:
    id: int
    title: Optional[str]
    created_at: datetime
    updated_at: datetime
    last_message_at: datetime
    participants: list[ProfileSummary] = field(default_factory=list)
    last_message: Optional[MessageItem] = None
    unread_count: int = 0

    def other_participants(self, user_id: str) -> list[ProfileSummary]:
        return [p for p in self.participants if p.id != user_id]


def _message_item(message: Message) -> MessageItem:
    return MessageItem(
        id=message.MessageId,
        conversation_id=message.ConversationId,
        sender_id=message.SenderId,
        content=message.Content,
        is_read=message.IsRead,
        created_at=message.CreatedAt,
        sender=ProfileSummary.from_entity(message.sender) if message.sender else None,
    )


class MessagingService:
    """Service for conversations and messages."""

    def __init__(self, db: Session, notifications: Optional[NotificationService] = None):
        self.db = db
        self.repo = ConversationRepository(db)
        self.profiles = ProfileRepository(db)
        self.notifications = notifications or NotificationService(db)

    def get_or_create_conversation(self, user_id: str, other_user_id: str) -> ConversationItem:
        """
        Get the direct conversation with another user, creating it if needed.

        Raises:
            ValidationError when other_user_id is the caller
            NotFoundError when the other user doesn't exist
        """
        if user_id == other_user_id:
            raise ValidationError("Cannot create conversation with yourself")
        if not self.profiles.get_by_id(other_user_id):
            raise NotFoundError("User not found")

        conversation = self.repo.find_direct(user_id, other_user_id)
        if conversation:
            return self._conversation_item(conversation, user_id)

        try:
            conversation = self.repo.create_direct(user_id, other_user_id)
        except IntegrityError:
            # Lost a race with the same pair
            self.db.rollback()
            return self._conversation_item(self.repo.find_direct(user_id, other_user_id), user_id)
        logger.info(f"Created conversation {conversation.ConversationId} between {user_id} and {other_user_id}")
        return self._conversation_item(conversation, user_id)

    def list_conversations(self, user_id: str) -> list[ConversationItem]:
        """The user's conversations, most recent activity first."""
        return [self._conversation_item(c, user_id) for c in self.repo.list_for_user(user_id)]

    def get_conversation(self, conversation_id: int, user_id: str) -> ConversationItem:
        return self._conversation_item(self._require_participant(conversation_id, user_id), user_id)

    def get_messages(self, conversation_id: int, user_id: str) -> list[MessageItem]:
        self._require_participant(conversation_id, user_id)
        return [_message_item(m) for m in self.repo.list_messages(conversation_id)]

    def send_message(self, conversation_id: int, sender_id: str, content: str) -> MessageItem:
        """
        Post a message.

        Raises:
            ValidationError for missing fields or blank content
            AuthorizationError when the sender isn't a participant
        """
        if not conversation_id or not sender_id or not content or not content.strip():
            raise ValidationError("Missing required fields")
        self._require_participant(conversation_id, sender_id)

        message = self.repo.add_message(conversation_id, sender_id, content.strip())

        sender = self.profiles.get_by_id(sender_id)
        for recipient_id in self.repo.participant_ids(conversation_id):
            if recipient_id != sender_id:
                self.notifications.notify_message(sender, recipient_id, conversation_id, message.Content)

        return _message_item(message)

    def mark_conversation_read(self, conversation_id: int, user_id: str) -> int:
        self._require_participant(conversation_id, user_id)
        return self.repo.mark_read(conversation_id, user_id)

    def check_messaging_status(self) -> tuple[bool, str]:
        """
        Verify the messaging tables are usable.

        Raises:
            DatabaseError with setup guidance when they aren't
        """
        try:
            self.repo.ping()
        except SQLAlchemyError as e:
            logger.error(f"Messaging status check failed: {e}")
            raise DatabaseError(MESSAGING_SETUP_HINT) from e
        return True, MESSAGING_OK

    def _require_participant(self, conversation_id: int, user_id: str) -> Conversation:
        conversation = self.repo.get_by_id(conversation_id)
        if not conversation:
            raise NotFoundError("Conversation not found")
        if not self.repo.is_participant(conversation_id, user_id):
            raise AuthorizationError("You are not part of this conversation")
        return conversation

    def _conversation_item(self, conversation: Conversation, user_id: str) -> ConversationItem:
        last = self.repo.last_message(conversation.ConversationId)
        return ConversationItem(
            id=conversation.ConversationId,
            title=conversation.Title,
            created_at=conversation.CreatedAt,
            updated_at=conversation.UpdatedAt,
            last_message_at=conversation.LastMessageAt,
            participants=[
                ProfileSummary.from_entity(p.profile)
                for p in conversation.participants
                if p.profile is not None
            ],
            last_message=_message_item(last) if last else None,
            unread_count=self.repo.unread_count(conversation.ConversationId, user_id),
        )
