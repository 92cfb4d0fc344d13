"""
Conversation Repository - Data access for direct messaging.
"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from models.entities import (
    Conversation,
    ConversationParticipant,
    Message,
    direct_key,
    utcnow,
)


class ConversationRepository:
    """Repository for conversations, participants and messages."""

    def __init__(self, db: Session):
        """Initialize with a database session."""
        self.db = db

    # ==========================================
    # Conversations
    # ==========================================

    def get_by_id(self, conversation_id: int) -> Optional[Conversation]:
        return self.db.query(Conversation).options(
            joinedload(Conversation.participants).joinedload(ConversationParticipant.profile)
        ).filter(Conversation.ConversationId == conversation_id).first()

    def find_direct(self, user_id: str, other_user_id: str) -> Optional[Conversation]:
        """Find the two-person conversation between these users, if any."""
        return self.db.query(Conversation).options(
            joinedload(Conversation.participants).joinedload(ConversationParticipant.profile)
        ).filter(Conversation.DirectKey == direct_key(user_id, other_user_id)).first()

    def create_direct(self, user_id: str, other_user_id: str) -> Conversation:
        """
        Create the two-person conversation for a pair.

        Raises:
            IntegrityError if the pair already has one
        """
        return self.create([user_id, other_user_id], direct_key=direct_key(user_id, other_user_id))

    def create(
        self,
        participant_ids: list[str],
        title: Optional[str] = None,
        direct_key: Optional[str] = None,
    ) -> Conversation:
        conversation = Conversation(Title=title, DirectKey=direct_key)
        conversation.participants = [
            ConversationParticipant(UserId=user_id) for user_id in participant_ids
        ]
        self.db.add(conversation)
        self.db.commit()
        return self.get_by_id(conversation.ConversationId)

    def list_for_user(self, user_id: str) -> list[Conversation]:
        """Conversations user_id participates in, most recent activity first."""
        member_of = self.db.query(ConversationParticipant.ConversationId).filter(
            ConversationParticipant.UserId == user_id
        )
        return self.db.query(Conversation).options(
            joinedload(Conversation.participants).joinedload(ConversationParticipant.profile)
        ).filter(
            Conversation.ConversationId.in_(member_of)
        ).order_by(
            Conversation.LastMessageAt.desc(), Conversation.ConversationId.desc()
        ).all()

    def is_participant(self, conversation_id: int, user_id: str) -> bool:
        return self.db.query(ConversationParticipant).filter(
            ConversationParticipant.ConversationId == conversation_id,
            ConversationParticipant.UserId == user_id,
        ).first() is not None

    def participant_ids(self, conversation_id: int) -> list[str]:
        rows = self.db.query(ConversationParticipant.UserId).filter(
            ConversationParticipant.ConversationId == conversation_id
        ).all()
        return [row[0] for row in rows]

    # ==========================================
    # Messages
    # ==========================================

    def list_messages(self, conversation_id: int, limit: Optional[int] = None) -> list[Message]:
        """Messages oldest first."""
        q = self.db.query(Message).options(joinedload(Message.sender)).filter(
            Message.ConversationId == conversation_id
        ).order_by(Message.CreatedAt, Message.MessageId)
        if limit:
            q = q.limit(limit)
        return q.all()

    def last_message(self, conversation_id: int) -> Optional[Message]:
        return self.db.query(Message).options(joinedload(Message.sender)).filter(
            Message.ConversationId == conversation_id
        ).order_by(Message.CreatedAt.desc(), Message.MessageId.desc()).first()

    def add_message(self, conversation_id: int, sender_id: str, content: str) -> Message:
        """Store a message and bump the conversation's activity timestamps."""
        now = utcnow()
        message = Message(
            ConversationId=conversation_id,
            SenderId=sender_id,
            Content=content,
            CreatedAt=now,
        )
        self.db.add(message)
        conversation = self.db.get(Conversation, conversation_id)
        conversation.LastMessageAt = now
        conversation.UpdatedAt = now
        self.db.commit()
        self.db.refresh(message)
        return message

    def unread_count(self, conversation_id: int, user_id: str) -> int:
        return self.db.query(func.count(Message.MessageId)).filter(
            Message.ConversationId == conversation_id,
            Message.SenderId != user_id,
            Message.IsRead.is_(False),
        ).scalar() or 0

    def mark_read(self, conversation_id: int, user_id: str) -> int:
        """Mark messages from other participants as read."""
        updated = self.db.query(Message).filter(
            Message.ConversationId == conversation_id,
            Message.SenderId != user_id,
            Message.IsRead.is_(False),
        ).update({Message.IsRead: True}, synchronize_session=False)
        self.db.commit()
        return updated

    def ping(self) -> None:
        """Touch every messaging table; raises if any is missing."""
        self.db.query(Conversation.ConversationId).limit(1).all()
        self.db.query(ConversationParticipant.ParticipantId).limit(1).all()
        self.db.query(Message.MessageId).limit(1).all()
