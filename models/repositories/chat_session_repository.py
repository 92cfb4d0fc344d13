"""
Chat Session Repository - Data access for saved chef assistant chats.
"""

from typing import Optional

from sqlalchemy.orm import Session, selectinload

from models.entities import ChatSession, ChatMessage, utcnow


class ChatSessionRepository:
    """Repository for chat sessions and their messages."""

    def __init__(self, db: Session):
        """Initialize with a database session."""
        self.db = db

    def create(self, user_id: str, chef_id: str, title: str) -> ChatSession:
        session = ChatSession(UserId=user_id, ChefId=chef_id, Title=title)
        self.db.add(session)
        self.db.commit()
        self.db.refresh(session)
        return session

    def get(self, session_id: str, user_id: str) -> Optional[ChatSession]:
        """Get a session owned by user_id, with messages loaded."""
        return self.db.query(ChatSession).options(
            selectinload(ChatSession.messages)
        ).filter(
            ChatSession.ChatSessionId == session_id,
            ChatSession.UserId == user_id,
        ).first()

    def list_for_user(self, user_id: str) -> list[ChatSession]:
        return self.db.query(ChatSession).filter(
            ChatSession.UserId == user_id
        ).order_by(ChatSession.UpdatedAt.desc()).all()

    def touch(self, session: ChatSession, **fields) -> ChatSession:
        for key, value in fields.items():
            setattr(session, key, value)
        session.UpdatedAt = utcnow()
        self.db.commit()
        self.db.refresh(session)
        return session

    def delete(self, session: ChatSession) -> None:
        self.db.delete(session)
        self.db.commit()

    def add_message(
        self,
        session: ChatSession,
        sender: str,
        content: str,
        message_type: str = "text",
        metadata: Optional[dict] = None,
    ) -> ChatMessage:
        message = ChatMessage(
            ChatSessionId=session.ChatSessionId,
            Sender=sender,
            Content=content,
            MessageType=message_type,
            MessageMetadata=metadata,
        )
        self.db.add(message)
        session.UpdatedAt = utcnow()
        self.db.commit()
        self.db.refresh(message)
        return message

    def get_message(self, session: ChatSession, message_id: int) -> Optional[ChatMessage]:
        return self.db.query(ChatMessage).filter(
            ChatMessage.ChatSessionId == session.ChatSessionId,
            ChatMessage.ChatMessageId == message_id,
        ).first()

    def count_messages(self, session: ChatSession) -> int:
        return self.db.query(ChatMessage).filter(
            ChatMessage.ChatSessionId == session.ChatSessionId
        ).count()

    def delete_message(self, message: ChatMessage) -> None:
        self.db.delete(message)
        self.db.commit()
