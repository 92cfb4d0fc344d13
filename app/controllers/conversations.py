"""
Conversations Controller

Direct messaging for API clients. Every route requires a bearer token.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.dependencies import get_current_user, http_error
from app.models import (
    ConversationResponse,
    CreateConversationRequest,
    MessageResponse,
    MessagingStatusResponse,
    SendMessageRequest,
)
from config.auth import UserContext
from config.database import get_db
from services.errors import AppError
from services.messaging_service import MessagingService

router = APIRouter(prefix="/conversations", tags=["conversations"])


@router.get("", response_model=list[ConversationResponse])
def get_conversations(user: UserContext = Depends(get_current_user), db: Session = Depends(get_db)):
    """The caller's conversations, most recent activity first."""
    return MessagingService(db).list_conversations(user.user_id)


@router.post("", response_model=ConversationResponse)
def create_conversation(
    body: CreateConversationRequest,
    user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Get or create the direct conversation with another user.

    - 400 when other_user_id is the caller
    - 404 when the other user doesn't exist
    """
    try:
        return MessagingService(db).get_or_create_conversation(user.user_id, body.other_user_id)
    except AppError as e:
        raise http_error(e, "API create conversation")


@router.get("/status", response_model=MessagingStatusResponse)
def check_messaging_status(user: UserContext = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        working, message = MessagingService(db).check_messaging_status()
    except AppError as e:
        raise http_error(e, "API messaging status")
    return MessagingStatusResponse(working=working, message=message)


@router.get("/{conversation_id}/messages", response_model=list[MessageResponse])
def get_messages(
    conversation_id: int,
    user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Messages oldest first. Reading them marks them as read."""
    service = MessagingService(db)
    try:
        messages = service.get_messages(conversation_id, user.user_id)
        service.mark_conversation_read(conversation_id, user.user_id)
    except AppError as e:
        raise http_error(e, "API get messages")
    return messages


@router.post("/{conversation_id}/messages", response_model=MessageResponse, status_code=201)
def send_message(
    conversation_id: int,
    body: SendMessageRequest,
    user: UserContext = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return MessagingService(db).send_message(conversation_id, user.user_id, body.content)
    except AppError as e:
        raise http_error(e, "API send message")
