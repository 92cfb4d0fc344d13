"""
Pydantic Schemas (Data Transfer Objects)

These schemas define the structure of data flowing in and out of the API.

Naming Convention:
- *Request: Data received from clients
- *Response: Data returned to clients

Responses are built from the service layer's dataclasses with
`from_attributes`, so the API never touches ORM entities directly.
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


# ============================================
# Auth Schemas
# ============================================

class SignUpRequest(BaseModel):
    email: str = Field(..., max_length=255)
    password: str
    confirm_password: str
    full_name: str = Field("", max_length=100)


class SignInRequest(BaseModel):
    email: str = Field(..., max_length=255)
    password: str


class ResetPasswordRequest(BaseModel):
    email: str = Field(..., max_length=255)


class ConfirmResetRequest(BaseModel):
    token: str
    new_password: str


class TokenResponse(BaseModel):
    """Access token for API clients; send it as `Authorization: Bearer <token>`."""
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: Optional[str]
    name: str


class ResetPasswordResponse(BaseModel):
    """
    The reset token is returned directly because there is no mail
    delivery. It is None when no account uses the email.
    """
    success: bool
    message: str
    reset_token: Optional[str] = None


# ============================================
# Profile Schemas
# ============================================

class ProfileResponse(BaseModel):
    id: str
    username: Optional[str]
    full_name: Optional[str]
    avatar_url: Optional[str]
    bio: Optional[str] = None
    is_following: Optional[bool] = None

    class Config:
        from_attributes = True


# ============================================
# Messaging Schemas
# ============================================

class CreateConversationRequest(BaseModel):
    other_user_id: str

    @field_validator("other_user_id")
    @classmethod
    def must_be_uuid(cls, value: str) -> str:
        try:
            uuid.UUID(value)
        except ValueError as e:
            raise ValueError("other_user_id must be a UUID") from e
        return value


class SendMessageRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)


class MessageResponse(BaseModel):
    id: int
    conversation_id: int
    sender_id: str
    content: str
    is_read: bool
    created_at: datetime
    sender: Optional[ProfileResponse] = None

    class Config:
        from_attributes = True


class ConversationResponse(BaseModel):
    id: int
    title: Optional[str]
    created_at: datetime
    updated_at: datetime
    last_message_at: datetime
    participants: list[ProfileResponse] = []
    last_message: Optional[MessageResponse] = None
    unread_count: int = 0

    class Config:
        from_attributes = True


class MessagingStatusResponse(BaseModel):
    working: bool
    message: str


# ============================================
# Follower Schemas
# ============================================

class FollowResponse(BaseModel):
    following: bool
    followers_count: int


# ============================================
# Notification Schemas
# ============================================

class NotificationResponse(BaseModel):
    id: int
    type: str
    title: str
    message: str
    is_read: bool
    created_at: datetime
    data: Optional[dict[str, Any]] = None
    actor_id: Optional[str] = None
    actor_name: Optional[str] = None
    actor_avatar_url: Optional[str] = None

    class Config:
        from_attributes = True


class MarkAllReadResponse(BaseModel):
    updated: int


# ============================================
# Kyutai TTS Schemas
# ============================================

class KyutaiTTSRequest(BaseModel):
    """
    Batch synthesis request.

    voice_style/model/rate/pitch/streaming/low_latency are optional hints
    forwarded to the Kyutai server as-is.
    """
    text: str = Field(..., min_length=1, max_length=1000)
    voice: str = "natural-female-1"
    language: str = "en-US"
    voice_style: Optional[str] = None
    model: Optional[str] = None
    rate: Optional[float] = Field(None, gt=0)
    pitch: Optional[float] = Field(None, gt=0)
    streaming: Optional[bool] = None
    low_latency: Optional[bool] = None


class KyutaiTTSResponse(BaseModel):
    success: bool
    audio_url: Optional[str] = None
    latency_ms: Optional[float] = None
    voice_used: Optional[str] = None
    message: str


class KyutaiHealthResponse(BaseModel):
    status: str
    timestamp: datetime
    service: str


# ============================================
# Example Schemas
# ============================================

class HiResponse(BaseModel):
    hello: str
    date: datetime
