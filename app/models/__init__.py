"""
Models Package - API request/response schemas.

Database entities live in the top-level models package and are shared
with the Streamlit app.
"""

from app.models.schemas import (
    SignUpRequest,
    SignInRequest,
    ResetPasswordRequest,
    ConfirmResetRequest,
    TokenResponse,
    ResetPasswordResponse,
    ProfileResponse,
    CreateConversationRequest,
    SendMessageRequest,
    MessageResponse,
    ConversationResponse,
    MessagingStatusResponse,
    FollowResponse,
    NotificationResponse,
    MarkAllReadResponse,
    KyutaiTTSRequest,
    KyutaiTTSResponse,
    KyutaiHealthResponse,
    HiResponse,
)

__all__ = [
    # Auth
    "SignUpRequest",
    "SignInRequest",
    "ResetPasswordRequest",
    "ConfirmResetRequest",
    "TokenResponse",
    "ResetPasswordResponse",
    # Profiles
    "ProfileResponse",
    # Messaging
    "CreateConversationRequest",
    "SendMessageRequest",
    "MessageResponse",
    "ConversationResponse",
    "MessagingStatusResponse",
    # Social
    "FollowResponse",
    "NotificationResponse",
    "MarkAllReadResponse",
    # Kyutai
    "KyutaiTTSRequest",
    "KyutaiTTSResponse",
    "KyutaiHealthResponse",
    "HiResponse",
]
