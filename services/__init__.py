"""
Services layer - pure business logic, no Streamlit dependencies.
"""

from services.claude_service import ClaudeService
from services.recipe_service import RecipeService
from services.audio_service import AudioService
from services.auth_service import AuthService
from services.profile_service import ProfileService
from services.social_service import SocialService
from services.messaging_service import MessagingService
from services.notification_service import NotificationService
from services.chat_history_service import ChatHistoryService
from services.voice_chat_service import RealtimeVoiceChat
from services.unmute_client import UnmuteClient, UnmuteConfig

__all__ = [
    "ClaudeService",
    "RecipeService",
    "AudioService",
    "AuthService",
    "ProfileService",
    "SocialService",
    "MessagingService",
    "NotificationService",
    "ChatHistoryService",
    "RealtimeVoiceChat",
    "UnmuteClient",
    "UnmuteConfig",
]
