"""
Repositories - Data access layer for database operations.
"""

from models.repositories.profile_repository import ProfileRepository
from models.repositories.follower_repository import FollowerRepository
from models.repositories.conversation_repository import ConversationRepository
from models.repositories.notification_repository import NotificationRepository
from models.repositories.recipe_repository import RecipeRepository
from models.repositories.chat_session_repository import ChatSessionRepository
from models.repositories.user_preferences_repository import UserPreferencesRepository

__all__ = [
    "ProfileRepository",
    "FollowerRepository",
    "ConversationRepository",
    "NotificationRepository",
    "RecipeRepository",
    "ChatSessionRepository",
    "UserPreferencesRepository",
]
