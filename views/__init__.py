"""
Views layer - UI presentation components.
"""

from views.home_view import HomeView
from views.auth_view import AuthView
from views.chef_assistant_view import ChefAssistantView
from views.voice_chat_view import VoiceChatView
from views.community_view import CommunityView
from views.messages_view import MessagesView
from views.notifications_view import NotificationsView
from views.profile_view import ProfileView
from views.tts_demo_view import TTSDemoView

__all__ = [
    "HomeView",
    "AuthView",
    "ChefAssistantView",
    "VoiceChatView",
    "CommunityView",
    "MessagesView",
    "NotificationsView",
    "ProfileView",
    "TTSDemoView",
]
