"""
Controllers layer - orchestration and session state management.
"""

from controllers.auth_controller import AuthController
from controllers.chef_assistant_controller import ChefAssistantController
from controllers.community_controller import CommunityController
from controllers.messaging_controller import MessagingController
from controllers.notifications_controller import NotificationsController
from controllers.profile_controller import ProfileController
from controllers.tts_demo_controller import TTSDemoController
from controllers.voice_chat_controller import VoiceChatController

__all__ = [
    "AuthController",
    "ChefAssistantController",
    "CommunityController",
    "MessagingController",
    "NotificationsController",
    "ProfileController",
    "TTSDemoController",
    "VoiceChatController",
]
