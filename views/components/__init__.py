"""
Reusable UI components.
"""

from views.components.chat import render_chat_messages, render_transcript
from views.components.audio import render_mic_button, render_audio_playback
from views.components.voice_panel import render_voice_panel
from views.components.cards import render_recipe_card, render_profile_card

# Sidebar components
from views.components.sidebar import render_chef_assistant_sidebar

__all__ = [
    # Chat & Audio
    "render_chat_messages",
    "render_transcript",
    "render_mic_button",
    "render_audio_playback",
    "render_voice_panel",
    # Cards
    "render_recipe_card",
    "render_profile_card",
    # Sidebar
    "render_chef_assistant_sidebar",
]
