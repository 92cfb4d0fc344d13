"""
Chat UI components.
"""

import streamlit as st

from models.chat import AssistantMessage
from models.chefs import ChefAgent


def render_chat_messages(messages: list[AssistantMessage], chef: ChefAgent, height: int = 450):
    """
    Render chef assistant chat history in a scrollable container.

    Args:
        messages: Messages from ChefAssistantState
        chef: Chef shown as the assistant avatar
        height: Container height in pixels
    """
    st.markdown("### Conversation")
    chat_container = st.container(height=height)
    with chat_container:
        if not messages:
            st.caption(f"Say hello to {chef.name} to get started.")
        for msg in messages:
            avatar = chef.avatar if msg.role == "assistant" else None
            with st.chat_message(msg.role, avatar=avatar):
                if msg.image:
                    st.image(msg.image, width=240)
                st.write(msg.content)
                if msg.audio and msg.role == "user":
                    st.caption("🎤 Voice message")
                st.caption(msg.timestamp.strftime("%H:%M"))


def render_transcript(messages: list, height: int = 400):
    """
    Render a voice conversation transcript.

    Args:
        messages: VoiceMessage list
        height: Container height in pixels
    """
    container = st.container(height=height)
    with container:
        if not messages:
            st.caption("No messages yet. Connect and start talking.")
        for msg in messages:
            with st.chat_message(msg.role):
                st.write(msg.text)
                st.caption(msg.timestamp.strftime("%H:%M:%S"))
