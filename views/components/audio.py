"""
Audio UI components for voice input/output.
"""

import streamlit as st
from typing import Optional

from services.tts import PlaybackItem


def render_mic_button(audio_key: int, label: str = "🎤 Tap to Talk") -> Optional[bytes]:
    """
    Render a large microphone button for voice input.

    Args:
        audio_key: Unique key for the audio input widget

    Returns:
        Audio bytes if recording captured, None otherwise
    """
    # Custom CSS for large mic button
    st.markdown("""
    <style>
        div[data-testid="stAudioInput"] > button {
            height: 80px !important;
            min-height: 80px !important;
            font-size: 20px !important;
            border-radius: 40px !important;
        }
        div[data-testid="stAudioInput"] {
            display: flex;
            justify-content: center;
        }
    </style>
    """, unsafe_allow_html=True)

    st.markdown(f"**{label}**")
    audio = st.audio_input(
        "Record your message",
        key=f"audio_input_{audio_key}",
        label_visibility="collapsed"
    )

    if audio:
        return audio.read()
    return None


def render_audio_playback(items: list[PlaybackItem], autoplay: bool = True):
    """
    Render queued clips. Only the newest one autoplays.

    Args:
        items: Clips taken from the audio player
    """
    for index, item in enumerate(items):
        is_last = index == len(items) - 1
        st.audio(item.audio, format=item.mime_type, autoplay=autoplay and is_last)
        if item.source:
            st.caption(f"via {item.source}{' (real-time)' if item.realtime else ''}")
