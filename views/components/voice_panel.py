"""
Voice Panel Component - voice controls for the chef assistant.

Provides:
- Push to talk microphone button
- Playback of the chef's spoken replies
- Voice selector (edge-tts neural voices used for device speech)
- Speed slider
"""

import streamlit as st
from typing import Optional, Callable

from services.tts import PlaybackItem
from views.components.audio import render_audio_playback


# Speed labels for the slider
SPEED_LABELS = {
    -2: "Slower",
    -1: "Slow",
    0: "Normal",
    1: "Fast",
    2: "Faster",
    3: "Quick",
    4: "Rapid",
}


def render_voice_panel(
    audio_key: int,
    pending_audio: list[PlaybackItem],
    voices: dict[str, str],
    current_voice: str,
    current_speed: int,
    on_voice_change: Callable[[str], None],
    on_speed_change: Callable[[int], None],
) -> Optional[bytes]:
    """
    Render the voice control panel.

    Args:
        audio_key: Unique key for the audio input widget
        pending_audio: Reply clips to play
        voices: Dict of {voice_id: display_name}
        current_voice: Currently selected voice ID
        current_speed: Current speed slider value (-2 to +4)
        on_voice_change: Callback when voice changes (receives voice_id)
        on_speed_change: Callback when speed changes (receives slider value)

    Returns:
        Audio bytes if recording captured, None otherwise
    """
    st.markdown("**Ask with your voice**")
    audio = st.audio_input(
        "Record your question",
        key=f"assistant_audio_{audio_key}",
        label_visibility="collapsed"
    )
    recorded_bytes = audio.read() if audio else None

    if pending_audio:
        st.markdown("**Chef's reply**")
        render_audio_playback(pending_audio)

    st.markdown("---")

    st.markdown("**Voice**")
    voice_ids = list(voices.keys())
    current_idx = voice_ids.index(current_voice) if current_voice in voice_ids else 0
    selected_voice_id = st.selectbox(
        "Select voice:",
        options=voice_ids,
        index=current_idx,
        format_func=lambda v: voices[v],
        label_visibility="collapsed",
        key="voice_panel_voice"
    )
    if selected_voice_id != current_voice:
        on_voice_change(selected_voice_id)

    st.markdown("**Speed**")
    selected_speed = st.slider(
        "Playback speed",
        min_value=-2,
        max_value=4,
        value=current_speed,
        step=1,
        label_visibility="collapsed",
        key="voice_panel_speed",
    )
    st.caption(f"Speed: {SPEED_LABELS.get(selected_speed, 'Normal')}")
    if selected_speed != current_speed:
        on_speed_change(selected_speed)

    return recorded_bytes
