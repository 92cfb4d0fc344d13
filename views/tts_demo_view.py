"""
TTS Demo View - try Kyutai and device speech side by side.
"""

import streamlit as st

from controllers.tts_demo_controller import TTSDemoController
from models.user_preferences import KYUTAI_MODELS, KYUTAI_VOICE_STYLES
from views.components.audio import render_audio_playback


class TTSDemoView:
    """View for the text-to-speech demo."""

    def __init__(self):
        self.controller = TTSDemoController()

    def render(self):
        st.title("🔊 TTS Demo")

        available = self.controller.is_kyutai_available()
        col1, col2, col3 = st.columns([2, 2, 1])
        col1.markdown(f"**Platform:** {self.controller.get_platform()}")
        col2.markdown(f"**Kyutai server:** {'🟢 available' if available else '🔴 unavailable, using device voice'}")
        with col3:
            if st.button("Recheck", use_container_width=True):
                self.controller.refresh_availability()
                st.rerun()

        text = st.text_area("Text", value=self.controller.get_text(), height=120)

        with st.expander("Options", expanded=True):
            c1, c2 = st.columns(2)
            voice_style = c1.selectbox("Voice style", KYUTAI_VOICE_STYLES)
            model = c2.selectbox("Model", KYUTAI_MODELS)
            rate = c1.slider("Rate", 0.5, 2.0, 1.0, 0.1)
            pitch = c2.slider("Pitch", 0.5, 2.0, 1.0, 0.1)
            low_latency = c1.toggle("Low latency", value=True)
            real_time = c2.toggle("Real-time")
            streaming = c1.toggle("Streaming")

        speak_col, stop_col = st.columns(2)
        with speak_col:
            if st.button("▶ Speak", type="primary", use_container_width=True):
                with st.spinner("Generating speech..."):
                    success, error = self.controller.speak(
                        text,
                        voice_style=voice_style,
                        model=model,
                        low_latency=low_latency,
                        real_time=real_time,
                        streaming=streaming,
                        rate=rate,
                        pitch=pitch,
                    )
                if not success:
                    st.error(error)
        with stop_col:
            if st.button("⏹ Stop", use_container_width=True):
                self.controller.stop()

        pending = self.controller.get_pending_audio()
        if pending:
            render_audio_playback(pending, autoplay=True)

        self._render_result()
        self._render_stats()

    def _render_result(self):
        result = self.controller.get_last_result()
        if not result:
            return
        st.markdown("#### Last request")
        c1, c2, c3 = st.columns(3)
        c1.metric("Strategy", result.strategy.value)
        c2.metric("Latency", f"{result.latency_ms:.0f} ms" if result.latency_ms is not None else "n/a")
        c3.metric("Chunks", self.controller.get_chunks_received())
        if result.fallbacks:
            st.caption("Fell back from: " + ", ".join(result.fallbacks))
        events = self.controller.get_events()
        if events:
            st.caption("Events: " + " → ".join(events))

    def _render_stats(self):
        stats = self.controller.get_latency_stats()
        st.markdown("#### Latency")
        c1, c2, c3 = st.columns(3)
        c1.metric("Average", f"{stats.average_latency:.0f} ms")
        c2.metric("Last", f"{stats.last_latency:.0f} ms")
        c3.metric("Samples", stats.samples)
        st.caption(
            f"Model: {stats.voice_model} · MLX: {'on' if stats.is_mlx_enabled else 'off'} · "
            f"Streaming: {'on' if stats.is_streaming_enabled else 'off'}"
        )
