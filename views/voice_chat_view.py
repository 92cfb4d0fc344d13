"""
Voice Chat View - realtime voice conversations (Kyutai or Unmute).
"""

import streamlit as st

from controllers.voice_chat_controller import VoiceChatController
from models.user_preferences import UNMUTE_LANGUAGES, UNMUTE_VOICES
from views.components.audio import render_audio_playback, render_mic_button
from views.components.chat import render_transcript
from views.theme import LOG_LEVEL_COLORS, status_dot

MODE_LABELS = {
    "kyutai": "Kyutai pipeline",
    "unmute": "Unmute realtime",
}


class VoiceChatView:
    """View for the voice chat screen."""

    def __init__(self):
        self.controller = VoiceChatController()

    def render(self):
        st.title("🎤 Voice Chat")
        state = self.controller.state

        top_left, top_right = st.columns([3, 2])
        with top_left:
            mode = st.radio(
                "Mode",
                options=list(MODE_LABELS.keys()),
                index=list(MODE_LABELS.keys()).index(self.controller.get_mode()),
                format_func=MODE_LABELS.get,
                horizontal=True,
            )
            if mode != self.controller.get_mode():
                self.controller.set_mode(mode)
                st.rerun()
        with top_right:
            st.markdown(status_dot(state.connection_status), unsafe_allow_html=True)
            if state.is_connected:
                if st.button("Disconnect", use_container_width=True):
                    self.controller.disconnect()
                    st.rerun()
            elif st.button("Connect", type="primary", use_container_width=True, disabled=state.is_connecting):
                with st.spinner("Connecting..."):
                    success, error = self.controller.connect()
                if success:
                    st.rerun()
                st.error(error)

        chat_col, side_col = st.columns([3, 2])
        with chat_col:
            render_transcript(state.messages)
            self._render_input()
        with side_col:
            self._render_settings()
            self._render_debug_log()

    def _render_input(self):
        state = self.controller.state
        if not state.is_connected:
            st.info("Connect to start a conversation.")
            return

        pending = self.controller.get_pending_audio()
        if pending:
            render_audio_playback(pending, autoplay=state.auto_play)

        audio_bytes = render_mic_button(self.controller.get_audio_key())
        if audio_bytes:
            with st.spinner("Listening..."):
                success, error = self.controller.submit_recording(audio_bytes)
            self.controller.increment_audio_key()
            if success:
                st.rerun()
            st.warning(error)

        text = st.chat_input("Or type a message...")
        if text:
            with st.spinner("Thinking..."):
                success, error = self.controller.send_text_message(text)
            if success:
                st.rerun()
            st.error(error)

        col1, col2 = st.columns(2)
        with col1:
            if st.button("⏹ Stop speaking", use_container_width=True):
                self.controller.stop_speaking()
        with col2:
            if st.button("Clear conversation", use_container_width=True):
                self.controller.clear_messages()
                st.rerun()

    def _render_settings(self):
        state = self.controller.state
        with st.expander("⚙️ Settings", expanded=False):
            if self.controller.get_mode() == "kyutai":
                voices = self.controller.get_voices()
                voice_ids = list(voices.keys())
                voice = st.selectbox(
                    "Voice",
                    options=voice_ids,
                    index=voice_ids.index(state.selected_voice) if state.selected_voice in voice_ids else 0,
                    format_func=lambda v: f"{voices[v][0]} ({voices[v][1]})",
                )
                if voice != state.selected_voice:
                    self.controller.set_voice(voice)

                languages = self.controller.get_languages()
                codes = list(languages.keys())
                language = st.selectbox(
                    "Language",
                    options=codes,
                    index=codes.index(state.selected_language) if state.selected_language in codes else 0,
                    format_func=languages.get,
                )
                if language != state.selected_language:
                    self.controller.set_language(language)
            else:
                self._render_unmute_settings()

            auto_play = st.toggle("Auto-play replies", value=state.auto_play)
            if auto_play != state.auto_play:
                self.controller.set_auto_play(auto_play)
            push_to_talk = st.toggle("Push to talk", value=state.push_to_talk)
            if push_to_talk != state.push_to_talk:
                self.controller.set_push_to_talk(push_to_talk)

    def _render_unmute_settings(self):
        prefs = self.controller.get_unmute_preferences()
        with st.form("unmute_settings"):
            server_url = st.text_input("Server URL", value=prefs.server_url or "", placeholder="ws://localhost:8000/ws")
            voice = st.selectbox("Voice", UNMUTE_VOICES, index=UNMUTE_VOICES.index(prefs.voice))
            language = st.selectbox("Language", UNMUTE_LANGUAGES, index=UNMUTE_LANGUAGES.index(prefs.language))
            instructions = st.text_area("Instructions", value=prefs.instructions)
            temperature = st.slider("Temperature", 0.0, 2.0, prefs.temperature, 0.1)
            max_tokens = st.number_input("Max tokens", min_value=1, max_value=4096, value=prefs.max_tokens)
            if st.form_submit_button("Save"):
                success, error = self.controller.update_unmute_settings(
                    server_url=server_url or None,
                    voice=voice,
                    language=language,
                    instructions=instructions,
                    temperature=temperature,
                    max_tokens=int(max_tokens),
                )
                if success:
                    st.success("Settings saved")
                else:
                    st.error(error)

    def _render_debug_log(self):
        logs = self.controller.state.debug_logs
        with st.expander(f"🐞 Debug log ({len(logs)})"):
            if st.button("Clear log"):
                self.controller.clear_debug_logs()
                st.rerun()
            for entry in reversed(logs):
                color = LOG_LEVEL_COLORS.get(entry.level, "#6B7280")
                st.markdown(
                    f"<span style='color:{color}'>[{entry.level.upper()}]</span> "
                    f"{entry.timestamp.strftime('%H:%M:%S')} {entry.message}",
                    unsafe_allow_html=True,
                )
                if entry.data is not None:
                    st.caption(str(entry.data)[:300])
