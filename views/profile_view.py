"""
Profile View - edit your profile, avatar and voice settings.
"""

import streamlit as st

from controllers.auth_controller import AuthController
from controllers.profile_controller import ProfileController
from models.user_preferences import KYUTAI_MODELS, KYUTAI_VOICE_STYLES, SPEED_OPTIONS


class ProfileView:
    """View for the signed-in user's profile."""

    def __init__(self):
        self.controller = ProfileController()
        self.auth = AuthController()

    def render(self):
        st.title("👤 Profile")

        profile = self.controller.get_profile()
        if not profile:
            st.error("Couldn't load your profile.")
            return

        stats = self.controller.get_stats()
        c1, c2, c3 = st.columns(3)
        c1.metric("Recipes", stats.recipes_count)
        c2.metric("Followers", stats.followers_count)
        c3.metric("Following", stats.following_count)

        details_tab, avatar_tab, voice_tab = st.tabs(["Details", "Avatar", "Voice"])
        with details_tab:
            self._render_details(profile)
        with avatar_tab:
            self._render_avatar(profile)
        with voice_tab:
            self._render_voice()

        st.markdown("---")
        if st.button("Sign Out"):
            self.auth.sign_out()
            st.switch_page("streamlit_app.py")

    def _render_details(self, profile):
        with st.form("profile_details"):
            st.text_input("Email", value=profile.email, disabled=True)
            username = st.text_input("Username", value=profile.username or "")
            full_name = st.text_input("Full name", value=profile.full_name or "")
            bio = st.text_area("Bio", value=profile.bio or "")
            if st.form_submit_button("Save", type="primary"):
                success, error = self.controller.update_profile(username, full_name, bio)
                if success:
                    st.success("Profile updated")
                else:
                    st.error(error)

    def _render_avatar(self, profile):
        avatar = self.controller.avatar_bytes(profile.avatar_url)
        if avatar:
            st.image(avatar, width=128)
            if st.button("Remove avatar"):
                success, error = self.controller.remove_avatar()
                if success:
                    st.rerun()
                st.error(error)
        else:
            st.markdown("## 👤")

        upload = st.file_uploader("Upload a new avatar", type=["jpg", "jpeg", "png", "webp", "gif"])
        if upload and st.button("Save avatar", type="primary"):
            success, error = self.controller.upload_avatar(upload.name, upload.getvalue())
            if success:
                st.rerun()
            st.error(error)

    def _render_voice(self):
        prefs = self.controller.get_preferences()

        st.markdown("#### Read-aloud voice")
        voices = self.controller.get_voice_options()
        voice_ids = list(voices.keys())
        voice = st.selectbox(
            "Voice",
            options=voice_ids,
            index=voice_ids.index(prefs.voice.name) if prefs.voice.name in voice_ids else 0,
            format_func=voices.get,
        )
        speed = st.select_slider(
            "Speed",
            options=list(SPEED_OPTIONS.keys()),
            value=self.controller.get_speed_slider_value(prefs),
            format_func=lambda v: SPEED_OPTIONS[v],
        )
        if st.button("Save voice"):
            if self.controller.save_voice(voice, speed):
                st.success("Voice saved")
            else:
                st.error("Couldn't save your voice settings.")

        st.markdown("#### Kyutai TTS")
        with st.form("tts_settings"):
            voice_style = st.selectbox(
                "Voice style", KYUTAI_VOICE_STYLES, index=KYUTAI_VOICE_STYLES.index(prefs.tts.voice_style)
            )
            model = st.selectbox("Model", KYUTAI_MODELS, index=KYUTAI_MODELS.index(prefs.tts.model))
            pitch = st.slider("Pitch", 0.5, 2.0, prefs.tts.pitch, 0.1)
            low_latency = st.toggle("Low latency", value=prefs.tts.low_latency)
            real_time = st.toggle("Real-time", value=prefs.tts.real_time)
            streaming = st.toggle("Streaming", value=prefs.tts.streaming)
            if st.form_submit_button("Save TTS settings"):
                saved = self.controller.save_tts(
                    voice_style=voice_style,
                    model=model,
                    pitch=pitch,
                    low_latency=low_latency,
                    real_time=real_time,
                    streaming=streaming,
                )
                if saved:
                    st.success("TTS settings saved")
                else:
                    st.error("Couldn't save your TTS settings.")
