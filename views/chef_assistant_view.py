"""
Chef Assistant View - UI for chatting with a chef while cooking.

This view handles all rendering for the chef assistant.
It delegates business logic to the ChefAssistantController.
"""

import streamlit as st

from controllers.chef_assistant_controller import ChefAssistantController
from models.user_preferences import ASSISTANT_LANGUAGES
from views.components.chat import render_chat_messages
from views.components.sidebar import render_chef_assistant_sidebar
from views.components.voice_panel import render_voice_panel

QUICK_PROMPTS = {
    "qp_next": ("What's next?", "What's the next step?"),
    "qp_substitute": ("Can I substitute?", "What substitutions can I make?"),
    "qp_done": ("Is it done?", "How do I know when it's done?"),
}


class ChefAssistantView:
    """View for the chef assistant UI."""

    def __init__(self):
        self.controller = ChefAssistantController()

    def render(self):
        """Main render method."""
        agent = self.controller.get_selected_agent()
        st.title("👨‍🍳 Chef Assistant")

        render_chef_assistant_sidebar(
            session=self.controller.get_session(),
            saved_chats=self.controller.list_saved_chats(),
            current_chat_id=self.controller.get_chat_id(),
            on_advance_step=self.controller.advance_step,
            on_end_session=self.controller.end_session,
            on_new_chat=self.controller.new_chat,
            on_load_chat=self.controller.load_saved_chat,
            on_delete_chat=self.controller.delete_saved_chat,
        )

        self._render_agent_picker()

        if not self.controller.is_session_active() and not self.controller.get_messages():
            self._render_session_start()

        chat_col, voice_col = st.columns([3, 1])
        with chat_col:
            render_chat_messages(self.controller.get_messages(), agent)
            self._render_composer()
        with voice_col:
            self._render_voice_panel()

        self._render_settings()

    def _render_agent_picker(self):
        agents = self.controller.get_agents()
        selected = self.controller.get_selected_agent()
        columns = st.columns(len(agents))
        for column, agent in zip(columns, agents):
            with column:
                with st.container(border=True):
                    if agent.avatar:
                        st.image(agent.avatar, width=80)
                    st.markdown(f"### {agent.name}")
                    st.caption(agent.specialty)
                    st.markdown(agent.description)
                    if agent.id == selected.id:
                        st.success("Selected")
                    elif st.button(f"Cook with {agent.name.split()[-1]}", key=f"agent_{agent.id}", use_container_width=True):
                        self.controller.select_agent(agent.id)
                        st.rerun()

    def _render_session_start(self):
        with st.form("start_session"):
            st.markdown("### What are we cooking today?")
            recipe_name = st.text_input("Recipe", placeholder="Jollof rice")
            total_steps = st.number_input("Number of steps", min_value=1, max_value=50, value=10)
            if st.form_submit_button("Start Cooking", type="primary", use_container_width=True):
                self.controller.start_session(recipe_name, int(total_steps))
                st.rerun()

    def _render_composer(self):
        photo = st.file_uploader(
            "📸 Show me your ingredients or progress",
            type=["jpg", "jpeg", "png", "webp"],
            key=f"assistant_photo_{self.controller.get_audio_key()}",
        )
        user_input = st.chat_input("Ask your chef anything...")

        if user_input or (photo and st.button("Send photo", type="primary")):
            image = photo.getvalue() if photo else None
            media_type = photo.type if photo else "image/jpeg"
            with st.spinner("Your chef is thinking..."):
                success, error = self.controller.send_message(user_input or "", image=image, media_type=media_type)
            if error:
                st.warning(error)
            else:
                self.controller.increment_audio_key()
                st.rerun()

        cols = st.columns(len(QUICK_PROMPTS))
        for col, (key, (label, prompt)) in zip(cols, QUICK_PROMPTS.items()):
            with col:
                if st.button(label, key=key, use_container_width=True):
                    with st.spinner("Your chef is thinking..."):
                        self.controller.send_message(prompt)
                    st.rerun()

    def _render_voice_panel(self):
        st.markdown("### Voice Controls")
        voice_container = st.container(height=450)
        with voice_container:
            audio_bytes = render_voice_panel(
                audio_key=self.controller.get_audio_key(),
                pending_audio=self.controller.get_pending_audio(),
                voices=self.controller.get_available_voices(),
                current_voice=self.controller.get_voice_name(),
                current_speed=self.controller.get_speed_slider_value(),
                on_voice_change=self.controller.set_voice_name,
                on_speed_change=self.controller.set_speed_from_slider,
            )

            if audio_bytes:
                with st.spinner("Listening..."):
                    success, error = self.controller.process_voice_command(audio_bytes)
                self.controller.increment_audio_key()
                if error:
                    st.warning(error)
                else:
                    st.rerun()

    def _render_settings(self):
        state = self.controller.state
        with st.expander("⚙️ Assistant settings"):
            languages = list(ASSISTANT_LANGUAGES.keys())
            language = st.selectbox(
                "Language",
                options=languages,
                index=languages.index(state.language),
                format_func=lambda code: ASSISTANT_LANGUAGES[code],
            )
            voice_enabled = st.toggle("Speak replies", value=state.voice_enabled)
            camera_enabled = st.toggle("Photo analysis", value=state.camera_analysis_enabled)

            if (language, voice_enabled, camera_enabled) != (
                state.language, state.voice_enabled, state.camera_analysis_enabled
            ):
                self.controller.update_settings(
                    language=language,
                    voice_enabled=voice_enabled,
                    camera_analysis_enabled=camera_enabled,
                )
                st.rerun()
