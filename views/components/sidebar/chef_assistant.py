"""
Chef assistant sidebar: cooking session progress and saved chats.
"""

import streamlit as st
from typing import Callable, Optional

from models.chat import CookingSession
from services.chat_history_service import SavedChat


def render_chef_assistant_sidebar(
    session: Optional[CookingSession],
    saved_chats: list[SavedChat],
    current_chat_id: Optional[str],
    on_advance_step: Callable[[], int],
    on_end_session: Callable[[], None],
    on_new_chat: Callable[[], None],
    on_load_chat: Callable[[str], tuple[bool, Optional[str]]],
    on_delete_chat: Callable[[str], tuple[bool, Optional[str]]],
):
    """
    Render the chef assistant sidebar.

    Args:
        session: Active cooking session, if any
        saved_chats: Signed-in user's chats, newest first
        current_chat_id: Chat currently open
    """
    with st.sidebar:
        if session:
            st.markdown(f"### {session.recipe_name}")
            st.progress(
                session.current_step / session.total_steps,
                text=f"Step {session.current_step} of {session.total_steps}",
            )
            col1, col2 = st.columns(2)
            with col1:
                if st.button("Next step", use_container_width=True):
                    on_advance_step()
                    st.rerun()
            with col2:
                if st.button("End session", use_container_width=True):
                    on_end_session()
                    st.rerun()
            st.markdown("---")

        st.markdown("**Saved chats**")
        if st.button("➕ New chat", use_container_width=True):
            on_new_chat()
            st.rerun()

        if not saved_chats:
            st.caption("Sign in and start chatting to save conversations.")

        for chat in saved_chats:
            col1, col2 = st.columns([4, 1])
            label = f"{chat.title} · {chat.chef.name}"
            with col1:
                if st.button(
                    label,
                    key=f"chat_{chat.id}",
                    use_container_width=True,
                    type="primary" if chat.id == current_chat_id else "secondary",
                ):
                    success, error = on_load_chat(chat.id)
                    if success:
                        st.rerun()
                    st.error(error)
            with col2:
                if st.button("🗑", key=f"delete_chat_{chat.id}"):
                    success, error = on_delete_chat(chat.id)
                    if success:
                        st.rerun()
                    st.error(error)
            st.caption(chat.updated_at.strftime("%b %d, %H:%M"))
