"""
Messages View - direct conversations between users.
"""

import streamlit as st

from controllers.messaging_controller import MessagingController


class MessagesView:
    """View for the conversation list and an open conversation."""

    def __init__(self):
        self.controller = MessagingController()

    def render(self):
        st.title("💬 Messages")

        working, status = self.controller.check_status()
        if not working:
            st.error(status)
            return

        list_col, thread_col = st.columns([1, 2])
        with list_col:
            self._render_conversation_list()
        with thread_col:
            conversation_id = self.controller.get_open_conversation_id()
            if conversation_id is None:
                st.info("Pick a conversation, or message someone from the Community page.")
            else:
                self._render_conversation(conversation_id)

    def _render_conversation_list(self):
        conversations = self.controller.get_conversations()
        if not conversations:
            st.caption("No conversations yet.")
            return

        user_id = self.controller.user.user_id
        open_id = self.controller.get_open_conversation_id()
        for conversation in conversations:
            others = conversation.other_participants(user_id)
            name = ", ".join(p.display_name for p in others) or conversation.title or "Conversation"
            unread = f" ({conversation.unread_count})" if conversation.unread_count else ""
            preview = conversation.last_message.content[:40] if conversation.last_message else "No messages yet"
            button_type = "primary" if conversation.id == open_id else "secondary"
            if st.button(f"{name}{unread}\n\n{preview}", key=f"conv_{conversation.id}", type=button_type, use_container_width=True):
                self.controller.open_conversation(conversation.id)
                st.rerun()

    def _render_conversation(self, conversation_id: int):
        conversation = self.controller.get_conversation(conversation_id)
        if not conversation:
            st.error("Conversation not found.")
            self.controller.open_conversation(None)
            return

        user_id = self.controller.user.user_id
        others = conversation.other_participants(user_id)
        st.markdown(f"### {', '.join(p.display_name for p in others) or 'Conversation'}")

        thread = st.container(height=450)
        with thread:
            for message in self.controller.get_messages(conversation_id):
                role = "user" if message.sender_id == user_id else "assistant"
                with st.chat_message(role, avatar="🙂" if role == "user" else "👤"):
                    st.markdown(message.content)
                    st.caption(message.created_at.strftime("%b %d, %H:%M"))

        with st.form(f"composer_{self.controller.get_composer_key()}", clear_on_submit=True):
            content = st.text_area("Message", label_visibility="collapsed", placeholder="Write a message...")
            if st.form_submit_button("Send", type="primary"):
                success, error = self.controller.send_message(conversation_id, content)
                if success:
                    st.rerun()
                st.error(error)
