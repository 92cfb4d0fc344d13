"""
Notifications View - follows, messages and new recipes from people you follow.
"""

import streamlit as st

from controllers.notifications_controller import NotificationsController

NOTIFICATION_ICONS = {
    "follow": "👤",
    "message": "💬",
    "recipe_created": "🍲",
    "like": "❤️",
    "comment": "🗨️",
}


class NotificationsView:
    """View for the notification list."""

    def __init__(self):
        self.controller = NotificationsController()

    def render(self):
        st.title("🔔 Notifications")

        notifications = self.controller.get_notifications()
        unread = sum(1 for n in notifications if not n.is_read)

        col1, col2 = st.columns([3, 1])
        col1.markdown(f"**{unread}** unread")
        with col2:
            if st.button("Mark all as read", disabled=unread == 0, use_container_width=True):
                self.controller.mark_all_as_read()
                st.rerun()

        if not notifications:
            st.info("You're all caught up.")
            return

        for notification in notifications:
            with st.container(border=True):
                icon = NOTIFICATION_ICONS.get(notification.type, "🔔")
                weight = "" if notification.is_read else "**"
                st.markdown(f"{icon} {weight}{notification.title}{weight}")
                st.markdown(notification.message)
                st.caption(notification.created_at.strftime("%b %d, %H:%M"))
                if not notification.is_read:
                    if st.button("Mark as read", key=f"read_{notification.id}"):
                        success, error = self.controller.mark_as_read(notification.id)
                        if success:
                            st.rerun()
                        st.error(error)
