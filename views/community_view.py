"""
Community View - find people, view profiles, follow and message.
"""

import streamlit as st

from controllers.community_controller import CommunityController
from controllers.messaging_controller import MessagingController
from controllers.profile_controller import ProfileController
from views.components.cards import render_profile_card, render_recipe_card


class CommunityView:
    """View for searching users and browsing profiles."""

    def __init__(self):
        self.controller = CommunityController()
        self.messaging = MessagingController()
        self.profiles = ProfileController()

    def render(self):
        st.title("👥 Community")

        viewing = self.controller.get_viewing_user_id()
        if viewing:
            self._render_profile(viewing)
            return

        search_tab, favorites_tab = st.tabs(["Find People", "My Favorites"])
        with search_tab:
            self._render_search()
        with favorites_tab:
            self._render_favorites()

    def _render_search(self):
        query = st.text_input("Search by name or username", placeholder="Ada")
        if not query.strip():
            st.caption("Type a name to find cooks to follow.")
            return

        results = self.controller.search_users(query)
        if not results:
            st.info("No one found.")
            return

        for profile in results:
            render_profile_card(
                profile,
                avatar=self.profiles.avatar_bytes(profile.avatar_url),
                on_follow=self.controller.toggle_follow,
                on_message=self.messaging.start_conversation,
                key_prefix="search",
            )
            if st.button("View profile", key=f"view_{profile.id}"):
                self.controller.view_user(profile.id)
                st.rerun()

    def _render_profile(self, user_id: str):
        if st.button("← Back"):
            self.controller.view_user(None)
            st.rerun()

        profile, stats = self.controller.get_profile(user_id)
        if not profile:
            st.error("Profile not found.")
            return

        is_self = self.controller.viewer_id == user_id
        render_profile_card(
            profile,
            stats=stats,
            avatar=self.profiles.avatar_bytes(profile.avatar_url),
            on_follow=None if is_self else self.controller.toggle_follow,
            on_message=None if is_self else self.messaging.start_conversation,
            key_prefix="viewing",
        )

        recipes_tab, followers_tab, following_tab = st.tabs(["Recipes", "Followers", "Following"])
        with recipes_tab:
            recipes = self.controller.get_user_recipes(user_id)
            if not recipes:
                st.caption("No recipes shared yet.")
            for recipe in recipes:
                render_recipe_card(recipe, on_favorite=self.controller.toggle_favorite, key_prefix="profile")
        with followers_tab:
            self._render_people(self.controller.get_followers(user_id), "followers")
        with following_tab:
            self._render_people(self.controller.get_following(user_id), "following")

    def _render_people(self, people, key_prefix: str):
        if not people:
            st.caption("Nobody here yet.")
            return
        for person in people:
            col1, col2 = st.columns([4, 1])
            col1.markdown(f"**{person.display_name}**" + (f" · @{person.username}" if person.username else ""))
            if col2.button("View", key=f"{key_prefix}_{person.id}"):
                self.controller.view_user(person.id)
                st.rerun()

    def _render_favorites(self):
        favorites = self.controller.get_favorites()
        if not favorites:
            st.caption("Recipes you save show up here.")
            return
        for recipe in favorites:
            render_recipe_card(recipe, on_favorite=self.controller.toggle_favorite, key_prefix="favorites")
