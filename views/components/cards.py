"""
Card components for recipes and people.
"""

import streamlit as st
from typing import Callable, Optional

from services.profile_service import ProfileSummary, UserStats
from services.recipe_service import RecipeSummary

DIFFICULTY_BADGES = {"easy": "🟢 Easy", "medium": "🟡 Medium", "hard": "🔴 Hard"}


def render_recipe_card(
    recipe: RecipeSummary,
    on_favorite: Optional[Callable[[int], tuple[bool, Optional[str]]]] = None,
    key_prefix: str = "recipe",
):
    """Render one recipe in the feed."""
    with st.container(border=True):
        if recipe.image_url:
            st.image(recipe.image_url, use_container_width=True)
        st.markdown(f"#### {recipe.title}")
        if recipe.description:
            st.markdown(recipe.description)
        st.caption(
            f"{DIFFICULTY_BADGES.get(recipe.difficulty, recipe.difficulty)} · "
            f"⏱ {recipe.total_time} min · 🍽 {recipe.servings} · "
            f"by {recipe.author_name or 'Unknown'}"
        )

        with st.expander("Ingredients & steps"):
            for item in recipe.ingredients:
                st.markdown(f"- {item}")
            for i, step in enumerate(recipe.instructions, start=1):
                st.markdown(f"{i}. {step}")

        if on_favorite:
            label = "♥ Saved" if recipe.is_favorite else "♡ Save"
            if st.button(label, key=f"{key_prefix}_fav_{recipe.id}"):
                success, error = on_favorite(recipe.id)
                if success:
                    st.rerun()
                st.error(error)


def render_profile_card(
    profile: ProfileSummary,
    stats: Optional[UserStats] = None,
    avatar: Optional[bytes] = None,
    on_follow: Optional[Callable[[str], tuple[bool, Optional[str]]]] = None,
    on_message: Optional[Callable[[str], tuple[bool, Optional[str]]]] = None,
    key_prefix: str = "profile",
):
    """Render a user with optional stats and follow / message buttons."""
    with st.container(border=True):
        col1, col2 = st.columns([1, 4])
        with col1:
            if avatar:
                st.image(avatar, width=64)
            else:
                st.markdown("## 👤")
        with col2:
            st.markdown(f"**{profile.display_name}**")
            if profile.username:
                st.caption(f"@{profile.username}")
            if profile.bio:
                st.markdown(profile.bio)

        if stats:
            c1, c2, c3 = st.columns(3)
            c1.metric("Recipes", stats.recipes_count)
            c2.metric("Followers", stats.followers_count)
            c3.metric("Following", stats.following_count)

        buttons = st.columns(2)
        if on_follow and profile.is_following is not None:
            label = "Unfollow" if profile.is_following else "Follow"
            with buttons[0]:
                if st.button(label, key=f"{key_prefix}_follow_{profile.id}", use_container_width=True):
                    success, error = on_follow(profile.id)
                    if success:
                        st.rerun()
                    st.error(error)
        if on_message:
            with buttons[1]:
                if st.button("Message", key=f"{key_prefix}_msg_{profile.id}", use_container_width=True):
                    success, error = on_message(profile.id)
                    if success:
                        st.switch_page("pages/5_💬_Messages.py")
                    st.error(error)
