"""
Home View - Landing page with the community recipe feed.

Displays navigation cards, recipe categories and the latest recipes.
"""

import streamlit as st

from config.auth import get_current_user
from controllers.community_controller import CommunityController
from controllers.notifications_controller import NotificationsController
from views.components.cards import render_recipe_card

DIFFICULTIES = ["easy", "medium", "hard"]


class HomeView:
    """View for the home/landing page."""

    def __init__(self):
        self.controller = CommunityController()
        self.notifications = NotificationsController()

    def render(self) -> None:
        """Render the home page."""
        user = get_current_user()
        st.title("🍳 Cooking Assistant")
        if user:
            unread = self.notifications.get_unread_count()
            badge = f" · 🔔 {unread} new" if unread else ""
            st.markdown(f"Welcome back, **{user.name}**{badge}")
        else:
            st.markdown("Your AI-powered kitchen companion")

        st.markdown("---")

        col1, col2, col3 = st.columns(3)
        with col1:
            self._render_nav_card(
                "👨‍🍳 Chef Assistant",
                "Cook step by step with a chef who can see your photos and talk back.",
                "Start Cooking →",
                "pages/2_🍳_Chef_Assistant.py",
            )
        with col2:
            self._render_nav_card(
                "🎤 Voice Chat",
                "Have a hands-free conversation while your hands are busy.",
                "Start Talking →",
                "pages/3_🎤_Voice_Chat.py",
            )
        with col3:
            self._render_nav_card(
                "👥 Community",
                "Find cooks to follow and see what they are making.",
                "Explore →",
                "pages/4_👥_Community.py",
            )

        st.markdown("---")
        self._render_categories()
        self._render_feed()

        if user:
            self._render_create_recipe()
        else:
            st.info("Sign in to save favorites and share your own recipes.")

    def _render_nav_card(self, title: str, body: str, label: str, page: str) -> None:
        st.markdown(f"### {title}")
        st.markdown(body)
        if st.button(label, key=f"nav_{page}", type="primary", use_container_width=True):
            st.switch_page(page)

    def _render_categories(self) -> None:
        st.markdown("### Categories")
        selected = self.controller.get_selected_category()
        categories = self.controller.get_categories()
        columns = st.columns(len(categories))
        for column, category in zip(columns, categories):
            with column:
                label = f"{category.icon} {category.name}"
                button_type = "primary" if category.id == selected else "secondary"
                if st.button(label, key=f"cat_{category.id}", type=button_type, use_container_width=True):
                    self.controller.set_selected_category(category.id)
                    st.rerun()

    def _render_feed(self) -> None:
        search = st.text_input("🔍 Search recipes", placeholder="Jollof, pancakes, smoothie...")
        recipes = self.controller.get_recipes(search=search)

        if not recipes:
            st.info("No recipes yet. Be the first to share one!")
            return

        columns = st.columns(2)
        for i, recipe in enumerate(recipes):
            with columns[i % 2]:
                render_recipe_card(
                    recipe,
                    on_favorite=self.controller.toggle_favorite if self.controller.user else None,
                    key_prefix="feed",
                )

    def _render_create_recipe(self) -> None:
        with st.expander("➕ Share a recipe"):
            with st.form("create_recipe", clear_on_submit=True):
                title = st.text_input("Title")
                description = st.text_area("Description")
                categories = self.controller.get_categories()
                category = st.selectbox(
                    "Category",
                    options=[c.id for c in categories],
                    format_func=lambda cid: next(c.name for c in categories if c.id == cid),
                )
                difficulty = st.selectbox("Difficulty", DIFFICULTIES)
                c1, c2, c3 = st.columns(3)
                prep_time = c1.number_input("Prep (min)", min_value=0, value=10)
                cook_time = c2.number_input("Cook (min)", min_value=0, value=20)
                servings = c3.number_input("Servings", min_value=1, value=2)
                ingredients = st.text_area("Ingredients (one per line)")
                instructions = st.text_area("Steps (one per line)")
                image_url = st.text_input("Image URL (optional)")

                if st.form_submit_button("Publish", type="primary"):
                    success, error = self.controller.create_recipe(
                        title=title,
                        description=description,
                        category=category,
                        difficulty=difficulty,
                        prep_time=int(prep_time),
                        cook_time=int(cook_time),
                        servings=int(servings),
                        ingredients=[line.strip() for line in ingredients.splitlines() if line.strip()],
                        instructions=[line.strip() for line in instructions.splitlines() if line.strip()],
                        image_url=image_url or None,
                    )
                    if success:
                        st.success("Recipe published!")
                    else:
                        st.error(error)
