"""
Community Controller - recipe feed, user search, profiles and follows.
"""

import logging
from typing import Optional

import streamlit as st

from config.auth import get_current_user
from config.database import SessionLocal
from services.errors import AppError, log_error
from services.profile_service import ProfileService, ProfileSummary, UserStats
from services.recipe_service import Category, RecipeService, RecipeSummary
from services.social_service import SocialService

logger = logging.getLogger(__name__)


class CommunityController:
    """Controller for the home feed and community screens."""

    def __init__(self):
        self.user = get_current_user()
        if "community" not in st.session_state:
            st.session_state.community = {
                "selected_category": None,
                "search_query": "",
                "viewing_user_id": None,
            }

    @property
    def viewer_id(self) -> Optional[str]:
        return self.user.user_id if self.user else None

    # Navigation state
    def get_selected_category(self) -> Optional[str]:
        return st.session_state.community["selected_category"]

    def set_selected_category(self, category: Optional[str]):
        current = st.session_state.community["selected_category"]
        st.session_state.community["selected_category"] = None if category == current else category

    def get_viewing_user_id(self) -> Optional[str]:
        return st.session_state.community["viewing_user_id"]

    def view_user(self, user_id: Optional[str]):
        st.session_state.community["viewing_user_id"] = user_id

    # Recipes
    def get_categories(self) -> list[Category]:
        return RecipeService.categories()

    def get_recipes(self, search: Optional[str] = None, limit: int = 20) -> list[RecipeSummary]:
        db = SessionLocal()
        try:
            return RecipeService(db).list_recipes(
                category=self.get_selected_category(),
                search=search or None,
                viewer_id=self.viewer_id,
                limit=limit,
            )
        finally:
            db.close()

    def get_user_recipes(self, user_id: str) -> list[RecipeSummary]:
        db = SessionLocal()
        try:
            return RecipeService(db).list_recipes(author_id=user_id, viewer_id=self.viewer_id)
        finally:
            db.close()

    def get_favorites(self) -> list[RecipeSummary]:
        if not self.user:
            return []
        db = SessionLocal()
        try:
            return RecipeService(db).list_favorites(self.user.user_id)
        finally:
            db.close()

    def create_recipe(self, **fields) -> tuple[bool, Optional[str]]:
        """
        Publish a recipe.

        Returns (success, error_message)
        """
        if not self.user:
            return False, "Please sign in to share recipes."
        db = SessionLocal()
        try:
            RecipeService(db).create_recipe(self.user.user_id, **fields)
            return True, None
        except AppError as e:
            return False, log_error(e, "Create recipe").user_message
        finally:
            db.close()

    def toggle_favorite(self, recipe_id: int) -> tuple[bool, Optional[str]]:
        if not self.user:
            return False, "Please sign in to save recipes."
        db = SessionLocal()
        try:
            RecipeService(db).toggle_favorite(self.user.user_id, recipe_id)
            return True, None
        except AppError as e:
            return False, log_error(e, "Toggle favorite").user_message
        finally:
            db.close()

    # People
    def search_users(self, query: str) -> list[ProfileSummary]:
        db = SessionLocal()
        try:
            results = ProfileService(db).search_users(query, current_user_id=self.viewer_id)
            if self.viewer_id and results:
                social = SocialService(db)
                for profile in results:
                    profile.is_following = social.is_following(self.viewer_id, profile.id)
            return results
        finally:
            db.close()

    def get_profile(self, user_id: str) -> tuple[Optional[ProfileSummary], Optional[UserStats]]:
        db = SessionLocal()
        try:
            service = ProfileService(db)
            profile = service.get_profile(user_id)
            if self.viewer_id and self.viewer_id != user_id:
                profile.is_following = SocialService(db).is_following(self.viewer_id, user_id)
            return profile, service.get_user_stats(user_id)
        except AppError as e:
            log_error(e, "Load profile")
            return None, None
        finally:
            db.close()

    def toggle_follow(self, user_id: str) -> tuple[bool, Optional[str]]:
        """
        Follow or unfollow a user.

        Returns (success, error_message)
        """
        if not self.user:
            return False, "Please sign in to follow people."
        db = SessionLocal()
        try:
            SocialService(db).toggle_follow(self.user.user_id, user_id)
            return True, None
        except AppError as e:
            return False, log_error(e, "Toggle follow").user_message
        finally:
            db.close()

    def get_followers(self, user_id: str) -> list[ProfileSummary]:
        db = SessionLocal()
        try:
            return SocialService(db).list_followers(user_id, viewer_id=self.viewer_id)
        finally:
            db.close()

    def get_following(self, user_id: str) -> list[ProfileSummary]:
        db = SessionLocal()
        try:
            return SocialService(db).list_following(user_id, viewer_id=self.viewer_id)
        finally:
            db.close()
