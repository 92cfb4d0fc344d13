"""
Recipe Service - community recipe feed, favorites and formatting.

This service is pure Python with no Streamlit dependencies.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from models.entities import Recipe, DIFFICULTY_LEVELS
from models.repositories import FollowerRepository, ProfileRepository, RecipeRepository
from services.errors import NotFoundError, ValidationError
from services.notification_service import NotificationService

logger = logging.getLogger(__name__)


@dataclass
class Category:
    id: str
    name: str
    icon: str
    description: str
    color: str


CATEGORIES = [
    Category("breakfast", "Breakfast", "☕", "All about breakfast recipe tutorial", "#FACC15"),
    Category("lunch", "Lunch", "🥪", "Quick and filling midday meals", "#3B82F6"),
    Category("dinner", "Dinner", "🍲", "Hearty dishes for the evening", "#EF4444"),
    Category("dessert", "Dessert", "🍩", "Sweet treats and bakes", "#EC4899"),
    Category("snacks", "Snacks", "🥜", "Small bites between meals", "#10B981"),
    Category("drinks", "Drinks", "🥤", "Smoothies, juices and more", "#8B5CF6"),
]


@dataclass
class RecipeSummary:
    """Lightweight recipe data for lists and cards."""
    id: int
    title: str
    description: Optional[str]
    image_url: Optional[str]
    category: Optional[str]
    difficulty: str
    prep_time: int
    cook_time: int
    servings: int
    author_id: str
    author_name: Optional[str]
    likes_count: int
    comments_count: int
    created_at: datetime
    ingredients: list[str] = field(default_factory=list)
    instructions: list[str] = field(default_factory=list)
    is_favorite: bool = False

    @property
    def total_time(self) -> int:
        return (self.prep_time or 0) + (self.cook_time or 0)


def _summary(recipe: Recipe, favorite_ids: Optional[set[int]] = None) -> RecipeSummary:
    return RecipeSummary(
        id=recipe.RecipeId,
        title=recipe.Title,
        description=recipe.Description,
        image_url=recipe.ImageUrl,
        category=recipe.Category,
        difficulty=recipe.Difficulty,
        prep_time=recipe.PrepTime,
        cook_time=recipe.CookTime,
        servings=recipe.Servings,
        author_id=recipe.CreatedBy,
        author_name=recipe.author.display_name if recipe.author else None,
        likes_count=recipe.LikesCount,
        comments_count=recipe.CommentsCount,
        created_at=recipe.CreatedAt,
        ingredients=list(recipe.Ingredients or []),
        instructions=list(recipe.Instructions or []),
        is_favorite=bool(favorite_ids and recipe.RecipeId in favorite_ids),
    )


class RecipeService:
    """Service for recipe data access and formatting."""

    def __init__(self, db: Session, notifications: Optional[NotificationService] = None):
        self.repo = RecipeRepository(db)
        self.profiles = ProfileRepository(db)
        self.followers = FollowerRepository(db)
        self.notifications = notifications or NotificationService(db)

    @staticmethod
    def categories() -> list[Category]:
        return list(CATEGORIES)

    def list_recipes(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        author_id: Optional[str] = None,
        viewer_id: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[RecipeSummary]:
        favorites = self.repo.favorite_ids(viewer_id) if viewer_id else set()
        recipes = self.repo.list_recipes(
            category=category, search=search, author_id=author_id, limit=limit, offset=offset
        )
        return [_summary(r, favorites) for r in recipes]

    def get_recipe(self, recipe_id: int, viewer_id: Optional[str] = None) -> RecipeSummary:
        recipe = self.repo.get_by_id(recipe_id)
        if not recipe:
            raise NotFoundError("Recipe not found")
        favorites = self.repo.favorite_ids(viewer_id) if viewer_id else set()
        return _summary(recipe, favorites)

    def create_recipe(
        self,
        user_id: str,
        title: str,
        ingredients: list[str],
        instructions: list[str],
        description: Optional[str] = None,
        category: Optional[str] = None,
        difficulty: str = "easy",
        prep_time: int = 0,
        cook_time: int = 0,
        servings: int = 1,
        image_url: Optional[str] = None,
    ) -> RecipeSummary:
        """
        Publish a recipe and notify the author's followers.

        Raises:
            ValidationError for missing title, ingredients or steps, or bad numbers
        """
        title = (title or "").strip()
        ingredients = [i.strip() for i in ingredients or [] if i and i.strip()]
        instructions = [s.strip() for s in instructions or [] if s and s.strip()]

        if not title:
            raise ValidationError("Recipe title is required")
        if not ingredients:
            raise ValidationError("Add at least one ingredient")
        if not instructions:
            raise ValidationError("Add at least one instruction")
        if difficulty not in DIFFICULTY_LEVELS:
            raise ValidationError("Difficulty must be easy, medium or hard")
        if prep_time < 0 or cook_time < 0:
            raise ValidationError("Times can't be negative")
        if servings < 1:
            raise ValidationError("Servings must be at least 1")

        author = self.profiles.get_by_id(user_id)
        if not author:
            raise NotFoundError("User not found")

        recipe = self.repo.create(
            Title=title,
            Description=(description or "").strip() or None,
            Category=category,
            Difficulty=difficulty,
            PrepTime=prep_time,
            CookTime=cook_time,
            Servings=servings,
            Ingredients=ingredients,
            Instructions=instructions,
            ImageUrl=image_url,
            CreatedBy=user_id,
        )
        logger.info(f"Recipe {recipe.RecipeId} created by {user_id}")

        for follower_id in self.followers.follower_ids(user_id):
            self.notifications.notify_recipe_created(author, follower_id, recipe.RecipeId, title)

        return _summary(recipe)

    def toggle_favorite(self, user_id: str, recipe_id: int) -> bool:
        """Save or unsave a recipe. Returns the new favorite state."""
        if not self.repo.get_by_id(recipe_id):
            raise NotFoundError("Recipe not found")
        existing = self.repo.get_favorite(user_id, recipe_id)
        if existing:
            self.repo.remove_favorite(existing)
            return False
        self.repo.add_favorite(user_id, recipe_id)
        return True

    def list_favorites(self, user_id: str) -> list[RecipeSummary]:
        recipes = self.repo.list_favorites(user_id)
        return [_summary(r, {r.RecipeId for r in recipes}) for r in recipes]

    @staticmethod
    def format_for_llm(recipe: RecipeSummary) -> str:
        """Format a recipe as markdown for the chef assistant's context."""
        lines = [
            f"# {recipe.title}",
            "",
            f"**Description:** {recipe.description or 'No description'}",
            f"**Category:** {recipe.category or 'Not specified'}",
            f"**Difficulty:** {recipe.difficulty}",
            f"**Prep Time:** {recipe.prep_time} minutes",
            f"**Cook Time:** {recipe.cook_time} minutes",
            f"**Servings:** {recipe.servings}",
            "",
            "## Ingredients",
        ]
        lines.extend(f"- {item}" for item in recipe.ingredients)
        lines.extend(["", "## Steps"])
        lines.extend(f"{i}. {step}" for i, step in enumerate(recipe.instructions, start=1))
        return "\n".join(lines)
