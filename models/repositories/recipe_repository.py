"""
Recipe Repository - Data access for the recipe feed and favorites.
"""

from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from models.entities import Recipe, Favorite


class RecipeRepository:
    """Repository for recipe and favorite database operations."""

    def __init__(self, db: Session):
        """Initialize with a database session."""
        self.db = db

    def get_by_id(self, recipe_id: int) -> Optional[Recipe]:
        return self.db.query(Recipe).options(
            joinedload(Recipe.author)
        ).filter(Recipe.RecipeId == recipe_id).first()

    def list_recipes(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        author_id: Optional[str] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[Recipe]:
        """Newest recipes first, optionally filtered."""
        q = self.db.query(Recipe).options(joinedload(Recipe.author))
        if category:
            q = q.filter(func.lower(Recipe.Category) == category.lower())
        if search:
            pattern = f"%{search.strip().lower()}%"
            q = q.filter(or_(
                func.lower(Recipe.Title).like(pattern),
                func.lower(Recipe.Description).like(pattern),
            ))
        if author_id:
            q = q.filter(Recipe.CreatedBy == author_id)
        return q.order_by(
            Recipe.CreatedAt.desc(), Recipe.RecipeId.desc()
        ).offset(offset).limit(limit).all()

    def create(self, **fields) -> Recipe:
        recipe = Recipe(**fields)
        self.db.add(recipe)
        self.db.commit()
        self.db.refresh(recipe)
        return recipe

    # ==========================================
    # Favorites
    # ==========================================

    def get_favorite(self, user_id: str, recipe_id: int) -> Optional[Favorite]:
        return self.db.query(Favorite).filter(
            Favorite.UserId == user_id,
            Favorite.RecipeId == recipe_id,
        ).first()

    def add_favorite(self, user_id: str, recipe_id: int) -> Favorite:
        favorite = Favorite(UserId=user_id, RecipeId=recipe_id)
        self.db.add(favorite)
        self.db.commit()
        self.db.refresh(favorite)
        return favorite

    def remove_favorite(self, favorite: Favorite) -> None:
        self.db.delete(favorite)
        self.db.commit()

    def list_favorites(self, user_id: str) -> list[Recipe]:
        """The user's saved recipes, most recently saved first."""
        return self.db.query(Recipe).join(
            Favorite, Favorite.RecipeId == Recipe.RecipeId
        ).options(joinedload(Recipe.author)).filter(
            Favorite.UserId == user_id
        ).order_by(Favorite.CreatedAt.desc(), Favorite.FavoriteId.desc()).all()

    def favorite_ids(self, user_id: str) -> set[int]:
        rows = self.db.query(Favorite.RecipeId).filter(Favorite.UserId == user_id).all()
        return {row[0] for row in rows}
