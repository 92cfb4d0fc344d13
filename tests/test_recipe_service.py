import pytest

from services.errors import NotFoundError, ValidationError
from services.notification_service import NotificationService
from services.recipe_service import RecipeService
from services.social_service import SocialService


def _publish(service, author_id, title="Jollof Rice", **kwargs):
    return service.create_recipe(
        author_id,
        title,
        kwargs.pop("ingredients", ["rice", "tomatoes", ""]),
        kwargs.pop("instructions", ["Blend", "  ", "Simmer"]),
        **kwargs,
    )


class TestCreateRecipe:
    def test_blank_lines_are_dropped(self, db, make_profile):
        ada = make_profile("ada@example.com", full_name="Ada")

        recipe = _publish(RecipeService(db), ada.ProfileId, prep_time=10, cook_time=35, category="Dinner")

        assert recipe.ingredients == ["rice", "tomatoes"]
        assert recipe.instructions == ["Blend", "Simmer"]
        assert recipe.total_time == 45
        assert recipe.author_id == ada.ProfileId

    @pytest.mark.parametrize("overrides,message", [
        ({"title": "  "}, "title is required"),
        ({"ingredients": [" "]}, "at least one ingredient"),
        ({"instructions": []}, "at least one instruction"),
        ({"difficulty": "extreme"}, "Difficulty must be"),
        ({"prep_time": -5}, "can't be negative"),
        ({"servings": 0}, "at least 1"),
    ])
    def test_validation(self, db, make_profile, overrides, message):
        ada = make_profile("ada@example.com")
        with pytest.raises(ValidationError, match=message):
            _publish(RecipeService(db), ada.ProfileId, **overrides)

    def test_followers_are_notified(self, db, make_profile):
        """Publishing notifies everyone following the author."""
        ada = make_profile("ada@example.com", full_name="Ada")
        bola = make_profile("bola@example.com")
        chidi = make_profile("chidi@example.com")
        SocialService(db).follow(bola.ProfileId, ada.ProfileId)

        _publish(RecipeService(db), ada.ProfileId)

        notes = NotificationService(db).fetch(bola.ProfileId)
        assert [n.type for n in notes] == ["recipe_created"]
        assert NotificationService(db).fetch(chidi.ProfileId) == []


class TestFeed:
    def test_filters(self, db, make_profile):
        ada = make_profile("ada@example.com")
        service = RecipeService(db)
        _publish(service, ada.ProfileId, title="Jollof Rice", category="Dinner")
        _publish(service, ada.ProfileId, title="Akara", category="Breakfast", description="Bean fritters")

        assert [r.title for r in service.list_recipes(category="breakfast")] == ["Akara"]
        assert [r.title for r in service.list_recipes(search="fritter")] == ["Akara"]
        assert [r.title for r in service.list_recipes()] == ["Akara", "Jollof Rice"]

    def test_get_missing_recipe(self, db):
        with pytest.raises(NotFoundError):
            RecipeService(db).get_recipe(404)


class TestFavorites:
    def test_toggle_favorite(self, db, make_profile):
        ada = make_profile("ada@example.com")
        bola = make_profile("bola@example.com")
        service = RecipeService(db)
        recipe = _publish(service, ada.ProfileId)

        assert service.toggle_favorite(bola.ProfileId, recipe.id) is True
        assert service.get_recipe(recipe.id, viewer_id=bola.ProfileId).is_favorite
        assert [r.id for r in service.list_favorites(bola.ProfileId)] == [recipe.id]

        assert service.toggle_favorite(bola.ProfileId, recipe.id) is False
        assert service.list_favorites(bola.ProfileId) == []


class TestFormatting:
    def test_format_for_llm(self, db, make_profile):
        ada = make_profile("ada@example.com")
        recipe = _publish(RecipeService(db), ada.ProfileId, servings=4)

        text = RecipeService.format_for_llm(recipe)

        assert text.startswith("# Jollof Rice")
        assert "**Servings:** 4" in text
        assert "- rice" in text
        assert "2. Simmer" in text

    def test_categories(self):
        assert [c.id for c in RecipeService.categories()][:3] == ["breakfast", "lunch", "dinner"]
