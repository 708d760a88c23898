"""Tests for domain models and status state derivation."""

import pytest
from pydantic import ValidationError

from chefjul.models import TOTAL_MEAL_SLOTS, Meal, Recipe, RecipeGenerationStatus


class TestRecipe:
    def test_accepts_camel_case(self, sample_recipe):
        recipe = Recipe.model_validate(sample_recipe)
        assert recipe.prep_time == "10 minutes"
        assert recipe.model_dump(by_alias=True)["cookTime"] == "20 minutes"

    def test_too_few_steps(self, sample_recipe):
        sample_recipe["steps"] = ["one", "two"]
        with pytest.raises(ValidationError):
            Recipe.model_validate(sample_recipe)

    def test_too_many_tips(self, sample_recipe):
        sample_recipe["tips"] = ["a", "b", "c", "d"]
        with pytest.raises(ValidationError):
            Recipe.model_validate(sample_recipe)

    def test_unknown_difficulty(self, sample_recipe):
        sample_recipe["difficulty"] = "Impossible"
        with pytest.raises(ValidationError):
            Recipe.model_validate(sample_recipe)


class TestMeal:
    def test_keeps_extra_fields(self):
        meal = Meal.model_validate({"name": "Soup", "mealTime": "12:00"})
        assert meal.model_dump(by_alias=True)["mealTime"] == "12:00"

    def test_image_url_alias(self):
        meal = Meal.model_validate({"name": "Soup", "imageUrl": "https://img"})
        assert meal.image_url == "https://img"


class TestRecipeGenerationStatus:
    def test_defaults(self):
        status = RecipeGenerationStatus()
        assert status.total == TOTAL_MEAL_SLOTS == 21
        assert status.state == "idle"
        assert not status.is_terminal

    def test_generating(self):
        status = RecipeGenerationStatus.model_validate({"isGenerating": True, "progress": 3})
        assert status.state == "generating"

    def test_completed(self):
        status = RecipeGenerationStatus.model_validate({"isGenerating": False, "completedAt": "t"})
        assert status.state == "completed"
        assert status.is_terminal

    def test_cancelled(self):
        status = RecipeGenerationStatus.model_validate(
            {"isGenerating": False, "cancelled": True, "cancelledAt": "t"}
        )
        assert status.state == "cancelled"

    def test_failed(self):
        status = RecipeGenerationStatus.model_validate(
            {"isGenerating": False, "failed": True, "failedAt": "t", "error": "boom"}
        )
        assert status.state == "failed"

    def test_cancel_request_after_completion_stays_completed(self):
        status = RecipeGenerationStatus.model_validate(
            {"isGenerating": False, "completedAt": "t1", "cancelled": True, "cancelledAt": "t2"}
        )
        assert status.state == "completed"

    def test_dump_uses_camel_case(self):
        dumped = RecipeGenerationStatus(is_generating=True, started_at="t").model_dump(by_alias=True)
        assert dumped["isGenerating"] is True
        assert dumped["startedAt"] == "t"
        assert "is_generating" not in dumped
