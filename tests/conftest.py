"""
Pytest configuration and fixtures for Chef Jul tests.
"""

import os

import pytest

# Set test environment before importing chefjul modules
os.environ["CHEF_ENV"] = "development"
os.environ["DOCUMENT_STORE"] = "memory"
os.environ.setdefault("OPENAI_API_KEY", "test-key-not-real")

from chefjul.db.memory import MemoryDocumentStore  # noqa: E402
from chefjul.models import DAYS, MEAL_TYPES  # noqa: E402

USER_ID = "user-1"
WEEK_ID = "2025-W07"
PLAN_PATH = f"users/{USER_ID}/mealPlans/{WEEK_ID}"


def make_meal(name: str) -> dict:
    return {
        "name": name,
        "description": f"A simple {name.lower()}",
        "ingredients": [
            {"item": "olive oil", "amount": 1, "unit": "tbsp", "category": "Pantry"},
            {"item": f"{name} base", "amount": 200, "unit": "g", "category": "Other"},
        ],
        "nutrition": {"calories": 500, "protein": 30, "carbs": 50, "fats": 20},
    }


def make_week_plan() -> dict:
    """A full 7x3 plan; every slot is eligible."""
    return {
        day: {meal_type: make_meal(f"{day.title()} {meal_type}") for meal_type in MEAL_TYPES}
        for day in DAYS
    }


def make_recipe(**overrides) -> dict:
    recipe = {
        "prepTime": "10 minutes",
        "cookTime": "20 minutes",
        "servings": 2,
        "difficulty": "Easy",
        "steps": [
            "Prep the vegetables.",
            "Heat the pan.",
            "Cook the protein.",
            "Combine everything.",
            "Season and serve.",
        ],
        "tips": ["Use a hot pan.", "Rest before serving."],
    }
    recipe.update(overrides)
    return recipe


@pytest.fixture
def week_plan():
    """Full week plan (21 eligible slots)."""
    return make_week_plan()


@pytest.fixture
def sample_recipe():
    """Valid recipe in stored (camelCase) form."""
    return make_recipe()


@pytest.fixture
def store(week_plan):
    """Memory store seeded with a user document and one meal plan."""
    return MemoryDocumentStore({
        f"users/{USER_ID}": {
            "dietaryRestrictions": ["vegetarian"],
            "allergies": ["peanuts"],
        },
        PLAN_PATH: {"id": WEEK_ID, "weekPlan": week_plan},
    })


@pytest.fixture
def empty_store():
    return MemoryDocumentStore()
