"""
Chef Jul - Domain models.

Documents are stored with camelCase keys (the browser client reads them
directly), so models use snake_case fields with camelCase aliases.
Dump with `by_alias=True` before writing to the store.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


DAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
MEAL_TYPES = ["breakfast", "lunch", "dinner"]

# Nominal slot count of a full week plan (7 days x 3 meals)
TOTAL_MEAL_SLOTS = len(DAYS) * len(MEAL_TYPES)

STATUS_FIELD = "recipeGenerationStatus"


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# Meal Plan
# =============================================================================


class Ingredient(CamelModel):
    item: str
    amount: float = 0
    unit: str = ""
    category: str = "Other"


class Nutrition(CamelModel):
    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fats: float = 0


class Recipe(CamelModel):
    """
    Cooking instructions for one meal slot.

    Also the structured-output schema for recipe generation: a response
    outside these bounds fails validation and counts as a failed item.
    """

    prep_time: str = Field(description="Preparation time, e.g. '15 minutes'")
    cook_time: str = Field(description="Cooking time, e.g. '25 minutes'")
    servings: int = Field(ge=1)
    difficulty: Literal["Easy", "Medium", "Hard"]
    steps: list[str] = Field(min_length=5, max_length=8)
    tips: list[str] = Field(min_length=2, max_length=3)


class Meal(CamelModel):
    model_config = ConfigDict(extra="allow")

    name: str = ""
    description: str = ""
    ingredients: list[Ingredient] = Field(default_factory=list)
    nutrition: Nutrition = Field(default_factory=Nutrition)
    recipe: Recipe | None = None
    image_url: str | None = None


# day -> meal type -> meal
WeekPlan = dict[str, dict[str, Meal | None]]


# =============================================================================
# Recipe Generation Status
# =============================================================================


class RecipeGenerationStatus(CamelModel):
    """Progress record embedded in the meal plan document."""

    is_generating: bool = False
    progress: int = 0
    total: int = TOTAL_MEAL_SLOTS
    started_at: str | None = None
    completed_at: str | None = None
    cancelled: bool = False
    cancelled_at: str | None = None
    failed: bool = False
    failed_at: str | None = None
    error: str | None = None

    @property
    def state(self) -> Literal["idle", "generating", "completed", "cancelled", "failed"]:
        if self.is_generating:
            return "generating"
        if self.failed_at:
            return "failed"
        if self.cancelled_at and not self.completed_at:
            return "cancelled"
        if self.completed_at:
            return "completed"
        return "idle"

    @property
    def is_terminal(self) -> bool:
        return self.state in ("completed", "cancelled", "failed")
