"""
Chef Jul - Background Jobs Package.

Recipe generation for a week's meal plan:
- RecipeGenerator: batched fan-out with progress and cancellation
- RecipeJobSupervisor: owns the fire-and-forget tasks
- start / cancel / status control functions
"""

from chefjul.background.recipe_generator import (
    MealSlot,
    RecipeGenerator,
    RecipeRunResult,
    build_worklist,
)
from chefjul.background.recipe_jobs import (
    cancel_recipe_generation,
    get_recipe_generation_status,
    start_recipe_generation,
)
from chefjul.background.recipes import RecipeContext, generate_recipe, load_recipe_context
from chefjul.background.supervisor import RecipeJobSupervisor

__all__ = [
    "MealSlot",
    "RecipeContext",
    "RecipeGenerator",
    "RecipeJobSupervisor",
    "RecipeRunResult",
    "build_worklist",
    "cancel_recipe_generation",
    "generate_recipe",
    "get_recipe_generation_status",
    "load_recipe_context",
    "start_recipe_generation",
]
