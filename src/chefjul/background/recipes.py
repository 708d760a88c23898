"""
Per-meal recipe generation.

One structured LLM call per meal slot. Any failure (API error, timeout,
response outside the Recipe schema) propagates to the caller, which
counts the slot as attempted and moves on.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from chefjul.db.store import DocumentStore
from chefjul.llm.client import call_llm
from chefjul.models import Recipe
from chefjul.prompts import RECIPE_SYSTEM_PROMPT, format_recipe_prompt
from chefjul.weeks import user_path

logger = logging.getLogger(__name__)


@dataclass
class RecipeContext:
    """Caller context injected into every recipe prompt of a run."""

    dietary_restrictions: list[str] = field(default_factory=list)
    allergies: list[str] = field(default_factory=list)


def _as_str_list(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, list):
        return [str(v) for v in value if v]
    return []


async def load_recipe_context(store: DocumentStore, user_id: str) -> RecipeContext:
    """
    Read dietary restrictions and allergies from the user document.

    Best effort: a missing document or a store error yields an empty
    context, never an exception.
    """
    try:
        user_doc = await store.get(user_path(user_id)) or {}
    except Exception as e:
        logger.warning(f"Could not load recipe context for user {user_id}: {e}")
        return RecipeContext()

    return RecipeContext(
        dietary_restrictions=_as_str_list(user_doc.get("dietaryRestrictions")),
        allergies=_as_str_list(user_doc.get("allergies")),
    )


def format_ingredients(ingredients: list[dict[str, Any]]) -> str:
    """Render ingredients as "- 200 g chicken breast" lines."""
    lines = []
    for ing in ingredients:
        if not isinstance(ing, dict):
            lines.append(f"- {ing}")
            continue
        amount = ing.get("amount")
        if isinstance(amount, float) and amount.is_integer():
            amount = int(amount)
        quantity = " ".join(str(p) for p in (amount, ing.get("unit")) if p not in (None, "", 0))
        item = ing.get("item", "")
        lines.append(f"- {quantity} {item}".replace("  ", " ").rstrip())
    return "\n".join(lines)


async def generate_recipe(meal: dict[str, Any], context: RecipeContext) -> Recipe:
    """Generate the recipe for one meal."""
    user_prompt = format_recipe_prompt(
        name=meal.get("name", ""),
        description=meal.get("description") or "",
        ingredients=format_ingredients(meal.get("ingredients") or []),
        dietary_restrictions=context.dietary_restrictions,
        allergies=context.allergies,
    )
    return await call_llm(
        response_model=Recipe,
        system_prompt=RECIPE_SYSTEM_PROMPT,
        user_prompt=user_prompt,
        node="recipe",
        complexity="medium",
    )
