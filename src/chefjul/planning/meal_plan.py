"""
Meal plan parsing and persistence.

The LLM returns a loosely structured JSON week plan. parse_meal_plan()
normalises it into the stored shape:

    {"monday": {"breakfast": {...Meal...}, "lunch": ..., "dinner": ...}, ...}

Day and meal keys are matched case-insensitively; unknown keys are
dropped; slots that cannot be read as a Meal become None (the recipe
generator skips them).
"""

import json
import logging
import re
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError

from chefjul.db.store import DocumentStore
from chefjul.errors import DocumentNotFoundError, GenerationInProgressError
from chefjul.models import DAYS, MEAL_TYPES, STATUS_FIELD, Meal
from chefjul.weeks import meal_plan_path

logger = logging.getLogger(__name__)

_FRACTION = re.compile(r"^\s*(\d+)\s*/\s*(\d+)\s*$")
_MIXED_FRACTION = re.compile(r"^\s*(\d+)\s+(\d+)\s*/\s*(\d+)\s*$")
_LEADING_NUMBER = re.compile(r"^\s*(\d+(?:\.\d+)?)")


def extract_json(text: str) -> dict[str, Any]:
    """
    Parse a JSON object from model output.

    Accepts bare JSON or JSON inside a ```json fence. Raises ValueError
    if no object can be decoded.
    """
    fenced = re.search(r"```(?:json)?\s*(\{.*\})\s*```", text, re.DOTALL | re.IGNORECASE)
    if fenced:
        text = fenced.group(1)
    else:
        start, end = text.find("{"), text.rfind("}")
        if start != -1 and end > start:
            text = text[start:end + 1]

    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("Expected a JSON object")
    return data


def coerce_amount(value: Any) -> float:
    """Turn "1/2", "1 1/2", "200g", 3 into a number (0 if unreadable)."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return value
    if not isinstance(value, str):
        return 0

    if match := _MIXED_FRACTION.match(value):
        whole, num, den = (int(g) for g in match.groups())
        return whole + num / den if den else 0
    if match := _FRACTION.match(value):
        num, den = (int(g) for g in match.groups())
        return num / den if den else 0
    if match := _LEADING_NUMBER.match(value):
        return float(match.group(1))
    return 0


def _normalise_ingredient(raw: Any) -> dict[str, Any] | None:
    if isinstance(raw, str):
        return {"item": raw.strip()} if raw.strip() else None
    if not isinstance(raw, dict):
        return None
    item = raw.get("item") or raw.get("name")
    if not item:
        return None
    return {
        **raw,
        "item": str(item).strip(),
        "amount": coerce_amount(raw.get("amount")),
        "unit": raw.get("unit") or "",
        "category": raw.get("category") or "Other",
    }


def _normalise_meal(raw: Any) -> dict[str, Any] | None:
    if not isinstance(raw, dict):
        return None
    ingredients = [
        ing for ing in (_normalise_ingredient(i) for i in raw.get("ingredients") or []) if ing
    ]
    nutrition = raw.get("nutrition") if isinstance(raw.get("nutrition"), dict) else {}
    meal_data = {
        **raw,
        "ingredients": ingredients,
        "nutrition": {key: coerce_amount(value) for key, value in nutrition.items()},
    }
    # Plans never carry recipes; those come from the recipe generator
    meal_data.pop("recipe", None)

    try:
        meal = Meal.model_validate(meal_data)
    except ValidationError as e:
        logger.warning(f"Dropping unreadable meal {raw.get('name')!r}: {e.error_count()} errors")
        return None
    return meal.model_dump(by_alias=True, exclude_none=True)


def _lookup(mapping: dict[str, Any], name: str) -> Any:
    for key, value in mapping.items():
        if isinstance(key, str) and key.strip().lower() == name:
            return value
    return None


def parse_meal_plan(raw: dict[str, Any]) -> dict[str, dict[str, dict[str, Any] | None]]:
    """Normalise an LLM meal plan (with or without a "weekPlan" wrapper)."""
    plan = raw.get("weekPlan") if isinstance(raw.get("weekPlan"), dict) else raw

    week_plan: dict[str, dict[str, dict[str, Any] | None]] = {}
    for day in DAYS:
        day_meals = _lookup(plan, day)
        if not isinstance(day_meals, dict):
            continue
        week_plan[day] = {
            meal_type: _normalise_meal(_lookup(day_meals, meal_type)) for meal_type in MEAL_TYPES
        }
    return week_plan


def count_meals(week_plan: dict[str, Any]) -> int:
    return sum(
        1
        for day_meals in week_plan.values()
        if isinstance(day_meals, dict)
        for meal in day_meals.values()
        if meal
    )


async def save_meal_plan(
    store: DocumentStore,
    user_id: str,
    week_id: str,
    week_plan: dict[str, Any],
    extras: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Write (replace) the week's meal plan document.

    Refuses while a recipe generation run is active for the week, since
    the run writes into the plan it was started with. The replace of an
    existing plan is conditional on `isGenerating`, so a run claimed
    after the read still wins.
    """
    path = meal_plan_path(user_id, week_id)
    existing = await store.get(path)

    now = datetime.now(UTC).isoformat()
    document = {
        **(extras or {}),
        "id": week_id,
        "weekPlan": week_plan,
        "createdAt": (existing or {}).get("createdAt", now),
        "updatedAt": now,
    }

    if existing is None:
        await store.set(path, document)
    else:
        try:
            replaced = await store.set_if(path, f"{STATUS_FIELD}.isGenerating", True, document)
        except DocumentNotFoundError:
            await store.set(path, document)
            replaced = True
        if not replaced:
            logger.info(f"Refused meal plan save for {path}: recipe generation in progress")
            raise GenerationInProgressError(week_id)

    logger.info(f"Saved meal plan {path} ({count_meals(week_plan)} meals)")
    return document


async def load_meal_plan(store: DocumentStore, user_id: str, week_id: str) -> dict[str, Any] | None:
    return await store.get(meal_plan_path(user_id, week_id))
