"""
Weekly nutrition summary.

Totals calories and macros per day and for the whole week, and counts how
often each ingredient appears. Optional goals come from the user document:

    dailyCalorieTarget, proteinGoalGrams, carbsGoalGrams, fatsGoalGrams
"""

from collections import Counter
from typing import Any

from chefjul.models import DAYS, MEAL_TYPES

MACROS = ("calories", "protein", "carbs", "fats")

GOAL_FIELDS = {
    "calories": "dailyCalorieTarget",
    "protein": "proteinGoalGrams",
    "carbs": "carbsGoalGrams",
    "fats": "fatsGoalGrams",
}


def _number(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    return value


def _meals(day_meals: Any) -> list[dict[str, Any]]:
    if not isinstance(day_meals, dict):
        return []
    return [m for m in day_meals.values() if isinstance(m, dict)]


def read_goals(user_document: dict[str, Any] | None) -> dict[str, float]:
    """Daily goals keyed by macro; missing goals are 0."""
    source = user_document or {}
    if isinstance(source.get("goals"), dict):
        source = {**source, **source["goals"]}
    return {macro: _number(source.get(field)) for macro, field in GOAL_FIELDS.items()}


def day_nutrition(day_meals: Any, goals: dict[str, float] | None = None) -> dict[str, float]:
    totals = {macro: 0 for macro in MACROS}
    for meal in _meals(day_meals):
        nutrition = meal.get("nutrition") or {}
        for macro in MACROS:
            totals[macro] += _number(nutrition.get(macro))

    goals = goals or {}
    for macro in MACROS:
        totals[f"{macro}Goal"] = goals.get(macro, 0)
    return totals


def day_ingredients(day_meals: Any) -> list[dict[str, Any]]:
    """All ingredients of a day, each tagged with the meal it belongs to."""
    return [
        {**ing, "mealName": meal.get("name") or "Unknown Meal"}
        for meal in _meals(day_meals)
        for ing in meal.get("ingredients") or []
        if isinstance(ing, dict)
    ]


def ingredient_counts(week_plan: dict[str, Any]) -> list[dict[str, Any]]:
    """Ingredient frequency across the week, most frequent first."""
    counts: Counter[str] = Counter()
    for day_meals in week_plan.values():
        for meal in _meals(day_meals):
            for ing in meal.get("ingredients") or []:
                name = ing.get("item", "").strip() if isinstance(ing, dict) else ""
                if name:
                    counts[name] += 1
    return [{"name": name, "count": count} for name, count in counts.most_common()]


def summarize_week(
    week_plan: dict[str, Any],
    user_document: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build the nutrition summary for a week plan.

    Days are listed in calendar order; days missing from the plan report
    zero totals. Weekly goals are seven times the daily goals.
    """
    goals = read_goals(user_document)

    days = []
    weekly = {macro: 0 for macro in MACROS}
    meal_count = 0
    for day in DAYS:
        day_meals = week_plan.get(day)
        if not isinstance(day_meals, dict):
            day_meals = {}
        totals = day_nutrition(day_meals, goals)
        for macro in MACROS:
            weekly[macro] += totals[macro]
        meal_count += len(_meals(day_meals))

        names = {}
        for meal_type in MEAL_TYPES:
            meal = day_meals.get(meal_type)
            names[meal_type] = meal.get("name") if isinstance(meal, dict) else None

        days.append({
            "day": day,
            "totals": totals,
            "meals": names,
            "ingredients": day_ingredients(day_meals),
        })

    for macro in MACROS:
        weekly[f"{macro}Goal"] = goals[macro] * len(DAYS)

    return {
        "days": days,
        "weekly": weekly,
        "mealCount": meal_count,
        "topIngredients": ingredient_counts(week_plan),
    }
