"""
ISO week identifiers and document paths.

Meal plans are keyed by ISO week: "YYYY-Www" (e.g. "2025-W44"), where the
year is the ISO week-year and weeks start on Monday.
"""

import re
from datetime import date, datetime

WEEK_ID_PATTERN = re.compile(r"^(\d{4})-W(\d{2})$")


def get_week_id(day: date | datetime) -> str:
    """Week identifier for the ISO week containing `day`."""
    iso_year, iso_week, _ = day.isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def get_current_week_id() -> str:
    return get_week_id(date.today())


def parse_week_id(week_id: str) -> date:
    """
    Validate a week id and return the Monday of that week.

    Raises ValueError for malformed ids and for week numbers the
    ISO week-year does not have (e.g. W53 in a 52-week year).
    """
    match = WEEK_ID_PATTERN.match(week_id or "")
    if not match:
        raise ValueError(f"Invalid week id: {week_id!r} (expected YYYY-Www)")

    year, week = int(match.group(1)), int(match.group(2))
    try:
        monday = date.fromisocalendar(year, week, 1)
    except ValueError as e:
        raise ValueError(f"Invalid week id: {week_id!r} ({e})") from e
    return monday


def is_valid_week_id(week_id: str) -> bool:
    try:
        parse_week_id(week_id)
    except ValueError:
        return False
    return True


def user_path(user_id: str) -> str:
    return f"users/{user_id}"


def meal_plan_path(user_id: str, week: str | date | datetime) -> str:
    """Document path for a user's meal plan; `week` is a week id or a date."""
    week_id = week if isinstance(week, str) else get_week_id(week)
    return f"users/{user_id}/mealPlans/{week_id}"
