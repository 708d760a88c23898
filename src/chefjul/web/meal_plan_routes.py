"""
Meal plan document endpoints.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from chefjul.db.store import DocumentStore
from chefjul.errors import ChefJulError, InvalidRequestError, MealPlanNotFoundError
from chefjul.planning.meal_plan import load_meal_plan, parse_meal_plan, save_meal_plan
from chefjul.planning.nutrition import summarize_week
from chefjul.web.auth import AuthenticatedUser, get_current_user
from chefjul.web.deps import get_store, to_http_error
from chefjul.weeks import is_valid_week_id, user_path

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/meal-plans", tags=["meal-plans"])


class MealPlanUpdate(BaseModel):
    week_plan: dict[str, Any] = Field(alias="weekPlan")
    grocery_list: Any = Field(default=None, alias="groceryList")
    text: dict[str, Any] | None = None


async def _require_plan(store: DocumentStore, user_id: str, week_id: str) -> dict[str, Any]:
    if not is_valid_week_id(week_id):
        raise InvalidRequestError(f"Invalid week id: {week_id!r}")
    document = await load_meal_plan(store, user_id, week_id)
    if document is None:
        raise MealPlanNotFoundError(user_id, week_id)
    return document


@router.get("/{week_id}")
async def get_meal_plan(
    week_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    try:
        return await _require_plan(store, user.id, week_id)
    except ChefJulError as e:
        raise to_http_error(e) from e


@router.put("/{week_id}")
async def put_meal_plan(
    week_id: str,
    body: MealPlanUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    """Replace the week's plan. Refused with 409 while recipes are generating."""
    if not is_valid_week_id(week_id):
        raise HTTPException(status_code=400, detail=f"Invalid week id: {week_id!r}")

    week_plan = parse_meal_plan(body.week_plan)
    extras = {}
    if body.grocery_list is not None:
        extras["groceryList"] = body.grocery_list
    if body.text is not None:
        extras["text"] = body.text

    try:
        return await save_meal_plan(store, user.id, week_id, week_plan, extras)
    except ChefJulError as e:
        raise to_http_error(e) from e


@router.get("/{week_id}/nutrition")
async def get_nutrition(
    week_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    """Daily and weekly nutrition totals plus ingredient frequency."""
    try:
        document = await _require_plan(store, user.id, week_id)
    except ChefJulError as e:
        raise to_http_error(e) from e

    try:
        user_document = await store.get(user_path(user.id))
    except Exception as e:
        logger.warning(f"Could not load nutrition goals for {user.id}: {e}")
        user_document = None

    return {"weekId": week_id, **summarize_week(document.get("weekPlan") or {}, user_document)}
