"""
Recipe generation job control.

start / cancel / status for a week's recipe generation run. The status
record lives in the meal plan document (`recipeGenerationStatus`); start
and cancel are the only writers outside the generator itself.

Status lifecycle:
    idle -> generating -> completed | cancelled | failed -> generating ...
"""

import logging
from datetime import UTC, datetime
from typing import Any

from chefjul.background.recipe_generator import RecipeGenerator
from chefjul.background.supervisor import RecipeJobSupervisor
from chefjul.db.store import DocumentStore
from chefjul.errors import (
    DocumentNotFoundError,
    GenerationInProgressError,
    InvalidRequestError,
    MealPlanNotFoundError,
)
from chefjul.models import STATUS_FIELD, TOTAL_MEAL_SLOTS, RecipeGenerationStatus
from chefjul.weeks import meal_plan_path, parse_week_id

logger = logging.getLogger(__name__)


def _utc_now() -> str:
    """Get current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


def _validate(user_id: str, week_id: str) -> None:
    if not user_id or not isinstance(user_id, str):
        raise InvalidRequestError("userId is required")
    if not week_id or not isinstance(week_id, str):
        raise InvalidRequestError("weekId is required")
    try:
        parse_week_id(week_id)
    except ValueError as e:
        raise InvalidRequestError(str(e)) from e


def initial_status(started_at: str) -> dict[str, Any]:
    """
    Status written by start.

    `total` is always the nominal slot count, even when some slots are
    skipped, so such a run finishes with progress < total.
    """
    return RecipeGenerationStatus(
        is_generating=True,
        progress=0,
        total=TOTAL_MEAL_SLOTS,
        started_at=started_at,
    ).model_dump(by_alias=True)


async def start_recipe_generation(
    user_id: str,
    week_id: str,
    *,
    generator: RecipeGenerator,
    supervisor: RecipeJobSupervisor,
) -> dict[str, Any]:
    """
    Start generating recipes for a week and return immediately.

    The guard is a conditional write on `isGenerating`, so of two
    concurrent starts only one can win. The plan is read after the
    claim and the run is handed to the supervisor as a background task.

    Raises:
        InvalidRequestError: missing user id or malformed week id
        MealPlanNotFoundError: no meal plan document for the week
        GenerationInProgressError: a run is already active
    """
    _validate(user_id, week_id)
    store = generator.store
    path = meal_plan_path(user_id, week_id)

    try:
        claimed = await store.update_if(
            path,
            f"{STATUS_FIELD}.isGenerating",
            True,
            {STATUS_FIELD: initial_status(_utc_now())},
        )
    except DocumentNotFoundError as e:
        raise MealPlanNotFoundError(user_id, week_id) from e

    if not claimed:
        logger.info(f"Rejected recipe generation start for {path}: already in progress")
        raise GenerationInProgressError(week_id)

    # Read after the claim: plan saves are refused from here on
    document = await store.get(path) or {}
    week_plan = document.get("weekPlan") or {}
    supervisor.spawn(
        user_id,
        week_id,
        lambda cancel_event: generator.generate(user_id, week_id, week_plan, cancel_event),
    )
    logger.info(f"Recipe generation started for {path}")
    return {"success": True, "weekId": week_id}


async def cancel_recipe_generation(
    user_id: str,
    week_id: str,
    *,
    store: DocumentStore,
    supervisor: RecipeJobSupervisor | None = None,
) -> dict[str, Any]:
    """
    Request cancellation of a week's run.

    Always writes the flag (a harmless no-op write when nothing is
    running); the generator stops before its next batch.
    """
    _validate(user_id, week_id)
    path = meal_plan_path(user_id, week_id)

    try:
        await store.update(
            path,
            {
                f"{STATUS_FIELD}.cancelled": True,
                f"{STATUS_FIELD}.cancelledAt": _utc_now(),
            },
        )
    except DocumentNotFoundError as e:
        raise MealPlanNotFoundError(user_id, week_id) from e

    if supervisor is not None and supervisor.cancel(user_id, week_id):
        logger.info(f"Signalled local recipe job for {path}")
    return {"success": True}


async def get_recipe_generation_status(
    user_id: str,
    week_id: str,
    *,
    store: DocumentStore,
) -> RecipeGenerationStatus | None:
    """Current status record, or None if the week never ran a generation."""
    _validate(user_id, week_id)
    document = await store.get(meal_plan_path(user_id, week_id))
    if document is None:
        raise MealPlanNotFoundError(user_id, week_id)

    status = document.get(STATUS_FIELD)
    if not isinstance(status, dict):
        return None
    return RecipeGenerationStatus.model_validate(status)
