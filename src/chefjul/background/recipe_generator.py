"""
Background recipe generation for a week's meal plan.

Fans out one LLM request per meal slot in fixed-size batches and writes
each result back to the meal plan document as it completes. Progress is
an atomic counter in `recipeGenerationStatus`, bumped once per attempted
slot (success or failure), so the UI's progress bar never stalls on a
failed item.

Cancellation is cooperative and only observed between batches: in-flight
items of the current batch are always written and counted.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, Literal

from chefjul.background.recipes import RecipeContext, generate_recipe, load_recipe_context
from chefjul.db.store import DocumentStore, Increment
from chefjul.models import DAYS, MEAL_TYPES, STATUS_FIELD, Recipe
from chefjul.weeks import meal_plan_path

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 5
DEFAULT_BATCH_DELAY_SECONDS = 0.5

PROGRESS_FIELD = f"{STATUS_FIELD}.progress"

RecipeGenerateFn = Callable[[dict[str, Any], RecipeContext], Awaitable[Recipe | dict[str, Any]]]
ContextLoaderFn = Callable[[DocumentStore, str], Awaitable[RecipeContext]]


def _utc_now() -> str:
    """Get current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


# =============================================================================
# Worklist
# =============================================================================


@dataclass(frozen=True)
class MealSlot:
    """One (day, meal type) pair, keyed as it appears in the document."""

    day: str
    meal_type: str
    meal: dict[str, Any]

    @property
    def recipe_field(self) -> str:
        return f"weekPlan.{self.day}.{self.meal_type}.recipe"

    @property
    def label(self) -> str:
        return f"{self.day}/{self.meal_type}"


def _find_key(mapping: dict[str, Any], name: str) -> str | None:
    """Case-insensitive key lookup; returns the key as stored."""
    if name in mapping:
        return name
    for key in mapping:
        if isinstance(key, str) and key.lower() == name:
            return key
    return None


def _is_eligible(meal: Any) -> bool:
    if not isinstance(meal, dict):
        return False
    name = meal.get("name")
    ingredients = meal.get("ingredients")
    return isinstance(name, str) and bool(name.strip()) and isinstance(ingredients, list) and len(ingredients) > 0


def build_worklist(week_plan: Any) -> list[MealSlot]:
    """
    Enumerate eligible meal slots, Monday to Sunday, breakfast to dinner.

    Missing days, null slots, and meals without a name or ingredients are
    skipped silently.
    """
    if not isinstance(week_plan, dict):
        return []

    worklist: list[MealSlot] = []
    for day in DAYS:
        day_key = _find_key(week_plan, day)
        day_meals = week_plan.get(day_key) if day_key else None
        if not isinstance(day_meals, dict):
            continue
        for meal_type in MEAL_TYPES:
            meal_key = _find_key(day_meals, meal_type)
            meal = day_meals.get(meal_key) if meal_key else None
            if _is_eligible(meal):
                worklist.append(MealSlot(day=day_key, meal_type=meal_key, meal=meal))
    return worklist


def batched(items: list[MealSlot], size: int) -> Iterator[list[MealSlot]]:
    if size < 1:
        raise ValueError("batch size must be at least 1")
    for start in range(0, len(items), size):
        yield items[start:start + size]


# =============================================================================
# Orchestrator
# =============================================================================


@dataclass
class RecipeRunResult:
    """Summary of one generation run (also visible through status writes)."""

    state: Literal["completed", "cancelled", "failed"]
    attempted: int = 0
    succeeded: int = 0
    batches_run: int = 0
    error: str | None = None

    @property
    def failed_items(self) -> int:
        return self.attempted - self.succeeded


class RecipeGenerator:
    """
    Generates recipes for every eligible slot of a week plan.

    Dependencies are injected so tests can supply an in-memory store and
    fake generation functions.
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        generate: RecipeGenerateFn = generate_recipe,
        load_context: ContextLoaderFn = load_recipe_context,
        batch_size: int = DEFAULT_BATCH_SIZE,
        batch_delay_seconds: float = DEFAULT_BATCH_DELAY_SECONDS,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.store = store
        self._generate = generate
        self._load_context = load_context
        self.batch_size = batch_size
        self.batch_delay_seconds = batch_delay_seconds

    async def generate(
        self,
        user_id: str,
        week_id: str,
        week_plan: Any,
        cancel_event: asyncio.Event | None = None,
    ) -> RecipeRunResult:
        """
        Run to completion, cancellation, or failure.

        Expects the start operation to have already written
        `isGenerating=true`. All externally visible effects are document
        writes; the returned summary is informational.
        """
        path = meal_plan_path(user_id, week_id)
        result = RecipeRunResult(state="completed")

        try:
            context = await self._safe_load_context(user_id)
            worklist = build_worklist(week_plan)
            batches = list(batched(worklist, self.batch_size))
            logger.info(
                f"Recipe generation started for {path}: "
                f"{len(worklist)} meals in {len(batches)} batches"
            )

            for index, batch in enumerate(batches):
                if await self._is_cancelled(path, cancel_event):
                    await self._finish(
                        path,
                        {
                            f"{STATUS_FIELD}.cancelled": True,
                            f"{STATUS_FIELD}.cancelledAt": _utc_now(),
                        },
                    )
                    result.state = "cancelled"
                    logger.info(f"Recipe generation cancelled for {path} after {result.attempted} meals")
                    return result

                outcomes = await asyncio.gather(
                    *(self._process_slot(path, slot, context) for slot in batch)
                )
                result.batches_run += 1
                result.attempted += len(outcomes)
                result.succeeded += sum(1 for ok in outcomes if ok)
                logger.debug(f"Batch {index + 1}/{len(batches)} done for {path}")

                if index < len(batches) - 1 and self.batch_delay_seconds > 0:
                    await asyncio.sleep(self.batch_delay_seconds)

            await self._finish(path, {f"{STATUS_FIELD}.completedAt": _utc_now()})
            logger.info(
                f"Recipe generation completed for {path}: "
                f"{result.succeeded}/{result.attempted} recipes"
            )
            return result

        except asyncio.CancelledError:
            # Task torn down by supervisor shutdown
            await self._mark_failed(path, "Recipe generation interrupted")
            raise

        except Exception as e:
            logger.exception(f"Recipe generation failed for {path}")
            await self._mark_failed(path, str(e) or type(e).__name__)
            result.state = "failed"
            result.error = str(e) or type(e).__name__
            return result

    async def _safe_load_context(self, user_id: str) -> RecipeContext:
        try:
            return await self._load_context(self.store, user_id)
        except Exception as e:
            logger.warning(f"Ignoring recipe context error for user {user_id}: {e}")
            return RecipeContext()

    async def _is_cancelled(self, path: str, cancel_event: asyncio.Event | None) -> bool:
        """
        Batch-boundary cancellation check.

        The document flag is the source of truth; a set flag is forwarded
        into the run's event. A locally set event also counts.
        """
        if cancel_event is not None and cancel_event.is_set():
            return True

        document = await self.store.get(path)
        status = (document or {}).get(STATUS_FIELD) or {}
        if status.get("cancelled"):
            if cancel_event is not None:
                cancel_event.set()
            return True
        return False

    async def _process_slot(self, path: str, slot: MealSlot, context: RecipeContext) -> bool:
        """
        Generate and persist one recipe; returns success.

        A failed recipe write is retried as a bare progress increment so
        the item is still counted. Raises only when progress itself
        cannot be recorded, which fails the run.
        """
        try:
            generated = await self._generate(slot.meal, context)
            recipe = generated if isinstance(generated, Recipe) else Recipe.model_validate(generated)
            fields = {
                slot.recipe_field: recipe.model_dump(by_alias=True),
                PROGRESS_FIELD: Increment(1),
            }
            succeeded = True
        except Exception as e:
            logger.warning(f"Recipe generation failed for {slot.label} ({slot.meal.get('name')}): {e}")
            fields = {PROGRESS_FIELD: Increment(1)}
            succeeded = False

        try:
            await self.store.update(path, fields)
        except Exception as e:
            if not succeeded:
                raise
            logger.error(f"Failed to save recipe for {slot.label} in {path}: {e}")
            await self.store.update(path, {PROGRESS_FIELD: Increment(1)})
            return False
        return succeeded

    async def _finish(self, path: str, fields: dict[str, Any]) -> None:
        await self.store.update(path, {f"{STATUS_FIELD}.isGenerating": False, **fields})

    async def _mark_failed(self, path: str, error: str) -> None:
        try:
            await self._finish(
                path,
                {
                    f"{STATUS_FIELD}.failed": True,
                    f"{STATUS_FIELD}.failedAt": _utc_now(),
                    f"{STATUS_FIELD}.error": error,
                },
            )
        except Exception as e:
            logger.error(f"Failed to mark recipe generation as failed for {path}: {e}")
