"""
Tests for recipe job control (start / cancel / status) and the supervisor.
"""

import asyncio

import pytest

from chefjul.background.recipe_generator import RecipeGenerator
from chefjul.background.recipe_jobs import (
    cancel_recipe_generation,
    get_recipe_generation_status,
    initial_status,
    start_recipe_generation,
)
from chefjul.background.supervisor import RecipeJobSupervisor
from chefjul.errors import GenerationInProgressError, InvalidRequestError, MealPlanNotFoundError
from chefjul.models import STATUS_FIELD

from conftest import PLAN_PATH, USER_ID, WEEK_ID, make_recipe


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio needed)."""
    return asyncio.run(coro)


async def _fake_generate(meal, context):
    await asyncio.sleep(0)
    return make_recipe()


def _generator(store) -> RecipeGenerator:
    return RecipeGenerator(store, generate=_fake_generate, batch_delay_seconds=0)


class TestStart:
    def test_start_returns_immediately_and_run_completes(self, store):
        supervisor = RecipeJobSupervisor()

        async def scenario():
            response = await start_recipe_generation(
                USER_ID, WEEK_ID, generator=_generator(store), supervisor=supervisor
            )
            started = (await store.get(PLAN_PATH))[STATUS_FIELD]
            result = await supervisor.get(USER_ID, WEEK_ID).task
            return response, started, result, await store.get(PLAN_PATH)

        response, started, result, doc = _run(scenario())

        assert response == {"success": True, "weekId": WEEK_ID}
        assert started["isGenerating"] is True
        assert started["progress"] == 0
        assert started["total"] == 21
        assert started["startedAt"]
        assert result.state == "completed"
        assert doc[STATUS_FIELD]["progress"] == 21
        assert doc[STATUS_FIELD]["isGenerating"] is False

    def test_rejected_while_generating_without_mutation(self, store):
        """A start during an active run signals rejection and leaves the status untouched."""
        status = {**initial_status("2025-02-10T08:00:00+00:00"), "progress": 7}

        async def scenario():
            await store.update(PLAN_PATH, {STATUS_FIELD: status})
            with pytest.raises(GenerationInProgressError):
                await start_recipe_generation(
                    USER_ID, WEEK_ID, generator=_generator(store), supervisor=RecipeJobSupervisor()
                )
            return (await store.get(PLAN_PATH))[STATUS_FIELD]

        assert _run(scenario()) == status

    def test_concurrent_starts_only_one_wins(self, store):
        supervisor = RecipeJobSupervisor()
        writes = []

        generator = _generator(store)
        original_update_if = store.update_if

        async def counting_update_if(*args, **kwargs):
            applied = await original_update_if(*args, **kwargs)
            writes.append(applied)
            return applied

        store.update_if = counting_update_if

        async def scenario():
            results = await asyncio.gather(
                start_recipe_generation(USER_ID, WEEK_ID, generator=generator, supervisor=supervisor),
                start_recipe_generation(USER_ID, WEEK_ID, generator=generator, supervisor=supervisor),
                return_exceptions=True,
            )
            await supervisor.shutdown(timeout=5)
            return results

        results = _run(scenario())

        assert sum(1 for r in results if isinstance(r, dict)) == 1
        assert sum(1 for r in results if isinstance(r, GenerationInProgressError)) == 1
        assert writes.count(True) == 1

    def test_restart_after_completion(self, store):
        supervisor = RecipeJobSupervisor()

        async def scenario():
            for _ in range(2):
                await start_recipe_generation(
                    USER_ID, WEEK_ID, generator=_generator(store), supervisor=supervisor
                )
                await supervisor.get(USER_ID, WEEK_ID).task
            return (await store.get(PLAN_PATH))[STATUS_FIELD]

        status = _run(scenario())
        assert status["progress"] == 21
        assert status["completedAt"]

    def test_missing_meal_plan(self, empty_store):
        with pytest.raises(MealPlanNotFoundError):
            _run(start_recipe_generation(
                USER_ID, WEEK_ID, generator=_generator(empty_store), supervisor=RecipeJobSupervisor()
            ))

    @pytest.mark.parametrize("user_id,week_id", [("", WEEK_ID), (USER_ID, ""), (USER_ID, "2025-07")])
    def test_invalid_input(self, store, user_id, week_id):
        with pytest.raises(InvalidRequestError):
            _run(start_recipe_generation(
                user_id, week_id, generator=_generator(store), supervisor=RecipeJobSupervisor()
            ))


class TestCancel:
    def test_writes_flag(self, store):
        async def scenario():
            response = await cancel_recipe_generation(USER_ID, WEEK_ID, store=store)
            return response, (await store.get(PLAN_PATH))[STATUS_FIELD]

        response, status = _run(scenario())
        assert response == {"success": True}
        assert status["cancelled"] is True
        assert status["cancelledAt"]

    def test_stops_running_job(self, store):
        supervisor = RecipeJobSupervisor()
        gate = {}

        async def slow_generate(meal, context):
            await gate["event"].wait()
            return make_recipe()

        generator = RecipeGenerator(store, generate=slow_generate, batch_delay_seconds=0)

        async def scenario():
            gate["event"] = asyncio.Event()
            await start_recipe_generation(USER_ID, WEEK_ID, generator=generator, supervisor=supervisor)
            await asyncio.sleep(0.01)  # first batch in flight
            await cancel_recipe_generation(USER_ID, WEEK_ID, store=store, supervisor=supervisor)
            gate["event"].set()
            result = await supervisor.get(USER_ID, WEEK_ID).task
            return result, (await store.get(PLAN_PATH))[STATUS_FIELD]

        result, status = _run(scenario())
        assert result.state == "cancelled"
        assert result.attempted == 5
        assert status["progress"] == 5
        assert status["isGenerating"] is False

    def test_missing_meal_plan(self, empty_store):
        with pytest.raises(MealPlanNotFoundError):
            _run(cancel_recipe_generation(USER_ID, WEEK_ID, store=empty_store))


class TestStatus:
    def test_never_started(self, store):
        assert _run(get_recipe_generation_status(USER_ID, WEEK_ID, store=store)) is None

    def test_reads_status(self, store):
        async def scenario():
            await store.update(PLAN_PATH, {STATUS_FIELD: initial_status("t")})
            return await get_recipe_generation_status(USER_ID, WEEK_ID, store=store)

        status = _run(scenario())
        assert status.state == "generating"
        assert status.total == 21

    def test_missing_meal_plan(self, empty_store):
        with pytest.raises(MealPlanNotFoundError):
            _run(get_recipe_generation_status(USER_ID, WEEK_ID, store=empty_store))


class TestSupervisor:
    def test_duplicate_spawn_rejected(self):
        supervisor = RecipeJobSupervisor()

        async def scenario():
            supervisor.spawn("u", "w", lambda ev: ev.wait())
            with pytest.raises(RuntimeError):
                supervisor.spawn("u", "w", lambda ev: ev.wait())
            assert supervisor.running_count == 1
            assert supervisor.cancel("u", "w") is True
            await supervisor.get("u", "w").task
            await asyncio.sleep(0)  # let the done callback run

        _run(scenario())
        assert supervisor.running_count == 0
        assert supervisor.get("u", "w") is None
        assert supervisor.cancel("u", "w") is False

    def test_shutdown_cancels_stubborn_tasks(self):
        supervisor = RecipeJobSupervisor()

        async def scenario():
            job = supervisor.spawn("u", "w", lambda ev: asyncio.sleep(60))
            await supervisor.shutdown(timeout=0.01)
            return job

        job = _run(scenario())
        assert job.task.cancelled()
        assert job.cancel_event.is_set()

    def test_shutdown_leaves_consistent_cancelled_status(self, store):
        supervisor = RecipeJobSupervisor()

        async def slow_generate(meal, context):
            await asyncio.sleep(0.01)
            return make_recipe()

        generator = RecipeGenerator(store, generate=slow_generate, batch_delay_seconds=0)

        async def scenario():
            await start_recipe_generation(USER_ID, WEEK_ID, generator=generator, supervisor=supervisor)
            await asyncio.sleep(0)  # run reaches its first batch
            await supervisor.shutdown(timeout=5)
            return await get_recipe_generation_status(USER_ID, WEEK_ID, store=store)

        status = _run(scenario())
        assert status.state == "cancelled"
        assert status.cancelled is True
        assert status.cancelled_at
        assert status.is_generating is False
        assert status.progress == 5
