"""
Recipe generation endpoints.

Start, cancel and observe the background recipe run for one week of the
signed-in user's meal plan. The run itself is owned by the job
supervisor; these handlers only write the status record and read it back.
"""

import asyncio
import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sse_starlette.sse import EventSourceResponse

from chefjul.background.recipe_generator import RecipeGenerator
from chefjul.background.recipe_jobs import (
    cancel_recipe_generation,
    get_recipe_generation_status,
    start_recipe_generation,
)
from chefjul.background.supervisor import RecipeJobSupervisor
from chefjul.db.store import DocumentStore
from chefjul.errors import ChefJulError
from chefjul.web.auth import AuthenticatedUser, get_current_user
from chefjul.web.deps import get_recipe_generator, get_store, get_supervisor, to_http_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/meal-plans/{week_id}/recipes", tags=["recipes"])

# Seconds between status reads while streaming
STATUS_POLL_INTERVAL = 1.0


@router.post("/generate", status_code=202)
async def generate_recipes(
    week_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    generator: RecipeGenerator = Depends(get_recipe_generator),
    supervisor: RecipeJobSupervisor = Depends(get_supervisor),
):
    """Start recipe generation for the week. Returns before any recipe exists."""
    try:
        return await start_recipe_generation(
            user.id, week_id, generator=generator, supervisor=supervisor
        )
    except ChefJulError as e:
        raise to_http_error(e) from e


@router.post("/cancel")
async def cancel_recipes(
    week_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    supervisor: RecipeJobSupervisor = Depends(get_supervisor),
):
    """Ask the running generation to stop before its next batch."""
    try:
        return await cancel_recipe_generation(user.id, week_id, store=store, supervisor=supervisor)
    except ChefJulError as e:
        raise to_http_error(e) from e


@router.get("/status")
async def recipe_status(
    week_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    try:
        status = await get_recipe_generation_status(user.id, week_id, store=store)
    except ChefJulError as e:
        raise to_http_error(e) from e

    if status is None:
        raise HTTPException(status_code=404, detail="No recipe generation for this week")
    return {**status.model_dump(by_alias=True), "state": status.state}


@router.get("/status/stream")
async def recipe_status_stream(
    week_id: str,
    request: Request,
    user: AuthenticatedUser = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    """
    Stream status changes as SSE `status` events.

    Emits the current status first, then every change. The stream ends
    once the run reaches a terminal state (completed, cancelled, failed)
    or the client disconnects.
    """
    try:
        # Validate up front so a bad week or missing plan is a normal HTTP error
        await get_recipe_generation_status(user.id, week_id, store=store)
    except ChefJulError as e:
        raise to_http_error(e) from e

    async def event_generator():
        last_sent = None
        try:
            while True:
                if await request.is_disconnected():
                    break

                try:
                    status = await get_recipe_generation_status(user.id, week_id, store=store)
                except ChefJulError as e:
                    yield {"event": "error", "data": json.dumps({"message": str(e)})}
                    break

                if status is not None:
                    payload = {**status.model_dump(by_alias=True), "state": status.state}
                    if payload != last_sent:
                        last_sent = payload
                        yield {"event": "status", "data": json.dumps(payload)}
                    if status.is_terminal:
                        break

                await asyncio.sleep(STATUS_POLL_INTERVAL)
        except asyncio.CancelledError:
            logger.info(f"Status stream closed for {user.id}/{week_id}")
            raise

    return EventSourceResponse(event_generator())
