"""
Chat endpoints.

POST /chat answers (or plans) in one response; POST /chat/stream streams a
conversational answer as SSE. Messages are appended to the user's history
on a best-effort basis: a failed history write never fails the chat.
"""

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel
from sse_starlette.sse import EventSourceResponse

from chefjul.db.store import DocumentStore
from chefjul.errors import ChefJulError, InvalidRequestError
from chefjul.planning.chat import chat_reply, format_meal_plan_text, stream_chat
from chefjul.planning.history import load_message_history, save_message
from chefjul.planning.meal_plan import save_meal_plan
from chefjul.web.auth import AuthenticatedUser, get_current_user
from chefjul.web.deps import get_store, to_http_error
from chefjul.weeks import get_current_week_id, is_valid_week_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


class ChatRequest(BaseModel):
    message: str
    save_plan: bool = False
    week_id: str | None = None  # Defaults to the current week when saving


async def _record(store: DocumentStore, user_id: str, message: dict[str, Any]) -> None:
    try:
        await save_message(store, user_id, message)
    except Exception as e:
        logger.warning(f"Failed to save chat message for {user_id}: {e}")


@router.post("")
async def chat(
    req: ChatRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    """
    Reply to a chat message.

    Meal plan requests return `structured: true` and a `mealPlan`. With
    `save_plan`, the plan's week is written to the meal plan document.
    """
    try:
        result = await chat_reply(req.message)
    except ChefJulError as e:
        raise to_http_error(e) from e

    await _record(store, user.id, {"role": "user", "content": req.message})

    body = result.model_dump(by_alias=True)
    if result.structured and result.meal_plan:
        if req.save_plan:
            week_id = req.week_id or get_current_week_id()
            if not is_valid_week_id(week_id):
                raise to_http_error(InvalidRequestError(f"Invalid week id: {week_id!r}"))
            extras = {k: v for k, v in result.meal_plan.items() if k != "weekPlan"}
            try:
                await save_meal_plan(store, user.id, week_id, result.meal_plan["weekPlan"], extras)
            except ChefJulError as e:
                raise to_http_error(e) from e
            body["weekId"] = week_id

        await _record(store, user.id, {
            "role": "assistant",
            "content": format_meal_plan_text(result.meal_plan) or "Here is your meal plan.",
            "structured": True,
            "weekId": body.get("weekId"),
        })
    else:
        await _record(store, user.id, {"role": "assistant", "content": result.response})

    return body


@router.post("/stream")
async def chat_stream(
    req: ChatRequest,
    request: Request,
    user: AuthenticatedUser = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    """
    Stream a conversational reply.

    Events: `data` {delta} per token, `end` {done: true} once finished,
    or `error` {message} if the model call fails.
    """
    if not req.message or not req.message.strip():
        raise to_http_error(InvalidRequestError("Message is required"))

    async def event_generator():
        collected: list[str] = []
        try:
            async for delta in stream_chat(req.message):
                if await request.is_disconnected():
                    logger.info(f"Client disconnected from chat stream for {user.id}")
                    return
                collected.append(delta)
                yield {"event": "data", "data": json.dumps({"delta": delta})}
            yield {"event": "end", "data": json.dumps({"done": True})}
        except Exception as e:
            logger.error(f"Chat stream failed: {e}")
            yield {"event": "error", "data": json.dumps({"message": str(e)})}
            return

        await _record(store, user.id, {"role": "user", "content": req.message})
        await _record(store, user.id, {"role": "assistant", "content": "".join(collected)})

    return EventSourceResponse(event_generator())


@router.get("/history")
async def chat_history(
    user: AuthenticatedUser = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    return {"messages": await load_message_history(store, user.id)}
