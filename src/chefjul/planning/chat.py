"""
Conversational assistant.

chat_reply() classifies the message first: meal plan requests get a
structured JSON week plan, everything else a conversational answer.
stream_chat() streams a plain answer token by token for the SSE endpoint.
"""

import json
import logging
from collections.abc import AsyncGenerator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from chefjul.errors import InvalidRequestError
from chefjul.llm.client import call_llm_chat, call_llm_chat_stream
from chefjul.planning.intent import classify_intent
from chefjul.planning.meal_plan import extract_json, parse_meal_plan
from chefjul.prompts import (
    CHAT_MEAL_PLAN_ERROR,
    CHAT_SYSTEM_PROMPT,
    MEAL_PLAN_SYSTEM_PROMPT,
    STREAM_SYSTEM_PROMPT,
)

logger = logging.getLogger(__name__)


class ChatResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    response: str
    structured: bool = False
    meal_plan: dict[str, Any] | None = Field(default=None, serialization_alias="mealPlan")


def _require_message(message: str) -> str:
    if not isinstance(message, str) or not message.strip():
        raise InvalidRequestError("Message is required")
    return message


async def chat_reply(message: str) -> ChatResult:
    """Answer one chat message, producing a meal plan when asked for one."""
    _require_message(message)

    if await classify_intent(message):
        content = await call_llm_chat(
            messages=[
                {"role": "system", "content": MEAL_PLAN_SYSTEM_PROMPT},
                {"role": "user", "content": message},
            ],
            node_name="meal_plan",
            complexity="high",
            json_mode=True,
        )
        try:
            meal_plan = extract_json(content)
        except (json.JSONDecodeError, ValueError) as e:
            logger.error(f"Failed to parse meal plan JSON: {e}")
            return ChatResult(response=CHAT_MEAL_PLAN_ERROR, structured=False)

        meal_plan["weekPlan"] = parse_meal_plan(meal_plan)
        logger.info("Meal plan received")
        return ChatResult(response=content, structured=True, meal_plan=meal_plan)

    content = await call_llm_chat(
        messages=[
            {"role": "system", "content": CHAT_SYSTEM_PROMPT},
            {"role": "user", "content": message},
        ],
        node_name="chat",
    )
    logger.info("Conversation response received")
    return ChatResult(response=content, structured=False)


async def stream_chat(message: str) -> AsyncGenerator[str, None]:
    """Yield answer deltas for a chat message."""
    _require_message(message)
    async for delta in call_llm_chat_stream(
        messages=[
            {"role": "system", "content": STREAM_SYSTEM_PROMPT},
            {"role": "user", "content": message},
        ],
        node_name="chat",
    ):
        yield delta


def format_meal_plan_text(meal_plan: dict[str, Any]) -> str | None:
    """Readable summary of a plan's "text" block, for chat history."""
    text = meal_plan.get("text")
    if not isinstance(text, dict):
        return None

    parts = []
    if text.get("weekOverview"):
        parts.append(str(text["weekOverview"]))
    daily = text.get("dailyDescription")
    if isinstance(daily, dict) and daily:
        lines = [f"{day.capitalize()}: {desc}" for day, desc in daily.items()]
        parts.append("--- Daily Overview ---\n" + "\n\n".join(lines))
    if text.get("nutritionSummary"):
        parts.append(f"--- Nutrition Summary ---\n{text['nutritionSummary']}")
    return "\n\n".join(parts) or None
