"""
Intent classification: is the user asking for a meal plan?
"""

from pydantic import BaseModel, Field

from chefjul.llm.client import call_llm
from chefjul.prompts import INTENT_SYSTEM_PROMPT


class IntentClassification(BaseModel):
    """Output of the intent classifier."""

    is_meal_plan_request: bool = Field(
        description="True only if the user requests a meal plan or asks about meal planning"
    )


async def classify_intent(message: str) -> bool:
    result = await call_llm(
        response_model=IntentClassification,
        system_prompt=INTENT_SYSTEM_PROMPT,
        user_prompt=message,
        node="intent",
        complexity="low",
    )
    return result.is_meal_plan_request
