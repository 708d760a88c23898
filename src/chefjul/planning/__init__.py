"""
Chef Jul - Planning Package.

Chat, meal plan parsing/persistence, message history, nutrition summary.
"""

from chefjul.planning.chat import ChatResult, chat_reply, stream_chat
from chefjul.planning.history import load_message_history, save_message
from chefjul.planning.intent import classify_intent
from chefjul.planning.meal_plan import (
    count_meals,
    extract_json,
    load_meal_plan,
    parse_meal_plan,
    save_meal_plan,
)
from chefjul.planning.nutrition import summarize_week

__all__ = [
    "ChatResult",
    "chat_reply",
    "classify_intent",
    "count_meals",
    "extract_json",
    "load_meal_plan",
    "load_message_history",
    "parse_meal_plan",
    "save_meal_plan",
    "save_message",
    "stream_chat",
    "summarize_week",
]
