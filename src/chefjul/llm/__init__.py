"""
Chef Jul - LLM Client.

Provides structured LLM calls via Instructor plus plain and streamed chat.
"""

from chefjul.llm.client import call_llm, call_llm_chat, call_llm_chat_stream, get_client
from chefjul.llm.model_router import get_model

__all__ = [
    "get_client",
    "call_llm",
    "call_llm_chat",
    "call_llm_chat_stream",
    "get_model",
]
