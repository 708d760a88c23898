"""
Chef Jul - LLM Client.

Wraps AsyncOpenAI with Instructor for structured outputs.
All LLM calls go through here for consistency and prompt logging.

- call_llm: structured output validated against a Pydantic model
- call_llm_chat: plain chat completion (optionally JSON mode)
- call_llm_chat_stream: token-by-token streaming
"""

import asyncio
from collections.abc import AsyncGenerator
from typing import TypeVar

import instructor
from openai import AsyncOpenAI
from pydantic import BaseModel

from chefjul.config import settings
from chefjul.llm.model_router import get_node_config
from chefjul.llm.prompt_logger import log_prompt

T = TypeVar("T", bound=BaseModel)

# Singleton client instances
_raw_client: AsyncOpenAI | None = None
_client: instructor.AsyncInstructor | None = None


def get_raw_async_client() -> AsyncOpenAI:
    """Get the plain AsyncOpenAI client (chat and streaming)."""
    global _raw_client

    if _raw_client is None:
        _raw_client = AsyncOpenAI(api_key=settings.openai_api_key)

    return _raw_client


def get_client() -> instructor.AsyncInstructor:
    """Get the Instructor-wrapped async client (structured output)."""
    global _client

    if _client is None:
        _client = instructor.from_openai(get_raw_async_client())

    return _client


async def call_llm(
    *,
    response_model: type[T],
    system_prompt: str,
    user_prompt: str,
    node: str = "unknown",
    complexity: str = "medium",
    max_retries: int = 2,
    timeout: float | None = None,
) -> T:
    """
    Make a structured LLM call with guaranteed schema compliance.

    Args:
        response_model: Pydantic model class for the response
        system_prompt: System message setting context
        user_prompt: User message with the actual request
        node: Caller name, used for model config and prompt logs
        complexity: Task complexity for model selection ("low", "medium", "high")
        max_retries: Re-asks if the response doesn't match the schema
        timeout: Seconds before the call is abandoned (defaults to settings)

    Returns:
        Instance of response_model with validated data

    Raises:
        asyncio.TimeoutError, openai errors, or instructor's retry error
        once max_retries is exhausted.
    """
    client = get_client()
    config = get_node_config(node, complexity)
    model = config["model"]

    messages = [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]

    try:
        response = await asyncio.wait_for(
            client.chat.completions.create(
                model=model,
                messages=messages,
                response_model=response_model,
                max_retries=max_retries,
                temperature=config.get("temperature", 0.5),
            ),
            timeout=timeout or settings.llm_timeout_seconds,
        )
    except Exception as e:
        log_prompt(
            node=node,
            model=model,
            messages=messages,
            response_model=response_model.__name__,
            error=str(e) or type(e).__name__,
        )
        raise

    log_prompt(
        node=node,
        model=model,
        messages=messages,
        response_model=response_model.__name__,
        response=response,
    )
    return response


async def call_llm_chat(
    *,
    messages: list[dict[str, str]],
    node_name: str = "chat",
    complexity: str = "medium",
    json_mode: bool = False,
    timeout: float | None = None,
) -> str:
    """
    Plain chat completion returning the message text.

    With json_mode=True the model is asked for a JSON object; parsing is
    left to the caller.
    """
    client = get_raw_async_client()
    config = get_node_config(node_name, complexity)
    model = config["model"]

    api_kwargs = {
        "model": model,
        "messages": messages,
        "temperature": config.get("temperature", 0.5),
    }
    if json_mode:
        api_kwargs["response_format"] = {"type": "json_object"}

    try:
        completion = await asyncio.wait_for(
            client.chat.completions.create(**api_kwargs),
            timeout=timeout or settings.llm_timeout_seconds,
        )
    except Exception as e:
        log_prompt(node=node_name, model=model, messages=messages, error=str(e) or type(e).__name__)
        raise

    content = completion.choices[0].message.content or ""
    log_prompt(node=node_name, model=model, messages=messages, response=content)
    return content


async def call_llm_chat_stream(
    *,
    messages: list[dict[str, str]],
    node_name: str = "chat",
    complexity: str = "medium",
) -> AsyncGenerator[str, None]:
    """
    Stream a chat completion, yielding content deltas as they arrive.

    The full response is logged once the stream ends.
    """
    client = get_raw_async_client()
    config = get_node_config(node_name, complexity)
    model = config["model"]

    collected: list[str] = []
    try:
        stream = await client.chat.completions.create(
            model=model,
            messages=messages,
            temperature=config.get("temperature", 0.7),
            stream=True,
        )
        async for chunk in stream:
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta.content
            if delta:
                collected.append(delta)
                yield delta
    except Exception as e:
        log_prompt(node=node_name, model=model, messages=messages, error=str(e) or type(e).__name__)
        raise

    log_prompt(node=node_name, model=model, messages=messages, response="".join(collected))
