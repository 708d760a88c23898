"""
Chef Jul - Prompt Logger.

Writes every LLM prompt and response to a markdown file for debugging.
Enabled via CHEF_LOG_PROMPTS=1 or the --log-prompts CLI flag.
"""

import json
import os
from datetime import datetime
from pathlib import Path
from typing import Any

LOG_PROMPTS = os.getenv("CHEF_LOG_PROMPTS", "0") == "1"
LOG_DIR = Path("prompt_logs")

# Session tracking
_session_id: str | None = None
_call_counter: int = 0


def enable_prompt_logging(enabled: bool = True) -> None:
    """Enable or disable prompt logging."""
    global LOG_PROMPTS
    LOG_PROMPTS = enabled
    if enabled:
        LOG_DIR.mkdir(exist_ok=True)


def _get_session_id() -> str:
    global _session_id
    if _session_id is None:
        _session_id = datetime.now().strftime("%Y%m%d_%H%M%S")
    return _session_id


def _get_session_dir() -> Path:
    session_dir = LOG_DIR / _get_session_id()
    session_dir.mkdir(parents=True, exist_ok=True)
    return session_dir


def _format_response(response: Any) -> str:
    if isinstance(response, str):
        return f"```\n{response}\n```\n"
    try:
        if hasattr(response, "model_dump"):
            response = response.model_dump(by_alias=True)
        return f"```json\n{json.dumps(response, indent=2, default=str)}\n```\n"
    except (TypeError, ValueError) as e:
        return f"```\n{response}\n```\n\n(Serialization error: {e})\n"


def log_prompt(
    *,
    node: str,
    model: str,
    messages: list[dict[str, str]],
    response_model: str | None = None,
    response: Any = None,
    error: str | None = None,
) -> Path | None:
    """
    Log a prompt and its response (or error) to a file.

    Args:
        node: Which caller made this call (recipe, intent, chat, meal_plan)
        model: The model used
        messages: Chat messages sent to the model
        response_model: Name of the Pydantic model expected, if structured
        response: The parsed response or text
        error: Any error that occurred

    Returns:
        Path to the log file, or None if logging is disabled
    """
    if not LOG_PROMPTS:
        return None

    global _call_counter
    _call_counter += 1

    filepath = _get_session_dir() / f"{_call_counter:03d}_{node}.md"

    content = f"# LLM Call: {node}\n\n**Time:** {datetime.now().isoformat()}\n**Model:** {model}\n"
    if response_model:
        content += f"**Response Model:** {response_model}\n"

    for message in messages:
        content += f"\n---\n\n## {message['role'].title()}\n\n```\n{message['content']}\n```\n"

    content += "\n---\n\n## Response\n\n"
    if error:
        content += f"**ERROR:** {error}\n"
    elif response is not None:
        content += _format_response(response)
    else:
        content += "(No response)\n"

    filepath.write_text(content, encoding="utf-8")
    return filepath


def get_session_log_dir() -> Path | None:
    """Get the current session's log directory, if logging is enabled."""
    if not LOG_PROMPTS:
        return None
    return _get_session_dir()


def reset_session() -> None:
    """Reset the session (for testing or a new run)."""
    global _session_id, _call_counter
    _session_id = None
    _call_counter = 0
