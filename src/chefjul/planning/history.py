"""
Chat message history, kept on the user document (`messageHistory`).
"""

import logging
import time
from typing import Any

from chefjul.db.store import ArrayUnion, DocumentStore
from chefjul.errors import DocumentNotFoundError
from chefjul.weeks import user_path

logger = logging.getLogger(__name__)

HISTORY_FIELD = "messageHistory"


def _drop_none(value: Any) -> Any:
    # The store rejects undefined-ish values inside arrays, so strip them.
    if isinstance(value, dict):
        return {k: _drop_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_drop_none(v) for v in value if v is not None]
    return value


async def save_message(store: DocumentStore, user_id: str, message: dict[str, Any]) -> dict[str, Any]:
    """
    Append a message to the user's history.

    Adds `createdAt` (epoch milliseconds) and creates the user document
    if it does not exist yet. Returns the stored message.
    """
    entry = _drop_none({**message, "createdAt": int(time.time() * 1000)})
    path = user_path(user_id)

    try:
        await store.update(path, {HISTORY_FIELD: ArrayUnion(entry)})
    except DocumentNotFoundError:
        await store.set(path, {HISTORY_FIELD: [entry]}, merge=True)

    logger.debug(f"Saved {entry.get('role', 'unknown')} message for {path}")
    return entry


async def load_message_history(store: DocumentStore, user_id: str) -> list[dict[str, Any]]:
    document = await store.get(user_path(user_id))
    if not document:
        return []
    history = document.get(HISTORY_FIELD)
    return history if isinstance(history, list) else []
