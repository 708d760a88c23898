"""
In-memory document store.

Implements DocumentStore with a dict of deep-copied documents guarded by an
asyncio.Lock, so increments and conditional writes are atomic within one
event loop. Used for local development (DOCUMENT_STORE=memory) and tests.
"""

import asyncio
import copy
from typing import Any

from chefjul.db.store import ArrayUnion, Increment, get_field, split_field_path
from chefjul.errors import DocumentNotFoundError


def _deep_merge(target: dict[str, Any], source: dict[str, Any]) -> None:
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_merge(target[key], value)
        else:
            target[key] = copy.deepcopy(value)


def _apply_field(document: dict[str, Any], field_path: str, value: Any) -> None:
    parts = split_field_path(field_path)
    parent = document
    for part in parts[:-1]:
        child = parent.get(part)
        if not isinstance(child, dict):
            child = {}
            parent[part] = child
        parent = child

    leaf = parts[-1]
    if isinstance(value, Increment):
        current = parent.get(leaf)
        if not isinstance(current, (int, float)) or isinstance(current, bool):
            current = 0
        parent[leaf] = current + value.amount
    elif isinstance(value, ArrayUnion):
        current = parent.get(leaf)
        items = list(current) if isinstance(current, list) else []
        for item in value.items:
            if item not in items:
                items.append(copy.deepcopy(item))
        parent[leaf] = items
    else:
        parent[leaf] = copy.deepcopy(value)


class MemoryDocumentStore:
    """Process-local DocumentStore."""

    def __init__(self, documents: dict[str, dict[str, Any]] | None = None):
        self._documents: dict[str, dict[str, Any]] = copy.deepcopy(documents or {})
        self._lock = asyncio.Lock()

    async def get(self, path: str) -> dict[str, Any] | None:
        async with self._lock:
            document = self._documents.get(path)
            return copy.deepcopy(document) if document is not None else None

    async def set(self, path: str, data: dict[str, Any], merge: bool = False) -> None:
        async with self._lock:
            if merge and path in self._documents:
                _deep_merge(self._documents[path], data)
            else:
                self._documents[path] = copy.deepcopy(data)

    async def update(self, path: str, fields: dict[str, Any]) -> None:
        async with self._lock:
            document = self._require(path)
            for field_path, value in fields.items():
                _apply_field(document, field_path, value)

    async def update_if(
        self,
        path: str,
        field: str,
        unless_equals: Any,
        fields: dict[str, Any],
    ) -> bool:
        async with self._lock:
            document = self._require(path)
            if get_field(document, field) == unless_equals:
                return False
            for field_path, value in fields.items():
                _apply_field(document, field_path, value)
            return True

    async def set_if(
        self,
        path: str,
        field: str,
        unless_equals: Any,
        data: dict[str, Any],
    ) -> bool:
        async with self._lock:
            document = self._require(path)
            if get_field(document, field) == unless_equals:
                return False
            self._documents[path] = copy.deepcopy(data)
            return True

    def _require(self, path: str) -> dict[str, Any]:
        document = self._documents.get(path)
        if document is None:
            raise DocumentNotFoundError(path)
        return document
