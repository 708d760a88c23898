"""
Supabase-backed document store.

Documents live in a `documents` table (path text primary key, data jsonb).
Field updates go through Postgres functions defined in
migrations/001_documents.sql, so increments, array unions and conditional
writes are applied atomically inside the database.

The supabase client is synchronous; calls run in a worker thread so that
concurrent recipe items do not block the event loop.
"""

import asyncio
import logging
from typing import Any

from supabase import Client

from chefjul.db.store import encode_field_value, split_field_path
from chefjul.errors import DocumentNotFoundError

logger = logging.getLogger(__name__)

DOCUMENTS_TABLE = "documents"


def encode_updates(fields: dict[str, Any]) -> list[dict[str, Any]]:
    """Encode dotted field updates as the op list the SQL functions expect."""
    return [
        {"path": split_field_path(field_path), **encode_field_value(value)}
        for field_path, value in fields.items()
    ]


class SupabaseDocumentStore:
    """DocumentStore over a Supabase `documents` table."""

    def __init__(self, client: Client):
        self._client = client

    async def get(self, path: str) -> dict[str, Any] | None:
        def _get():
            return (
                self._client.table(DOCUMENTS_TABLE)
                .select("data")
                .eq("path", path)
                .maybe_single()
                .execute()
            )

        result = await asyncio.to_thread(_get)
        if result is None or not result.data:
            return None
        return result.data.get("data")

    async def set(self, path: str, data: dict[str, Any], merge: bool = False) -> None:
        if merge:
            await self._rpc("document_merge", {"p_path": path, "p_data": data})
            return

        def _upsert():
            return (
                self._client.table(DOCUMENTS_TABLE)
                .upsert({"path": path, "data": data})
                .execute()
            )

        await asyncio.to_thread(_upsert)

    async def update(self, path: str, fields: dict[str, Any]) -> None:
        found = await self._rpc(
            "document_update",
            {"p_path": path, "p_ops": encode_updates(fields)},
        )
        if not found:
            raise DocumentNotFoundError(path)

    async def update_if(
        self,
        path: str,
        field: str,
        unless_equals: Any,
        fields: dict[str, Any],
    ) -> bool:
        outcome = await self._rpc(
            "document_update_if",
            {
                "p_path": path,
                "p_field": split_field_path(field),
                "p_unless": unless_equals,
                "p_ops": encode_updates(fields),
            },
        )
        if outcome == "missing":
            raise DocumentNotFoundError(path)
        return outcome == "applied"

    async def set_if(
        self,
        path: str,
        field: str,
        unless_equals: Any,
        data: dict[str, Any],
    ) -> bool:
        outcome = await self._rpc(
            "document_set_if",
            {
                "p_path": path,
                "p_field": split_field_path(field),
                "p_unless": unless_equals,
                "p_data": data,
            },
        )
        if outcome == "missing":
            raise DocumentNotFoundError(path)
        return outcome == "applied"

    async def _rpc(self, function_name: str, params: dict[str, Any]) -> Any:
        def _call():
            return self._client.rpc(function_name, params).execute()

        result = await asyncio.to_thread(_call)
        logger.debug(f"{function_name}({params.get('p_path')}) -> {result.data}")
        return result.data
