"""
Chef Jul - Document Store.

get_document_store() returns the configured store (Supabase or in-memory).
"""

from chefjul.db.memory import MemoryDocumentStore
from chefjul.db.store import ArrayUnion, DocumentStore, Increment

# Singleton store instance
_store: DocumentStore | None = None


def get_document_store() -> DocumentStore:
    """
    Get the configured document store.

    Uses singleton pattern; DOCUMENT_STORE selects the backend.
    """
    global _store

    if _store is None:
        from chefjul.config import settings

        if settings.document_store == "memory":
            _store = MemoryDocumentStore()
        else:
            from chefjul.db.client import get_service_client
            from chefjul.db.supabase_store import SupabaseDocumentStore

            _store = SupabaseDocumentStore(get_service_client())

    return _store


__all__ = [
    "ArrayUnion",
    "DocumentStore",
    "Increment",
    "MemoryDocumentStore",
    "get_document_store",
]
