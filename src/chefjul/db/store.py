"""
Document Store Protocol.

Abstract interface for the per-user document database. Documents are
JSON objects addressed by slash paths ("users/{uid}/mealPlans/{weekId}").

update() takes dotted field paths ("weekPlan.monday.breakfast.recipe").
Values may be the sentinels below, which the store applies atomically
on its side (never as a client-side read-modify-write):

- Increment(n): add n to a numeric field (missing counts as 0)
- ArrayUnion(*items): append items not already present in an array field
"""

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True)
class Increment:
    """Atomic numeric add."""

    amount: int | float = 1


class ArrayUnion:
    """Atomic append of items not already in the array."""

    def __init__(self, *items: Any):
        self.items = list(items)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ArrayUnion) and self.items == other.items

    def __repr__(self) -> str:
        return f"ArrayUnion({', '.join(repr(i) for i in self.items)})"


@runtime_checkable
class DocumentStore(Protocol):
    """
    Async document access used by the recipe pipeline and the web layer.

    Implementations: SupabaseDocumentStore (production) and
    MemoryDocumentStore (local development and tests).
    """

    async def get(self, path: str) -> dict[str, Any] | None:
        """Return the document at `path`, or None if it does not exist."""
        ...

    async def set(self, path: str, data: dict[str, Any], merge: bool = False) -> None:
        """Create or replace a document. With merge=True, deep-merge into it."""
        ...

    async def update(self, path: str, fields: dict[str, Any]) -> None:
        """
        Apply dotted field-path updates to an existing document.

        Raises DocumentNotFoundError if the document does not exist.
        """
        ...

    async def update_if(
        self,
        path: str,
        field: str,
        unless_equals: Any,
        fields: dict[str, Any],
    ) -> bool:
        """
        Conditionally apply `fields`, as one atomic step.

        Skips the write (returns False) when the value at `field` equals
        `unless_equals`. Raises DocumentNotFoundError if the document
        does not exist.
        """
        ...

    async def set_if(
        self,
        path: str,
        field: str,
        unless_equals: Any,
        data: dict[str, Any],
    ) -> bool:
        """
        Replace an existing document unless `field` equals `unless_equals`.

        Same guard semantics as update_if, one atomic step.
        """
        ...


# =============================================================================
# Field path helpers (shared by implementations)
# =============================================================================


def split_field_path(field_path: str) -> list[str]:
    parts = field_path.split(".")
    if not field_path or any(not p for p in parts):
        raise ValueError(f"Invalid field path: {field_path!r}")
    return parts


def get_field(document: dict[str, Any] | None, field_path: str) -> Any:
    """Read a dotted field path; missing segments yield None."""
    current: Any = document
    for part in split_field_path(field_path):
        if not isinstance(current, dict):
            return None
        current = current.get(part)
    return current


def encode_field_value(value: Any) -> dict[str, Any]:
    """Encode a field update as an operation record (used by the SQL side)."""
    if isinstance(value, Increment):
        return {"op": "increment", "value": value.amount}
    if isinstance(value, ArrayUnion):
        return {"op": "array_union", "value": value.items}
    return {"op": "set", "value": value}
