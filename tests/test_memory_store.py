"""Tests for the in-memory document store."""

import asyncio

import pytest

from chefjul.db import ArrayUnion, DocumentStore, Increment, MemoryDocumentStore
from chefjul.db.store import encode_field_value, get_field, split_field_path
from chefjul.errors import DocumentNotFoundError


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio needed)."""
    return asyncio.run(coro)


class TestFieldHelpers:
    def test_split(self):
        assert split_field_path("a.b.c") == ["a", "b", "c"]

    @pytest.mark.parametrize("bad", ["", "a..b", ".a", "a."])
    def test_split_rejects_empty_segments(self, bad):
        with pytest.raises(ValueError):
            split_field_path(bad)

    def test_get_field_missing(self):
        assert get_field({"a": {"b": 1}}, "a.c") is None
        assert get_field({"a": 5}, "a.b") is None
        assert get_field(None, "a") is None

    def test_encode(self):
        assert encode_field_value(Increment(2)) == {"op": "increment", "value": 2}
        assert encode_field_value(ArrayUnion("x")) == {"op": "array_union", "value": ["x"]}
        assert encode_field_value({"a": 1}) == {"op": "set", "value": {"a": 1}}


class TestMemoryDocumentStore:
    def test_satisfies_protocol(self):
        assert isinstance(MemoryDocumentStore(), DocumentStore)

    def test_get_missing(self):
        assert _run(MemoryDocumentStore().get("users/x")) is None

    def test_get_returns_copy(self):
        store = MemoryDocumentStore({"d": {"a": {"b": 1}}})

        async def scenario():
            doc = await store.get("d")
            doc["a"]["b"] = 99
            return await store.get("d")

        assert _run(scenario()) == {"a": {"b": 1}}

    def test_set_replaces_and_merges(self):
        store = MemoryDocumentStore({"d": {"a": {"x": 1, "y": 2}, "keep": True}})

        async def scenario():
            await store.set("d", {"a": {"y": 3, "z": 4}}, merge=True)
            merged = await store.get("d")
            await store.set("d", {"only": 1})
            return merged, await store.get("d")

        merged, replaced = _run(scenario())
        assert merged == {"a": {"x": 1, "y": 3, "z": 4}, "keep": True}
        assert replaced == {"only": 1}

    def test_update_dotted_paths_create_parents(self):
        store = MemoryDocumentStore({"d": {}})

        async def scenario():
            await store.update("d", {"weekPlan.monday.lunch.recipe": {"steps": []}})
            return await store.get("d")

        assert _run(scenario()) == {"weekPlan": {"monday": {"lunch": {"recipe": {"steps": []}}}}}

    def test_update_missing_document(self):
        with pytest.raises(DocumentNotFoundError):
            _run(MemoryDocumentStore().update("nope", {"a": 1}))

    def test_increment_is_atomic_under_concurrency(self):
        store = MemoryDocumentStore({"d": {"status": {"progress": 0}}})

        async def scenario():
            await asyncio.gather(*(store.update("d", {"status.progress": Increment(1)}) for _ in range(50)))
            return await store.get("d")

        assert _run(scenario())["status"]["progress"] == 50

    def test_increment_missing_field_starts_at_zero(self):
        store = MemoryDocumentStore({"d": {}})

        async def scenario():
            await store.update("d", {"count": Increment(3)})
            return await store.get("d")

        assert _run(scenario()) == {"count": 3}

    def test_array_union_skips_duplicates(self):
        store = MemoryDocumentStore({"d": {"items": [{"id": 1}]}})

        async def scenario():
            await store.update("d", {"items": ArrayUnion({"id": 1}, {"id": 2})})
            return await store.get("d")

        assert _run(scenario())["items"] == [{"id": 1}, {"id": 2}]

    def test_update_if_applies_and_skips(self):
        store = MemoryDocumentStore({"d": {"status": {"busy": False}}})

        async def scenario():
            first = await store.update_if("d", "status.busy", True, {"status.busy": True, "status.n": 1})
            second = await store.update_if("d", "status.busy", True, {"status.n": 2})
            return first, second, await store.get("d")

        first, second, doc = _run(scenario())
        assert first is True
        assert second is False
        assert doc == {"status": {"busy": True, "n": 1}}

    def test_update_if_missing_document(self):
        with pytest.raises(DocumentNotFoundError):
            _run(MemoryDocumentStore().update_if("nope", "a", True, {"a": True}))

    def test_set_if_replaces_and_skips(self):
        store = MemoryDocumentStore({"d": {"status": {"busy": False}, "old": 1}})

        async def scenario():
            first = await store.set_if("d", "status.busy", True, {"status": {"busy": True}, "new": 2})
            second = await store.set_if("d", "status.busy", True, {"new": 3})
            return first, second, await store.get("d")

        first, second, doc = _run(scenario())
        assert first is True
        assert second is False
        assert doc == {"status": {"busy": True}, "new": 2}

    def test_set_if_missing_document(self):
        with pytest.raises(DocumentNotFoundError):
            _run(MemoryDocumentStore().set_if("nope", "a", True, {"a": 1}))
