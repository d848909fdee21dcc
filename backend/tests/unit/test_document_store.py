"""Unit tests for the SQLite-backed document store."""

import sqlite3

import pytest

from backend.src.services.document_store import (
    Condition,
    DocumentNotFoundError,
    DocumentStoreError,
)


class TestWrites:
    def test_create_assigns_id_and_timestamps(self, store) -> None:
        doc_id = store.create("notes", {"userId": "u1", "title": "Hello"})

        record = store.get("notes", doc_id)
        assert len(doc_id) == 20
        assert record["id"] == doc_id
        assert record["title"] == "Hello"
        assert record["createdAt"] == record["updatedAt"]

    def test_create_ignores_caller_timestamps_and_id(self, store) -> None:
        doc_id = store.create(
            "notes", {"id": "forged", "createdAt": "1999-01-01T00:00:00+00:00", "title": "x"}
        )

        record = store.get("notes", doc_id)
        assert record["id"] == doc_id
        assert not record["createdAt"].startswith("1999")

    def test_id_is_not_stored_inside_data(self, store, config) -> None:
        doc_id = store.create("notes", {"title": "x"})

        conn = sqlite3.connect(config.database_path)
        try:
            (raw,) = conn.execute("SELECT data FROM documents WHERE doc_id = ?", (doc_id,)).fetchone()
        finally:
            conn.close()
        assert '"id"' not in raw

    def test_create_with_id_overwrites(self, store) -> None:
        store.create_with_id("users", "user-1", {"displayName": "First", "bio": "old"})
        store.create_with_id("users", "user-1", {"displayName": "Second"})

        record = store.get("users", "user-1")
        assert record["displayName"] == "Second"
        assert "bio" not in record

    def test_update_merges_and_restamps(self, store) -> None:
        doc_id = store.create("notes", {"title": "a", "content": "body"})
        before = store.get("notes", doc_id)

        store.update("notes", doc_id, {"title": "b", "createdAt": "forged"})

        after = store.get("notes", doc_id)
        assert after["title"] == "b"
        assert after["content"] == "body"
        assert after["createdAt"] == before["createdAt"]
        assert after["updatedAt"] >= before["updatedAt"]

    def test_update_missing_raises(self, store) -> None:
        with pytest.raises(DocumentNotFoundError):
            store.update("notes", "nope", {"title": "x"})

    def test_delete_is_idempotent(self, store) -> None:
        doc_id = store.create("notes", {"title": "x"})

        store.delete("notes", doc_id)
        store.delete("notes", doc_id)

        assert store.get("notes", doc_id) is None

    def test_unserializable_data_raises_store_error(self, store) -> None:
        with pytest.raises(DocumentStoreError):
            store.create("notes", {"blob": object()})


class TestQueries:
    @pytest.fixture
    def seeded(self, store):
        store.create("ai-images", {"userId": "u1", "prompt": "fox", "rank": 2, "tags": ["fox", "snow"]})
        store.create("ai-images", {"userId": "u1", "prompt": "owl", "rank": 1, "tags": ["owl"]})
        store.create("ai-images", {"userId": "u2", "prompt": "cat", "rank": 3, "tags": ["cat"]})
        store.create("notes", {"userId": "u1", "title": "other collection"})
        return store

    def test_get_missing_returns_none(self, store) -> None:
        assert store.get("notes", "missing") is None

    def test_list_preserves_insertion_order(self, seeded) -> None:
        prompts = [record["prompt"] for record in seeded.list("ai-images")]
        assert prompts == ["fox", "owl", "cat"]

    def test_equality_condition(self, seeded) -> None:
        records = seeded.list("ai-images", [("userId", "==", "u1")])
        assert {record["prompt"] for record in records} == {"fox", "owl"}

    @pytest.mark.parametrize(
        "condition, expected",
        [
            (("rank", ">", 1), {"fox", "cat"}),
            (("rank", "<=", 1), {"owl"}),
            (("userId", "!=", "u1"), {"cat"}),
            (("prompt", "in", ["fox", "cat"]), {"fox", "cat"}),
            (("prompt", "not-in", ["fox"]), {"owl", "cat"}),
            (("tags", "array-contains", "snow"), {"fox"}),
            (("tags", "array-contains-any", ["owl", "cat"]), {"owl", "cat"}),
        ],
    )
    def test_operators(self, seeded, condition, expected) -> None:
        records = seeded.list("ai-images", [condition])
        assert {record["prompt"] for record in records} == expected

    def test_order_and_limit(self, seeded) -> None:
        records = seeded.list("ai-images", order_by="rank", direction="asc", limit=2)
        assert [record["prompt"] for record in records] == ["owl", "fox"]

        records = seeded.list("ai-images", order_by="rank")
        assert [record["prompt"] for record in records] == ["cat", "fox", "owl"]

    def test_invalid_field_rejected(self) -> None:
        with pytest.raises(ValueError):
            Condition("userId; DROP TABLE documents", "==", "x")

    def test_invalid_operator_rejected(self) -> None:
        with pytest.raises(ValueError):
            Condition("userId", "like", "x")

    def test_in_requires_list(self) -> None:
        with pytest.raises(ValueError):
            Condition("userId", "in", [])


class TestSubscriptions:
    def test_subscribe_delivers_initial_and_updates(self, store) -> None:
        snapshots = []
        unsubscribe = store.subscribe("notes", [("userId", "==", "u1")], snapshots.append)

        store.create("notes", {"userId": "u1", "title": "a"})
        store.create("notes", {"userId": "u2", "title": "b"})

        assert [len(snapshot) for snapshot in snapshots] == [0, 1, 1]

        unsubscribe()
        store.create("notes", {"userId": "u1", "title": "c"})
        assert len(snapshots) == 3

    def test_unsubscribe_is_idempotent(self, store) -> None:
        unsubscribe = store.subscribe("notes", None, lambda _: None)
        assert store.listener_count == 1

        unsubscribe()
        unsubscribe()

        assert store.listener_count == 0

    def test_subscribe_one_reports_removal(self, store) -> None:
        doc_id = store.create("notes", {"title": "a"})
        seen = []
        store.subscribe_one("notes", doc_id, seen.append)

        store.update("notes", doc_id, {"title": "b"})
        store.delete("notes", doc_id)

        assert [item["title"] if item else None for item in seen] == ["a", "b", None]

    def test_failing_listener_does_not_break_writes(self, store) -> None:
        received = []

        def broken(_):
            raise RuntimeError("listener blew up")

        store.subscribe("notes", None, broken)
        store.subscribe("notes", None, received.append)

        doc_id = store.create("notes", {"title": "a"})

        assert store.get("notes", doc_id) is not None
        assert len(received) == 2
