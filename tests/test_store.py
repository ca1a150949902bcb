"""
Unit tests for the record store.

Tests cover:
- Lookups by id and name
- Insert id allocation, delete, partial replace with custom field merge
- The lazy all() view and concurrent inserts
"""

import threading

from hwtrack.mock.query import search
from hwtrack.mock.records import AssetRecord
from hwtrack.mock.store import RecordStore
from hwtrack.types import Status
from tests.sample_assets import fixed_clock


class TestLookups:
    """Tests for read operations."""

    def test_get_by_id(self, store):
        record = store.get_by_id(4)
        assert record is not None
        assert record.name == "scope-01"

    def test_get_by_id_missing(self, store):
        assert store.get_by_id(3) is None

    def test_repeated_reads_are_identical(self, store, snapshot):
        """Reads without mutations in between render the same data."""
        first = store.get_by_id(2).to_wire(snapshot.catalog)
        second = store.get_by_id(2).to_wire(snapshot.catalog)
        assert first == second

    def test_get_by_name_first_match_wins(self):
        store = RecordStore(
            [AssetRecord(id=1, name="dup"), AssetRecord(id=2, name="dup")]
        )
        assert store.get_by_name("dup").id == 1

    def test_get_by_name_missing(self, store):
        assert store.get_by_name("nope") is None

    def test_all_in_insertion_order(self, store):
        assert [r.id for r in store.all()] == [1, 2, 4, 7, 9]


class TestInsert:
    """Tests for insert id allocation."""

    def test_insert_assigns_next_id(self, store):
        record = store.insert(AssetRecord(id=0, name="new"))

        assert record.id == 10
        assert store.get_by_id(10) == record
        assert record.created_at == "2025-01-01T12:00:00Z"
        assert record.updated_at == "2025-01-01T12:00:00Z"

    def test_insert_into_empty_store(self):
        store = RecordStore()
        assert store.insert(AssetRecord(id=0, name="first")).id == 1

    def test_inserted_ids_strictly_increase(self, store):
        ids = []
        for i in range(20):
            existing = max(r.id for r in store.all())
            record = store.insert(AssetRecord(id=0, name=f"asset-{i}"))
            assert record.id > existing
            ids.append(record.id)
        assert len(set(ids)) == 20

    def test_deleted_ids_are_never_reused(self, store):
        store.delete(9)
        record = store.insert(AssetRecord(id=0, name="after-delete"))
        assert record.id == 10

        store.delete(10)
        assert store.insert(AssetRecord(id=0, name="again")).id == 11

    def test_concurrent_inserts_get_distinct_ids(self, store):
        results = []
        lock = threading.Lock()

        def worker():
            for _ in range(25):
                record = store.insert(AssetRecord(id=0, name="t"))
                with lock:
                    results.append(record.id)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(results) == 200
        assert len(set(results)) == 200
        assert len(store) == 205


class TestDelete:
    """Tests for delete."""

    def test_delete_then_get(self, store):
        assert store.delete(1) is True
        assert store.get_by_id(1) is None
        assert 1 not in store

    def test_delete_missing(self, store):
        assert store.delete(3) is False

    def test_delete_twice(self, store):
        assert store.delete(2) is True
        assert store.delete(2) is False


class TestReplace:
    """Tests for partial updates."""

    def test_status_only_update_preserves_other_fields(self, store):
        before = store.get_by_id(1)
        updated = store.replace(1, {"status": Status.INVALID})

        assert updated.status is Status.INVALID
        assert updated.name == before.name
        assert updated.custom_fields == before.custom_fields
        assert updated.tags == before.tags
        assert updated.updated_at == "2025-01-01T12:00:00Z"
        assert updated.created_at == before.created_at

    def test_custom_field_replaced_by_id(self, store):
        updated = store.replace(1, {"custom_fields": {2: "web01-new.example.com"}})

        assert updated.custom_fields == {
            1: "SN-1001",
            2: "web01-new.example.com",
            3: "Apollo",
            4: "PowerEdge R740",
        }

    def test_new_custom_field_appended(self, store):
        updated = store.replace(4, {"custom_fields": {2: "scope01.lab"}})
        assert list(updated.custom_fields) == [1, 4, 8, 2]

    def test_replace_missing(self, store):
        assert store.replace(3, {"name": "ghost"}) is None
        assert store.get_by_id(3) is None

    def test_replace_ignores_id_change(self, store):
        updated = store.replace(1, {"id": 99, "name": "renamed"})
        assert updated.id == 1
        assert store.get_by_id(99) is None

    def test_replace_keeps_position(self, store):
        store.replace(2, {"name": "srv-db-01b"})
        assert [r.id for r in store.all()] == [1, 2, 4, 7, 9]


class TestAllView:
    """Tests for the lazy all() view."""

    def test_view_reflects_later_mutations(self, store):
        view = store.all()
        store.delete(1)
        store.insert(AssetRecord(id=0, name="late"))

        assert [r.id for r in view] == [2, 4, 7, 9, 10]
        assert len(view) == 5

    def test_view_is_restartable(self, store):
        view = store.all()
        assert list(view) == list(view)


def test_create_delete_scenario():
    """Search, insert, delete and list against a two-record store."""
    store = RecordStore(
        [AssetRecord(id=1, name="A"), AssetRecord(id=2, name="B")], clock=fixed_clock
    )

    assert [r.id for r in search(store.all(), "name", "A", exact_match=True)] == [1]
    assert store.insert(AssetRecord(id=0, name="C")).id == 3
    assert store.delete(1) is True
    assert store.get_by_id(1) is None
    assert [(r.id, r.name) for r in store.all()] == [(2, "B"), (3, "C")]
