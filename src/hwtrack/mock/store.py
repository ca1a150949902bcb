"""
Record store for the mock backend.

Holds the current snapshot of assets keyed by id. Mutations build a new
mapping and swap it in under a lock, so readers always see either the state
before or after a mutation, never a mix of both.
"""

import threading
from collections.abc import Callable, Iterable, Iterator
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from hwtrack.mock.records import AssetRecord


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class RecordsView:
    """Lazy, restartable iteration over the store's current records."""

    def __init__(self, store: "RecordStore"):
        self._store = store

    def __iter__(self) -> Iterator[AssetRecord]:
        return iter(tuple(self._store._records.values()))

    def __len__(self) -> int:
        return len(self._store._records)


class RecordStore:
    """Insertion-ordered mapping of record id to AssetRecord."""

    def __init__(
        self,
        records: Iterable[AssetRecord] = (),
        clock: Callable[[], datetime] = utc_now,
    ):
        self._records: dict[int, AssetRecord] = {}
        for record in records:
            if record.id in self._records:
                raise ValueError(f"Duplicate record id: {record.id}")
            self._records[record.id] = record
        self._last_id = max(self._records, default=0)
        self._clock = clock
        self._lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_by_id(self, record_id: int) -> AssetRecord | None:
        return self._records.get(record_id)

    def get_by_name(self, name: str) -> AssetRecord | None:
        """Return the first record with this name, in insertion order."""
        for record in self._records.values():
            if record.name == name:
                return record
        return None

    def all(self) -> RecordsView:
        return RecordsView(self)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def insert(self, record: AssetRecord) -> AssetRecord:
        """
        Add a record under a freshly allocated id and return it.

        The id is one past the highest id this store has ever held, so ids
        of deleted records are never handed out again. created_at and
        updated_at default to the current clock time.
        """
        with self._lock:
            self._last_id += 1
            now = format_timestamp(self._clock())
            stored = replace(
                record,
                id=self._last_id,
                created_at=record.created_at or now,
                updated_at=record.updated_at or now,
            )
            records = dict(self._records)
            records[stored.id] = stored
            self._records = records
            return stored

    def replace(self, record_id: int, changes: dict[str, Any]) -> AssetRecord | None:
        """
        Apply a partial update and return the updated record.

        Only the keys present in `changes` are overwritten. A "custom_fields"
        change is merged by field id: known ids get the new value, unknown ids
        are appended. updated_at is always refreshed. Returns None if the id
        is unknown.
        """
        with self._lock:
            current = self._records.get(record_id)
            if current is None:
                return None
            changes = dict(changes)
            changes.pop("id", None)
            if "custom_fields" in changes:
                merged = dict(current.custom_fields)
                merged.update(changes["custom_fields"])
                changes["custom_fields"] = merged
            if "extra" in changes:
                changes["extra"] = {**current.extra, **changes["extra"]}
            changes["updated_at"] = format_timestamp(self._clock())
            updated = replace(current, **changes)
            records = dict(self._records)
            records[record_id] = updated
            self._records = records
            return updated

    def delete(self, record_id: int) -> bool:
        """Remove a record. Returns False if the id is unknown."""
        with self._lock:
            if record_id not in self._records:
                return False
            records = dict(self._records)
            del records[record_id]
            self._records = records
            return True
