"""
Append-only audit trail of the requests handled by the mock router.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone


@dataclass(frozen=True)
class LogEntry:
    """One handled request."""

    method: str
    path: str
    status: int | None = None
    outcome: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class RequestLog:
    """Ordered, lock-serialized list of LogEntry."""

    def __init__(self):
        self._entries: list[LogEntry] = []
        self._lock = threading.Lock()

    def append(self, entry: LogEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    def entries(self) -> list[LogEntry]:
        """Return a copy of all entries in insertion order."""
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries = []

    def find(self, method: str | None = None, path_prefix: str | None = None) -> list[LogEntry]:
        """Entries filtered by method and/or path prefix."""
        return [
            entry
            for entry in self.entries()
            if (method is None or entry.method == method.upper())
            and (path_prefix is None or entry.path.startswith(path_prefix))
        ]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
