"""
In-process mock of the asset tracking service.

Serves list/get/create/update/delete/list-projects requests from an
in-memory snapshot of a JSON dataset and records every request it handles.
Mutations never reach the dataset file.
"""

from hwtrack.mock.loader import LoadError, LoadErrorReason, Snapshot, load_snapshot
from hwtrack.mock.request_log import LogEntry, RequestLog
from hwtrack.mock.router import MockResponse, RequestRouter
from hwtrack.mock.session import (
    LifecycleController,
    MockOptions,
    MockSession,
    current_session,
    disable,
    enable,
    enable_from_env,
    is_enabled,
)
from hwtrack.mock.store import RecordStore

__all__ = [
    "LifecycleController",
    "LoadError",
    "LoadErrorReason",
    "LogEntry",
    "MockOptions",
    "MockResponse",
    "MockSession",
    "RecordStore",
    "RequestLog",
    "RequestRouter",
    "Snapshot",
    "current_session",
    "disable",
    "enable",
    "enable_from_env",
    "is_enabled",
    "load_snapshot",
]
