"""
Mock sessions and the process-wide lifecycle controller.

A MockSession owns one snapshot's record store, request log and router, and
can intercept `requests` traffic to the service base URL through the
`responses` library:

    with MockSession.from_file("assets.json") as session:
        requests.get("https://assets.example.com/issues.json")
        assert session.requests()[0].path == "/issues.json"

The module-level enable()/disable() pair manages the single session that
production code talks to while mocking is switched on.
"""

import logging
import re
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urlsplit

import responses

from hwtrack import config
from hwtrack.mock.loader import Snapshot, load_snapshot
from hwtrack.mock.request_log import LogEntry, RequestLog
from hwtrack.mock.router import MockResponse, RequestRouter
from hwtrack.mock.store import RecordStore, utc_now

logger = logging.getLogger(__name__)

_INTERCEPTED_METHODS = (
    responses.GET,
    responses.POST,
    responses.PUT,
    responses.PATCH,
    responses.DELETE,
)


@dataclass
class MockOptions:
    """
    Settings for one mock session.

    api_key: Key every request must carry; None disables the check
    delay: Seconds to wait before answering each request
    base_url: Service root whose requests are intercepted
    collection: Name of the asset collection in paths and envelopes
    parent: Parent collection used in nested create paths
    page_size: Page size when a list request gives no limit
    max_limit: Ceiling applied to requested limits
    clock: Source of the current time for created_at/updated_at
    """

    api_key: str | None = None
    delay: float = 0.0
    base_url: str = config.BASE_URL
    collection: str = config.COLLECTION
    parent: str = "projects"
    page_size: int = config.DEFAULT_PAGE_SIZE
    max_limit: int = config.MAX_PAGE_SIZE
    clock: Callable[[], datetime] = field(default=utc_now)


class MockSession:
    """In-memory state and request interception for one mock run."""

    def __init__(self, snapshot: Snapshot, options: MockOptions | None = None):
        self.options = options or MockOptions()
        self.snapshot = snapshot
        self.store = RecordStore(snapshot.records, clock=self.options.clock)
        self.log = RequestLog()
        self.router = RequestRouter(
            self.store,
            self.log,
            projects=snapshot.projects,
            catalog=snapshot.catalog,
            api_key=self.options.api_key,
            collection=self.options.collection,
            parent=self.options.parent,
            delay=self.options.delay,
            page_size=self.options.page_size,
            max_limit=self.options.max_limit,
        )
        self._base_url = self.options.base_url.rstrip("/")
        self._base_path = urlsplit(self._base_url).path
        self._mock = responses.RequestsMock(assert_all_requests_are_fired=False)
        self._active = False

    @classmethod
    def from_file(
        cls, source_path: str | Path, options: MockOptions | None = None
    ) -> "MockSession":
        """Load a dataset and build a session over it. Raises LoadError."""
        options = options or MockOptions()
        return cls(load_snapshot(source_path, options.collection), options)

    # -------------------------------------------------------------------------
    # Interception
    # -------------------------------------------------------------------------

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> None:
        """Start intercepting requests to the base URL."""
        if self._active:
            return
        self._mock.start()
        self._setup_endpoints()
        self._active = True

    def stop(self) -> None:
        """Stop intercepting; requests go to the real network again."""
        if not self._active:
            return
        self._mock.stop()
        self._mock.reset()
        self._active = False

    def __enter__(self) -> "MockSession":
        self.start()
        return self

    def __exit__(self, *args: Any) -> None:
        self.stop()

    def _setup_endpoints(self) -> None:
        service = re.compile(rf"^{re.escape(self._base_url)}(/|$)")
        for method in _INTERCEPTED_METHODS:
            self._mock.add_callback(
                method,
                service,
                callback=self._handle_request,
                content_type="application/json",
            )
        # Anything outside the service root reaches the network
        self._mock.add_passthru(re.compile(rf"^(?!{re.escape(self._base_url)}(/|$))"))

    def _handle_request(self, request: Any) -> tuple[int, dict[str, str], str]:
        url = urlsplit(request.url)
        path = unquote(url.path)
        if self._base_path and path.startswith(self._base_path):
            path = path[len(self._base_path) :]
        response = self.handle(
            request.method, path or "/", url.query, dict(request.headers), request.body
        )
        return (response.status, {}, response.to_json())

    # -------------------------------------------------------------------------
    # Request handling and inspection
    # -------------------------------------------------------------------------

    def handle(
        self,
        method: str,
        path: str,
        query: Any = None,
        headers: dict[str, str] | None = None,
        body: Any = None,
    ) -> MockResponse:
        """Route a request directly, without going through `requests`."""
        return self.router.handle(method, path, query, headers, body)

    def requests(self) -> list[LogEntry]:
        return self.log.entries()

    def clear_requests(self) -> None:
        self.log.clear()

    def set_delay(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError("delay must be non-negative")
        self.router.delay = seconds


# =============================================================================
# Lifecycle Controller
# =============================================================================


class LifecycleController:
    """Holds the single session that is active process-wide."""

    def __init__(self):
        self._session: MockSession | None = None
        self._lock = threading.Lock()

    def enable(
        self, source_path: str | Path, options: MockOptions | None = None
    ) -> MockSession:
        """
        Load the dataset and install a fresh session, replacing any active one.

        Raises LoadError without touching the current state if the dataset
        cannot be loaded.
        """
        session = MockSession.from_file(source_path, options)
        with self._lock:
            if self._session is not None:
                self._session.stop()
            self._session = session
            session.start()
        logger.info("Mock backend enabled for %s", session.options.base_url)
        return session

    def disable(self) -> None:
        with self._lock:
            session, self._session = self._session, None
            if session is None:
                return
            session.stop()
        logger.info("Mock backend disabled")

    def is_enabled(self) -> bool:
        return self._session is not None

    @property
    def session(self) -> MockSession | None:
        return self._session


controller = LifecycleController()


def enable(source_path: str | Path, options: MockOptions | None = None) -> MockSession:
    return controller.enable(source_path, options)


def disable() -> None:
    controller.disable()


def is_enabled() -> bool:
    return controller.is_enabled()


def current_session() -> MockSession | None:
    return controller.session


def enable_from_env() -> MockSession | None:
    """Enable the mock when HWTRACK_MOCK is set, using HWTRACK_MOCK_DATA."""
    if not config.MOCK_ENABLED:
        return None
    if not config.MOCK_DATA:
        raise RuntimeError("HWTRACK_MOCK is set but HWTRACK_MOCK_DATA is empty")
    options = MockOptions(api_key=config.API_KEY or None, delay=config.MOCK_DELAY)
    return enable(config.MOCK_DATA, options)
