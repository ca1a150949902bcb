"""
Request router for the mock backend.

Maps a method, path, query string, headers and body onto record store and
query operations, and shapes the JSON envelopes the real service returns:

    GET    /issues.json                       list (cf_<id>, status_id, offset, limit)
    GET    /issues/<id>.json                  get
    POST   /projects/<project>/issues.json    create
    POST   /issues.json                       create, project from "project_id"
    PUT    /issues/<id>.json                  update
    DELETE /issues/<id>.json                  delete
    GET    /projects.json                     list projects

Every handled request is appended to the RequestLog, including rejected ones.
"""

import json
import logging
import re
import threading
import time
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qs, unquote_plus, urlencode

from requests.structures import CaseInsensitiveDict

from hwtrack.config import API_KEY_HEADER, API_KEY_PARAM, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from hwtrack.mock.query import filter_by_status, paginate, search
from hwtrack.mock.records import AssetRecord, FieldCatalog, Project, parse_custom_fields
from hwtrack.mock.request_log import LogEntry, RequestLog
from hwtrack.mock.store import RecordStore
from hwtrack.types import SEARCHABLE_FIELDS, Status

logger = logging.getLogger(__name__)

DEFAULT_AUTHOR = {"id": 1, "name": "Mock User"}

# Body keys that never change through create/update
_READ_ONLY_KEYS = {"id", "created_at", "updated_at"}


# =============================================================================
# Response Types
# =============================================================================


@dataclass(frozen=True)
class MockResponse:
    """Status code and JSON body of a routed request; body is None for 204."""

    status: int
    body: dict[str, Any] | None = None
    outcome: str = "ok"

    def to_json(self) -> str:
        return "" if self.body is None else json.dumps(self.body)


def build_error_response(status: int, outcome: str, message: str) -> MockResponse:
    """Build an error response: {"error": outcome, "message": message}."""
    return MockResponse(status, {"error": outcome, "message": message}, outcome)


class RequestError(Exception):
    """Client error raised while parsing a request; becomes an error response."""

    def __init__(self, status: int, outcome: str, message: str):
        super().__init__(message)
        self.status = status
        self.outcome = outcome
        self.message = message

    def to_response(self) -> MockResponse:
        return build_error_response(self.status, self.outcome, self.message)


def malformed(message: str) -> RequestError:
    return RequestError(400, "malformed_request", message)


def not_found(message: str) -> RequestError:
    return RequestError(404, "not_found", message)


# =============================================================================
# Router
# =============================================================================


class RequestRouter:
    """Dispatches simulated HTTP requests against one session's state."""

    def __init__(
        self,
        store: RecordStore,
        log: RequestLog,
        projects: Iterable[Project] = (),
        catalog: FieldCatalog | None = None,
        api_key: str | None = None,
        collection: str = "issues",
        parent: str = "projects",
        delay: float = 0.0,
        page_size: int = DEFAULT_PAGE_SIZE,
        max_limit: int = MAX_PAGE_SIZE,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._store = store
        self._log = log
        self._projects = tuple(projects)
        self._catalog = catalog or FieldCatalog()
        self.api_key = api_key
        self.collection = collection
        self.singular = collection[:-1] if collection.endswith("s") else collection
        self.delay = delay
        self._page_size = page_size
        self._max_limit = max_limit
        self._sleep = sleep
        self._accept_lock = threading.Lock()

        c, p = re.escape(collection), re.escape(parent)
        self._routes: list[tuple[re.Pattern[str], dict[str, Callable[..., MockResponse]]]] = [
            (re.compile(r"^/projects\.json$"), {"GET": self._list_projects}),
            (re.compile(rf"^/{c}\.json$"), {"GET": self._list, "POST": self._create}),
            (
                re.compile(rf"^/{c}/(?P<record_id>\d+)\.json$"),
                {"GET": self._get, "PUT": self._update, "DELETE": self._delete},
            ),
            (
                re.compile(rf"^/{p}/(?P<project>[^/]+)/{c}\.json$"),
                {"GET": self._list, "POST": self._create},
            ),
        ]

    def handle(
        self,
        method: str,
        path: str,
        query: str | Mapping[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
        body: Any = None,
    ) -> MockResponse:
        """
        Handle one request and return its response.

        Args:
            method: HTTP method
            path: Request path relative to the service root, e.g. "/issues/3.json"
            query: Raw query string or a mapping of parameters
            headers: Request headers
            body: JSON text, bytes, or an already-decoded object

        The request is logged in the order it was accepted. The configured
        delay is applied afterwards without holding any lock.
        """
        method = method.upper()
        params = _parse_query(query)
        full_path = _full_path(path, query)
        header_map = CaseInsensitiveDict(headers or {})

        supplied_key = header_map.get(API_KEY_HEADER) or params.get(API_KEY_PARAM)
        if self.api_key is not None and supplied_key != self.api_key:
            logger.warning("Rejected %s %s: invalid or missing API key", method, path)
            response = build_error_response(401, "unauthorized", "Invalid or missing API key")
            self._log.append(LogEntry(method, full_path, response.status, response.outcome))
        else:
            with self._accept_lock:
                response = self._dispatch(method, path, params, body)
                self._log.append(LogEntry(method, full_path, response.status, response.outcome))
            logger.debug("%s %s -> %d", method, full_path, response.status)

        delay = self.delay
        if delay > 0:
            self._sleep(delay)
        return response

    def _dispatch(
        self, method: str, path: str, params: dict[str, str], body: Any
    ) -> MockResponse:
        for pattern, handlers in self._routes:
            match = pattern.match(path)
            if not match:
                continue
            handler = handlers.get(method)
            if handler is None:
                return build_error_response(
                    405, "method_not_allowed", f"Method {method} not allowed for {path}"
                )
            try:
                return handler(params, body, **match.groupdict())
            except RequestError as e:
                return e.to_response()
        return build_error_response(404, "not_found", f"No route for {method} {path}")

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    def _list(
        self, params: dict[str, str], body: Any, project: str | None = None
    ) -> MockResponse:
        status = _parse_status_filter(params.get("status_id"))
        records = filter_by_status(self._store.all(), status)

        if project is not None:
            ref = self._find_project(project).to_ref()
            records = [r for r in records if r.project and r.project.get("id") == ref["id"]]

        for key, value in params.items():
            if not key.startswith("cf_"):
                continue
            field = self._search_key(key[3:])
            exact = not value.startswith("~")
            keyword = value if exact else value[1:]
            records = search(records, field, keyword, exact_match=exact)

        offset, limit = self._page_params(params)
        page, total = paginate(records, offset, limit, self._page_size)
        return MockResponse(
            200,
            {
                self.collection: [self._render(record) for record in page],
                "total_count": total,
                "offset": offset,
                "limit": limit,
            },
        )

    def _get(self, params: dict[str, str], body: Any, record_id: str) -> MockResponse:
        record = self._store.get_by_id(int(record_id))
        if record is None:
            raise not_found(f"Asset not found: {record_id}")
        return MockResponse(200, {self.singular: self._render(record)})

    def _create(
        self, params: dict[str, str], body: Any, project: str | None = None
    ) -> MockResponse:
        fields = self._body_fields(body)
        changes = self._changes_from_fields(fields)
        name = changes.pop("name", None)
        if not name:
            raise malformed("name is required")
        if project is not None:
            changes["project"] = self._find_project(project).to_ref()
        changes.setdefault("author", dict(DEFAULT_AUTHOR))

        record = self._store.insert(AssetRecord(id=0, name=name, **changes))
        logger.info("Created asset %d (%s)", record.id, record.name)
        return MockResponse(201, {self.singular: self._render(record)}, "created")

    def _update(self, params: dict[str, str], body: Any, record_id: str) -> MockResponse:
        fields = self._body_fields(body)
        changes = self._changes_from_fields(fields)
        if "name" in changes and not changes["name"]:
            raise malformed("name cannot be blank")

        record = self._store.replace(int(record_id), changes)
        if record is None:
            raise not_found(f"Asset not found: {record_id}")
        return MockResponse(200, {self.singular: self._render(record)}, "updated")

    def _delete(self, params: dict[str, str], body: Any, record_id: str) -> MockResponse:
        if not self._store.delete(int(record_id)):
            raise not_found(f"Asset not found: {record_id}")
        logger.info("Deleted asset %s", record_id)
        return MockResponse(204, None, "deleted")

    def _list_projects(self, params: dict[str, str], body: Any) -> MockResponse:
        offset, limit = self._page_params(params)
        page, total = paginate(self._projects, offset, limit, self._page_size)
        return MockResponse(
            200,
            {
                "projects": [project.to_wire() for project in page],
                "total_count": total,
                "offset": offset,
                "limit": limit,
            },
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _render(self, record: AssetRecord) -> dict[str, Any]:
        return dict(record.to_wire(self._catalog))

    def _search_key(self, raw_id: str) -> str:
        for key, field_id in SEARCHABLE_FIELDS.items():
            if raw_id == str(field_id):
                return key
        raise malformed(f"Custom field cf_{raw_id} is not searchable")

    def _page_params(self, params: dict[str, str]) -> tuple[int, int]:
        offset = _parse_int(params, "offset", 0)
        limit = _parse_int(params, "limit", -1)
        if offset < 0:
            offset = 0
        if limit < 0:
            limit = self._page_size
        return offset, min(limit, self._max_limit)

    def _find_project(self, key: str) -> Project:
        for project in self._projects:
            if project.identifier == key or str(project.id) == key:
                return project
        raise not_found(f"Project not found: {key}")

    def _body_fields(self, body: Any) -> dict[str, Any]:
        if isinstance(body, bytes):
            body = body.decode("utf-8")
        if isinstance(body, str):
            try:
                body = json.loads(body) if body else None
            except json.JSONDecodeError as e:
                raise malformed(f"Request body is not valid JSON: {e}") from e
        if not isinstance(body, dict) or not isinstance(body.get(self.singular), dict):
            raise malformed(f"Request body must contain a '{self.singular}' object")
        return body[self.singular]

    def _changes_from_fields(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Translate request body fields into AssetRecord attribute changes."""
        changes: dict[str, Any] = {}
        extra: dict[str, Any] = {}
        for key, value in fields.items():
            if key in _READ_ONLY_KEYS:
                continue
            if key == "name":
                if not isinstance(value, str):
                    raise malformed("name must be a string")
                changes["name"] = value.strip()
            elif key in ("status", "status_id"):
                try:
                    changes["status"] = Status.parse(value)
                except ValueError as e:
                    raise malformed(str(e)) from e
            elif key == "type":
                if value is not None and not isinstance(value, dict):
                    raise malformed("type must be an object")
                changes["type"] = value
            elif key == "type_id":
                if isinstance(value, bool) or not isinstance(value, int):
                    raise malformed("type_id must be an integer")
                changes["type"] = {"id": value}
            elif key == "custom_fields":
                try:
                    changes["custom_fields"] = parse_custom_fields(value, self._catalog)
                except ValueError as e:
                    raise malformed(str(e)) from e
            elif key == "is_private":
                if not isinstance(value, bool):
                    raise malformed("is_private must be a boolean")
                changes["is_private"] = value
            elif key == "project_id":
                changes["project"] = self._find_project(str(value)).to_ref()
            elif key == "tags":
                if not isinstance(value, list):
                    raise malformed("tags must be a list")
                changes["tags"] = tuple(str(tag) for tag in value)
            elif key == "author":
                if value is not None and not isinstance(value, dict):
                    raise malformed("author must be an object")
                changes["author"] = value
            else:
                extra[key] = value
        if extra:
            changes["extra"] = extra
        return changes


# =============================================================================
# Query Parsing
# =============================================================================


def _parse_query(query: str | Mapping[str, Any] | None) -> dict[str, str]:
    """Flatten a query string or mapping to its first value per key."""
    if not query:
        return {}
    if isinstance(query, str):
        return {k: v[0] for k, v in parse_qs(query.lstrip("?"), keep_blank_values=True).items()}
    params = {}
    for key, value in query.items():
        if isinstance(value, (list, tuple)):
            value = value[0] if value else ""
        params[key] = str(value)
    return params


def _full_path(path: str, query: str | Mapping[str, Any] | None) -> str:
    """Path plus query string as logged; the API key parameter is left out."""
    if not query:
        return path
    if isinstance(query, str):
        pairs = [
            pair
            for pair in query.lstrip("?").split("&")
            if pair and unquote_plus(pair.split("=", 1)[0]) != API_KEY_PARAM
        ]
        text = "&".join(pairs)
    else:
        text = urlencode(
            {k: v for k, v in query.items() if k != API_KEY_PARAM}, doseq=True
        )
    return f"{path}?{text}" if text else path


def _parse_int(params: dict[str, str], key: str, default: int) -> int:
    raw = params.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise malformed(f"{key} must be an integer: {raw!r}") from None


def _parse_status_filter(raw: str | None) -> Status | None:
    if raw is None or raw in ("", "*"):
        return None
    try:
        return Status.parse(raw)
    except ValueError:
        raise malformed(f"Unknown status_id: {raw!r}") from None
