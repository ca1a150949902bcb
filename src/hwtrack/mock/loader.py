"""
Dataset loader for the mock backend.

Reads a JSON dataset once and builds the initial Snapshot. The dataset is
either a top-level array of asset records, or an object holding the records
under the collection name (or "records") and an optional "projects" array:

    {
        "issues": [{"id": 1, "name": "srv-01", "status": {"id": 1}, ...}],
        "projects": [{"id": 1, "name": "Lab", "identifier": "lab"}]
    }
"""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from hwtrack.mock.records import (
    AssetRecord,
    FieldCatalog,
    Project,
    project_from_wire,
    record_from_wire,
)

logger = logging.getLogger(__name__)


class LoadErrorReason(str, Enum):
    NOT_FOUND = "not_found"
    MALFORMED = "malformed"
    DUPLICATE_ID = "duplicate_id"


class LoadError(Exception):
    """Raised when a dataset cannot be turned into a snapshot."""

    def __init__(self, reason: LoadErrorReason, message: str):
        super().__init__(message)
        self.reason = reason


@dataclass(frozen=True)
class Snapshot:
    """Initial state of one mock session."""

    records: tuple[AssetRecord, ...]
    projects: tuple[Project, ...]
    catalog: FieldCatalog
    source: Path | None = None


def load_snapshot(source_path: str | Path, collection: str = "issues") -> Snapshot:
    """
    Load a dataset file into a Snapshot.

    Args:
        source_path: Path to the JSON dataset
        collection: Key holding the records when the document is an object

    Raises:
        LoadError: NOT_FOUND if the path does not resolve to a file,
            MALFORMED if the document is not the expected shape,
            DUPLICATE_ID if two records share an id.
    """
    path = Path(source_path)
    if not path.is_file():
        raise LoadError(LoadErrorReason.NOT_FOUND, f"Dataset not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as fh:
            document = json.load(fh)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise LoadError(LoadErrorReason.MALFORMED, f"Invalid JSON in {path}: {e}") from e

    snapshot = build_snapshot(document, collection)
    logger.info(
        "Loaded %d records and %d projects from %s",
        len(snapshot.records),
        len(snapshot.projects),
        path,
    )
    return Snapshot(
        records=snapshot.records,
        projects=snapshot.projects,
        catalog=snapshot.catalog,
        source=path,
    )


def build_snapshot(document: Any, collection: str = "issues") -> Snapshot:
    """Build a Snapshot from an already-parsed dataset document."""
    if isinstance(document, list):
        raw_records, raw_projects = document, []
    elif isinstance(document, dict):
        raw_records = document.get(collection, document.get("records"))
        raw_projects = document.get("projects") or []
    else:
        raise LoadError(LoadErrorReason.MALFORMED, "Dataset must be an array or an object")

    if not isinstance(raw_records, list):
        raise LoadError(
            LoadErrorReason.MALFORMED, f"Dataset has no '{collection}' array of records"
        )
    if not isinstance(raw_projects, list):
        raise LoadError(LoadErrorReason.MALFORMED, "'projects' must be an array")

    catalog = FieldCatalog()
    records: list[AssetRecord] = []
    seen: set[int] = set()
    try:
        for raw in raw_records:
            record = record_from_wire(raw, catalog)
            if record.id in seen:
                raise LoadError(
                    LoadErrorReason.DUPLICATE_ID, f"Duplicate record id: {record.id}"
                )
            seen.add(record.id)
            records.append(record)
        projects = [project_from_wire(raw) for raw in raw_projects]
    except ValueError as e:
        raise LoadError(LoadErrorReason.MALFORMED, str(e)) from e

    return Snapshot(records=tuple(records), projects=tuple(projects), catalog=catalog)
