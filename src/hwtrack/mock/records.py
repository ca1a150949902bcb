"""
In-memory record types for the mock backend.

Assets are held as frozen dataclasses. The custom field bag is a mapping
keyed by field id; display names live in a FieldCatalog and are only
attached when a record is rendered back to its JSON form.
"""

from dataclasses import dataclass, field
from typing import Any

from hwtrack.types import (
    CUSTOM_FIELD_NAMES,
    SEARCHABLE_FIELDS,
    AssetData,
    CustomFieldData,
    ProjectData,
    Status,
)

# Keys modeled explicitly on AssetRecord; anything else is kept in `extra`
RECORD_KEYS = (
    "id",
    "name",
    "status",
    "type",
    "custom_fields",
    "is_private",
    "project",
    "tags",
    "author",
    "created_at",
    "updated_at",
)


class FieldCatalog:
    """Lookup table between custom field ids and their display names."""

    def __init__(self, names: dict[int, str] | None = None):
        self._names: dict[int, str] = dict(CUSTOM_FIELD_NAMES)
        if names:
            self._names.update(names)

    def name_of(self, field_id: int) -> str | None:
        return self._names.get(field_id)

    def id_of(self, key: str) -> int | None:
        """Resolve a search key ("host_name") or display name ("Host Name")."""
        if key in SEARCHABLE_FIELDS:
            return SEARCHABLE_FIELDS[key]
        folded = key.lower()
        for field_id, name in self._names.items():
            if name.lower() == folded:
                return field_id
        return None

    def register(self, field_id: int, name: str) -> None:
        """Add a field seen in the dataset; well-known names are kept."""
        self._names.setdefault(field_id, name)


@dataclass(frozen=True)
class AssetRecord:
    """A single tracked asset."""

    id: int
    name: str
    status: Status = Status.TO_VERIFY
    type: dict[str, Any] | None = None
    custom_fields: dict[int, Any] = field(default_factory=dict)
    is_private: bool = False
    project: dict[str, Any] | None = None
    tags: tuple[str, ...] = ()
    author: dict[str, Any] | None = None
    created_at: str | None = None
    updated_at: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def custom_value(self, field_id: int) -> Any:
        return self.custom_fields.get(field_id)

    def has_custom_field(self, field_id: int) -> bool:
        return field_id in self.custom_fields

    def to_wire(self, catalog: FieldCatalog) -> AssetData:
        """Render the record as the JSON object the service returns."""
        custom_fields: list[CustomFieldData] = [
            {"id": field_id, "name": catalog.name_of(field_id) or "", "value": value}
            for field_id, value in self.custom_fields.items()
        ]
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "status": self.status.to_wire(),
            "type": dict(self.type) if self.type is not None else None,
            "custom_fields": custom_fields,
            "is_private": self.is_private,
            "project": dict(self.project) if self.project is not None else None,
            "tags": list(self.tags),
            "author": dict(self.author) if self.author is not None else None,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        for key, value in self.extra.items():
            data.setdefault(key, value)
        return data  # type: ignore[return-value]


@dataclass(frozen=True)
class Project:
    """Named grouping listed by the projects endpoint."""

    id: int
    name: str
    identifier: str

    def to_wire(self) -> ProjectData:
        return {"id": self.id, "name": self.name, "identifier": self.identifier}

    def to_ref(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}


# =============================================================================
# Parsing
# =============================================================================


def parse_custom_fields(
    entries: Any, catalog: FieldCatalog | None = None
) -> dict[int, Any]:
    """
    Convert a wire custom_fields list into an id-keyed mapping.

    Raises ValueError when the list or one of its entries has the wrong shape.
    Entry names are registered in the catalog when one is given.
    """
    if entries is None:
        return {}
    if not isinstance(entries, list):
        raise ValueError("custom_fields must be a list")
    fields: dict[int, Any] = {}
    for entry in entries:
        if not isinstance(entry, dict):
            raise ValueError("custom_fields entries must be objects")
        field_id = entry.get("id")
        if isinstance(field_id, bool) or not isinstance(field_id, int):
            raise ValueError(f"custom field id must be an integer: {field_id!r}")
        if catalog is not None and isinstance(entry.get("name"), str):
            catalog.register(field_id, entry["name"])
        fields[field_id] = entry.get("value")
    return fields


def record_from_wire(data: Any, catalog: FieldCatalog) -> AssetRecord:
    """Build an AssetRecord from a dataset entry. Raises ValueError on bad shape."""
    if not isinstance(data, dict):
        raise ValueError("asset records must be objects")
    record_id = data.get("id")
    if isinstance(record_id, bool) or not isinstance(record_id, int) or record_id < 1:
        raise ValueError(f"asset id must be a positive integer: {record_id!r}")
    name = data.get("name")
    if not isinstance(name, str):
        raise ValueError(f"asset {record_id} has no name")
    status = Status.parse(data.get("status", Status.TO_VERIFY))
    tags = data.get("tags") or []
    if not isinstance(tags, list):
        raise ValueError(f"asset {record_id} tags must be a list")
    for key in ("type", "project", "author"):
        if data.get(key) is not None and not isinstance(data[key], dict):
            raise ValueError(f"asset {record_id} {key} must be an object")
    is_private = data.get("is_private", False)
    if not isinstance(is_private, bool):
        raise ValueError(f"asset {record_id} is_private must be a boolean")

    return AssetRecord(
        id=record_id,
        name=name,
        status=status,
        type=data.get("type"),
        custom_fields=parse_custom_fields(data.get("custom_fields"), catalog),
        is_private=is_private,
        project=data.get("project"),
        tags=tuple(tags),
        author=data.get("author"),
        created_at=data.get("created_at"),
        updated_at=data.get("updated_at"),
        extra={k: v for k, v in data.items() if k not in RECORD_KEYS},
    )


def project_from_wire(data: Any) -> Project:
    if not isinstance(data, dict):
        raise ValueError("projects must be objects")
    project_id = data.get("id")
    if isinstance(project_id, bool) or not isinstance(project_id, int):
        raise ValueError(f"project id must be an integer: {project_id!r}")
    name = data.get("name")
    if not isinstance(name, str):
        raise ValueError(f"project {project_id} has no name")
    return Project(
        id=project_id,
        name=name,
        identifier=str(data.get("identifier") or name.lower().replace(" ", "-")),
    )
