"""
Type definitions for the asset tracker API.

This module provides TypedDict definitions for the JSON entities exchanged
with the asset tracking service, the closed set of asset statuses, and the
catalog of well-known custom fields.
"""

from enum import IntEnum
from typing import Any, TypedDict


# =============================================================================
# Status
# =============================================================================


class Status(IntEnum):
    """Verification status of an asset, with its stable wire code."""

    VALID = 1
    TO_VERIFY = 2
    INVALID = 3

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]

    def to_wire(self) -> "StatusData":
        return {"id": int(self), "name": self.label}

    @classmethod
    def parse(cls, value: Any) -> "Status":
        """
        Resolve a status from a code, a label or a wire dict.

        Accepts 1, "1", "valid", "To Verify", "to-verify" or {"id": 2, ...}.
        Raises ValueError for anything else.
        """
        if isinstance(value, dict):
            value = value.get("id")
        if isinstance(value, bool):
            raise ValueError(f"Invalid status: {value!r}")
        if isinstance(value, int):
            return cls(value)
        if isinstance(value, str):
            text = value.strip()
            if text.isdigit():
                return cls(int(text))
            key = text.lower().replace("-", " ").replace("_", " ")
            for status, label in _STATUS_LABELS.items():
                if label.lower() == key:
                    return status
        raise ValueError(f"Invalid status: {value!r}")


_STATUS_LABELS = {
    Status.VALID: "Valid",
    Status.TO_VERIFY: "To Verify",
    Status.INVALID: "Invalid",
}


# =============================================================================
# Custom Field Catalog
# =============================================================================

# Well-known custom fields: id -> display name
CUSTOM_FIELD_NAMES: dict[int, str] = {
    1: "Serial Number",
    2: "Host Name",
    3: "Program",
    4: "Model",
    5: "MAC Address",
    6: "Parent",
    7: "Type",
    8: "Location",
}

# Custom fields accepted by search: search key -> field id
SEARCHABLE_FIELDS: dict[str, int] = {
    "serial_number": 1,
    "host_name": 2,
    "program": 3,
    "model": 4,
    "mac_address": 5,
    "parent": 6,
    "type": 7,
}


# =============================================================================
# Wire Types
# =============================================================================


class StatusData(TypedDict):
    """Status reference: {"id": code, "name": label}."""

    id: int
    name: str


class TypeData(TypedDict):
    """Asset classification drawn from the external type catalog."""

    id: int
    name: str


class CustomFieldData(TypedDict, total=False):
    """
    One entry of an asset's custom field bag.

    Fields:
        id: Stable custom field identifier (join key)
        name: Display name, denormalized from the field catalog
        value: Field value, usually a string
    """

    id: int
    name: str
    value: Any


class ProjectRefData(TypedDict):
    """Project reference embedded in an asset."""

    id: int
    name: str


class AssetData(TypedDict, total=False):
    """
    Asset entity representing one tracked hardware item.

    Required fields (always present):
        id: Positive integer identifier
        name: Asset name, used as a secondary lookup key
        status: Verification status reference

    Optional fields:
        type: Classification reference
        custom_fields: Ordered list of custom field entries
        is_private: Visibility flag
        project: Owning project reference
        tags: List of tags
        author: User reference of the creator
        created_at: Creation timestamp (ISO 8601, UTC)
        updated_at: Last update timestamp (ISO 8601, UTC)
    """

    id: int
    name: str
    status: StatusData
    type: TypeData | None
    custom_fields: list[CustomFieldData]
    is_private: bool
    project: ProjectRefData | None
    tags: list[str]
    author: dict[str, Any] | None
    created_at: str | None
    updated_at: str | None


class ProjectData(TypedDict):
    """Project grouping returned by the list-projects endpoint."""

    id: int
    name: str
    identifier: str
