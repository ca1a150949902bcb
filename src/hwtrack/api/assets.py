"""
Assets API module.

Provides operations on tracked hardware assets:
- list_assets - page through assets with server-side filters
- search_assets - find assets by a well-known custom field
- get_asset - retrieve one asset
- create_asset / update_asset / delete_asset - modify assets
"""

from dataclasses import dataclass
from typing import Any

import requests

from hwtrack.client import api_client, apply_query
from hwtrack.types import SEARCHABLE_FIELDS, AssetData, Status


# =============================================================================
# Response Types
# =============================================================================


@dataclass
class PaginatedAssetsResponse:
    """Response for paginated asset listing."""

    success: bool
    total: int
    offset: int
    limit: int
    has_more: bool
    data: list[AssetData]
    error: str | None = None
    query_applied: str | None = None


@dataclass
class AssetResponse:
    """Response for a single asset."""

    success: bool
    data: AssetData | None = None
    error: str | None = None


@dataclass
class AssetOperationResponse:
    """Response for asset modification operations."""

    success: bool
    data: AssetData | None = None
    error: str | None = None


def _failed_page(error: str, offset: int, limit: int, query: str | None = None) -> PaginatedAssetsResponse:
    return PaginatedAssetsResponse(
        success=False,
        error=error,
        total=0,
        offset=offset,
        limit=limit,
        has_more=False,
        query_applied=query,
        data=[],
    )


def _status_param(status: str | int | None) -> str | None:
    if status is None:
        return None
    if status == "*":
        return "*"
    return str(int(Status.parse(status)))


# =============================================================================
# Tool Functions
# =============================================================================


def list_assets(
    limit: int = 25,
    offset: int = 0,
    status: str | int | None = None,
    filters: dict[str, str] | None = None,
    query: str | None = None,
) -> PaginatedAssetsResponse:
    """
    List assets with server-side filtering and pagination.

    Args:
        limit: Maximum items to return (1-100, default 25)
        offset: Starting index in the filtered results (default 0)
        status: Status code or label ("valid", "to-verify", "invalid"), or "*" for all
        filters: Custom field filters keyed by search key, e.g. {"host_name": "~srv"}.
            A leading "~" requests a containment match, otherwise values match exactly.
        query: JMESPath expression applied to the returned page, e.g.
            "[?is_private == `false`]"

    Returns:
        PaginatedAssetsResponse with the page and pagination info.
    """
    if limit < 1 or limit > 100:
        return _failed_page("limit must be between 1 and 100", 0, limit)
    if offset < 0:
        return _failed_page("offset must be non-negative", 0, limit)

    params: dict[str, Any] = {"offset": offset, "limit": limit}
    try:
        status_id = _status_param(status)
    except ValueError as e:
        return _failed_page(str(e), offset, limit)
    if status_id is not None:
        params["status_id"] = status_id

    for key, value in (filters or {}).items():
        field_id = SEARCHABLE_FIELDS.get(key)
        if field_id is None:
            return _failed_page(f"Unsupported filter field: {key}", offset, limit)
        params[f"cf_{field_id}"] = value

    try:
        page = api_client.list_assets(**params)
    except requests.RequestException as e:
        return _failed_page(f"API request failed: {e}", offset, limit)

    data = page.get(api_client.collection, [])
    total = page.get("total_count", len(data))

    if query:
        data, error = apply_query(data, query)
        if error:
            return _failed_page(error, offset, limit, query)
        if not isinstance(data, list):
            data = [data]

    return PaginatedAssetsResponse(
        success=True,
        total=total,
        offset=page.get("offset", offset),
        limit=page.get("limit", limit),
        has_more=offset + limit < total,
        query_applied=query,
        data=data,
    )


def search_assets(
    field: str,
    keyword: str,
    status: str | int | None = None,
    exact_match: bool = False,
    limit: int = 25,
    offset: int = 0,
) -> PaginatedAssetsResponse:
    """
    Search assets by one of the well-known custom fields.

    Args:
        field: Search key: serial_number, host_name, program, model,
            mac_address, parent or type
        keyword: Value to look for
        status: Optional status filter
        exact_match: Require equality instead of containment
        limit: Maximum items to return
        offset: Starting index

    Searching by name or id is not supported here; use get_asset.
    """
    if field not in SEARCHABLE_FIELDS:
        return _failed_page(f"Unsupported search field: {field}", offset, limit)
    if not keyword:
        return _failed_page("keyword is required", offset, limit)

    value = keyword if exact_match else f"~{keyword}"
    return list_assets(limit=limit, offset=offset, status=status, filters={field: value})


def get_asset(asset_id: int) -> AssetResponse:
    """
    Get detailed information for a specific asset.

    Args:
        asset_id: The asset identifier

    Returns:
        AssetResponse with asset data or error.
    """
    if not asset_id:
        return AssetResponse(success=False, error="asset_id is required")

    try:
        data = api_client.get_asset(asset_id)
        if data is None:
            return AssetResponse(success=False, error=f"Asset not found: {asset_id}")
        return AssetResponse(success=True, data=data)
    except requests.RequestException as e:
        return AssetResponse(success=False, error=f"API request failed: {e}")


def create_asset(
    name: str,
    project: str | None = None,
    status: str | int | None = None,
    custom_fields: dict[int, Any] | None = None,
    **fields: Any,
) -> AssetOperationResponse:
    """
    Create a new asset.

    Args:
        name: Asset name (required)
        project: Project identifier the asset belongs to
        status: Initial status; the server defaults to "To Verify"
        custom_fields: Field values keyed by custom field id
        **fields: Other already-normalized asset fields (tags, is_private, ...)

    Returns:
        AssetOperationResponse with the created asset, including its id.
    """
    if not name:
        return AssetOperationResponse(success=False, error="name is required")

    body: dict[str, Any] = {"name": name, **fields}
    try:
        if status is not None:
            body["status_id"] = int(Status.parse(status))
    except ValueError as e:
        return AssetOperationResponse(success=False, error=str(e))
    if custom_fields:
        body["custom_fields"] = [{"id": k, "value": v} for k, v in custom_fields.items()]

    try:
        data = api_client.create_asset(project, body)
        return AssetOperationResponse(success=True, data=data)
    except requests.RequestException as e:
        return AssetOperationResponse(success=False, error=f"API request failed: {e}")


def update_asset(
    asset_id: int,
    status: str | int | None = None,
    custom_fields: dict[int, Any] | None = None,
    **fields: Any,
) -> AssetOperationResponse:
    """
    Update an existing asset. Only the supplied fields change.

    Args:
        asset_id: The asset identifier
        status: New status
        custom_fields: Field values keyed by custom field id; other fields keep their values
        **fields: Other already-normalized asset fields
    """
    if not asset_id:
        return AssetOperationResponse(success=False, error="asset_id is required")

    body: dict[str, Any] = dict(fields)
    try:
        if status is not None:
            body["status_id"] = int(Status.parse(status))
    except ValueError as e:
        return AssetOperationResponse(success=False, error=str(e))
    if custom_fields:
        body["custom_fields"] = [{"id": k, "value": v} for k, v in custom_fields.items()]
    if not body:
        return AssetOperationResponse(success=False, error="No fields to update")

    try:
        data = api_client.update_asset(asset_id, body)
        return AssetOperationResponse(success=True, data=data)
    except requests.RequestException as e:
        return AssetOperationResponse(success=False, error=f"API request failed: {e}")


def delete_asset(asset_id: int) -> AssetOperationResponse:
    """Delete an asset."""
    if not asset_id:
        return AssetOperationResponse(success=False, error="asset_id is required")

    try:
        api_client.delete_asset(asset_id)
        return AssetOperationResponse(success=True)
    except requests.RequestException as e:
        return AssetOperationResponse(success=False, error=f"API request failed: {e}")
