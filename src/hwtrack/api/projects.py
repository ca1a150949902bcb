"""
Projects API module.

Provides the read-only project listing used to pick where assets are created.
"""

from dataclasses import dataclass

import requests

from hwtrack.client import api_client, apply_query
from hwtrack.types import ProjectData


# =============================================================================
# Response Types
# =============================================================================


@dataclass
class PaginatedProjectsResponse:
    """Response for paginated projects listing."""

    success: bool
    total: int
    offset: int
    limit: int
    has_more: bool
    data: list[ProjectData]
    error: str | None = None
    query_applied: str | None = None


# =============================================================================
# Tool Functions
# =============================================================================


def list_projects(
    limit: int = 25,
    offset: int = 0,
    query: str | None = None,
) -> PaginatedProjectsResponse:
    """
    List projects with optional JMESPath query and pagination.

    Args:
        limit: Maximum items to return (1-100, default 25)
        offset: Starting index (default 0)
        query: JMESPath expression applied to the returned page,
            e.g. "[?identifier == 'lab']"
    """
    if limit < 1 or limit > 100 or offset < 0:
        return PaginatedProjectsResponse(
            success=False,
            error="limit must be between 1 and 100 and offset non-negative",
            total=0,
            offset=0,
            limit=limit,
            has_more=False,
            data=[],
        )

    try:
        page = api_client.list_projects(offset=offset, limit=limit)
    except requests.RequestException as e:
        return PaginatedProjectsResponse(
            success=False,
            error=f"API request failed: {e}",
            total=0,
            offset=offset,
            limit=limit,
            has_more=False,
            data=[],
        )

    data = page.get("projects", [])
    total = page.get("total_count", len(data))

    if query:
        data, error = apply_query(data, query)
        if error:
            return PaginatedProjectsResponse(
                success=False,
                error=error,
                total=0,
                offset=offset,
                limit=limit,
                has_more=False,
                query_applied=query,
                data=[],
            )
        if not isinstance(data, list):
            data = [data]

    return PaginatedProjectsResponse(
        success=True,
        total=total,
        offset=offset,
        limit=limit,
        has_more=offset + limit < total,
        query_applied=query,
        data=data,
    )
