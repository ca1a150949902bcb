"""
Asset tracker API client.

This module provides:
- AssetClient: HTTP client for the asset tracking REST API
- JMESPath query support for client-side filtering
"""

from typing import Any

import jmespath
import requests

from hwtrack import config


# =============================================================================
# Asset Tracker API Client
# =============================================================================


class AssetClient:
    """HTTP client for the asset tracking API."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        collection: str | None = None,
    ):
        self.base_url = (base_url or config.BASE_URL).rstrip("/")
        self.collection = collection or config.COLLECTION
        self.singular = self.collection[:-1] if self.collection.endswith("s") else self.collection
        self._api_key = api_key if api_key is not None else config.API_KEY
        self._session = requests.Session()
        self._session.headers.update({"Content-Type": "application/json"})
        if self._api_key:
            self._session.headers[config.API_KEY_HEADER] = self._api_key

    def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        data: dict[str, Any] | None = None,
    ) -> requests.Response:
        """Make a request to the API and raise for error statuses."""
        url = f"{self.base_url}{path}"
        response = self._session.request(method, url, params=params, json=data)
        response.raise_for_status()
        return response

    def list_assets(self, **params: Any) -> dict[str, Any]:
        """
        Fetch one page of assets.

        Keyword arguments become query parameters, e.g. offset=0, limit=25,
        status_id=1, cf_1="~SN". Returns the list envelope.
        """
        return self._request("GET", f"/{self.collection}.json", params=params).json()

    def get_asset(self, asset_id: int) -> dict[str, Any] | None:
        """Fetch a single asset by id, or None if it does not exist."""
        try:
            result = self._request("GET", f"/{self.collection}/{asset_id}.json").json()
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                return None
            raise
        return result.get(self.singular)

    def create_asset(self, project: str | None, fields: dict[str, Any]) -> dict[str, Any]:
        """Create an asset in a project and return it with its assigned id."""
        path = (
            f"/projects/{project}/{self.collection}.json"
            if project
            else f"/{self.collection}.json"
        )
        result = self._request("POST", path, data={self.singular: fields}).json()
        return result[self.singular]

    def update_asset(self, asset_id: int, fields: dict[str, Any]) -> dict[str, Any] | None:
        """Apply a partial update; returns the updated asset when the server echoes it."""
        response = self._request(
            "PUT", f"/{self.collection}/{asset_id}.json", data={self.singular: fields}
        )
        if response.status_code == 204 or not response.content:
            return None
        return response.json().get(self.singular)

    def delete_asset(self, asset_id: int) -> None:
        self._request("DELETE", f"/{self.collection}/{asset_id}.json")

    def list_projects(self, **params: Any) -> dict[str, Any]:
        return self._request("GET", "/projects.json", params=params).json()

    def get_all_assets(self, page_size: int = config.MAX_PAGE_SIZE, **params: Any) -> list[dict[str, Any]]:
        """Fetch every asset matching the filters, following pagination."""
        assets: list[dict[str, Any]] = []
        offset = 0
        while True:
            page = self.list_assets(offset=offset, limit=page_size, **params)
            items = page.get(self.collection, [])
            assets.extend(items)
            offset += len(items)
            if not items or offset >= page.get("total_count", 0):
                return assets


# =============================================================================
# JMESPath Query Support
# =============================================================================


def apply_query(
    data: list[dict[str, Any]], expression: str
) -> tuple[Any, str | None]:
    """
    Apply a JMESPath expression to data.

    Args:
        data: The data to query
        expression: JMESPath expression

    Returns:
        Tuple of (result, error_message)
        error_message is None on success
    """
    try:
        result = jmespath.search(expression, data)
        return (result if result is not None else [], None)
    except jmespath.exceptions.JMESPathError as e:
        return ([], f"Invalid query expression: {e}")


# =============================================================================
# Global Instances
# =============================================================================

# Shared API client instance
api_client = AssetClient()
