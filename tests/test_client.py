"""
Unit tests for the AssetClient and JMESPath helper.
"""

import pytest
import requests

from hwtrack.client import AssetClient, apply_query
from tests.sample_assets import SAMPLE_ASSETS, TEST_API_KEY


@pytest.fixture
def client():
    return AssetClient(api_key=TEST_API_KEY)


class TestAssetClient:
    """Tests for AssetClient against an intercepting session."""

    def test_get_all_assets_follows_pages(self, session_active, client):
        assets = client.get_all_assets(page_size=2)

        assert assets == SAMPLE_ASSETS
        assert [e.path for e in session_active.requests()] == [
            "/issues.json?offset=0&limit=2",
            "/issues.json?offset=2&limit=2",
            "/issues.json?offset=4&limit=2",
        ]

    def test_get_all_assets_with_filter(self, session_active, client):
        assets = client.get_all_assets(status_id=3)
        assert [a["name"] for a in assets] == ["old-switch"]

    def test_get_asset_missing_returns_none(self, session_active, client):
        assert client.get_asset(3) is None

    def test_update_returns_asset(self, session_active, client):
        updated = client.update_asset(4, {"is_private": True})
        assert updated["is_private"] is True

    def test_create_without_project(self, session_active, client):
        created = client.create_asset(None, {"name": "loose"})

        assert created["id"] == 10
        assert created["project"] is None
        assert session_active.requests()[0].path == "/issues.json"

    def test_list_projects(self, session_active, client):
        assert client.list_projects()["total_count"] == 2

    def test_missing_key_raises(self, session_active):
        client = AssetClient(api_key="")

        with pytest.raises(requests.HTTPError) as exc_info:
            client.list_assets()
        assert exc_info.value.response.status_code == 401

    def test_key_header_is_sent(self, client):
        assert client._session.headers["X-Redmine-API-Key"] == TEST_API_KEY


class TestApplyQuery:
    """Tests for apply_query."""

    def test_filter(self):
        result, error = apply_query(SAMPLE_ASSETS, "[?status.id == `3`].name")

        assert error is None
        assert result == ["old-switch"]

    def test_custom_field_projection(self):
        result, error = apply_query(
            SAMPLE_ASSETS, "[].custom_fields[?id == `2`].value | []"
        )

        assert error is None
        assert result == [
            "web01.example.com",
            "db01.example.com",
            "sw-legacy.example.com",
            "WEB02.example.com",
        ]

    def test_no_match_returns_empty_list(self):
        result, error = apply_query(SAMPLE_ASSETS, "missing")
        assert (result, error) == ([], None)

    def test_invalid_expression(self):
        result, error = apply_query(SAMPLE_ASSETS, "[?")

        assert result == []
        assert error.startswith("Invalid query expression")
