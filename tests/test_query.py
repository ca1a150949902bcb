"""
Unit tests for search and pagination.
"""

import pytest

from hwtrack.mock.query import matches, paginate, search
from hwtrack.types import Status


def ids(records):
    return [r.id for r in records]


class TestSearch:
    """Tests for search()."""

    def test_containment_is_case_insensitive_by_default(self, store):
        assert ids(search(store.all(), "host_name", "web")) == [1, 9]

    def test_case_sensitive_containment(self, store):
        assert ids(search(store.all(), "host_name", "web", case_sensitive=True)) == [1]

    def test_exact_match(self, store):
        assert ids(search(store.all(), "serial_number", "sn-1002", exact_match=True)) == [2]

    def test_exact_match_case_sensitive(self, store):
        result = search(
            store.all(), "serial_number", "sn-1002", case_sensitive=True, exact_match=True
        )
        assert result == []

    def test_exact_match_rejects_substrings(self, store):
        assert search(store.all(), "serial_number", "SN-100", exact_match=True) == []

    def test_status_filter(self, store):
        result = search(store.all(), "program", "Apollo", status=Status.VALID)
        assert ids(result) == [1]

    def test_records_without_field_are_skipped(self, store):
        assert ids(search(store.all(), "mac_address", "00")) == [2]
        assert ids(search(store.all(), "parent", "rack")) == [7]

    def test_pattern_match(self, store):
        assert ids(search(store.all(), "serial_number", "SN-*")) == [1, 2, 9]
        assert ids(search(store.all(), "serial_number", "??-00*")) == [7]

    def test_search_by_name(self, store):
        assert ids(search(store.all(), "name", "srv")) == [1, 2, 9]

    def test_search_by_id(self, store):
        assert ids(search(store.all(), "id", "4", exact_match=True)) == [4]

    def test_unsupported_field(self, store):
        with pytest.raises(ValueError):
            search(store.all(), "location", "Bench")

    def test_results_keep_store_order(self, store):
        assert ids(search(store.all(), "model", "e")) == [1, 4]


class TestMatches:
    """Tests for the value comparison helper."""

    def test_none_never_matches(self):
        assert matches(None, "") is False

    def test_non_string_values(self):
        assert matches(1002, "100") is True
        assert matches(1002, "1002", exact_match=True) is True


class TestPaginate:
    """Tests for paginate()."""

    def test_page_sizes(self):
        """Page length is min(max(M - o, 0), l) and the total is always M."""
        for size in (0, 1, 5, 12):
            items = list(range(size))
            for offset in (0, 1, 4, 12, 20):
                for limit in (0, 1, 3, 25):
                    page, total = paginate(items, offset, limit)
                    assert len(page) == min(max(size - offset, 0), limit)
                    assert total == size

    def test_page_is_contiguous_slice(self):
        page, _ = paginate(list(range(10)), 3, 4)
        assert page == [3, 4, 5, 6]

    def test_offset_past_end(self):
        page, total = paginate([1, 2, 3], 10, 5)
        assert page == []
        assert total == 3

    def test_missing_limit_uses_default(self):
        page, total = paginate(list(range(40)), 0, None)
        assert len(page) == 25
        assert total == 40

    def test_negative_limit_uses_default(self):
        page, _ = paginate(list(range(40)), 30, -1, default_limit=5)
        assert page == [30, 31, 32, 33, 34]
