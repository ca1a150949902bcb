"""
Unit tests for shared types and the field catalog.
"""

import pytest

from hwtrack.mock.records import FieldCatalog, parse_custom_fields
from hwtrack.types import CUSTOM_FIELD_NAMES, SEARCHABLE_FIELDS, Status


class TestStatus:
    """Tests for the Status enum."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (1, Status.VALID),
            ("2", Status.TO_VERIFY),
            ("to-verify", Status.TO_VERIFY),
            ("To Verify", Status.TO_VERIFY),
            ("INVALID", Status.INVALID),
            ({"id": 3, "name": "Invalid"}, Status.INVALID),
        ],
    )
    def test_parse(self, value, expected):
        assert Status.parse(value) is expected

    @pytest.mark.parametrize("value", [0, 4, "lost", None, True, {"name": "Valid"}])
    def test_parse_rejects(self, value):
        with pytest.raises(ValueError):
            Status.parse(value)

    def test_to_wire(self):
        assert Status.TO_VERIFY.to_wire() == {"id": 2, "name": "To Verify"}


class TestFieldCatalog:
    """Tests for the custom field lookup table."""

    def test_searchable_fields_are_catalogued(self):
        for field_id in SEARCHABLE_FIELDS.values():
            assert field_id in CUSTOM_FIELD_NAMES

    def test_id_of_search_key_and_display_name(self):
        catalog = FieldCatalog()

        assert catalog.id_of("mac_address") == 5
        assert catalog.id_of("Host Name") == 2
        assert catalog.id_of("location") == 8
        assert catalog.id_of("Warranty") is None

    def test_register_keeps_well_known_names(self):
        catalog = FieldCatalog()
        catalog.register(1, "S/N")
        catalog.register(50, "Warranty")

        assert catalog.name_of(1) == "Serial Number"
        assert catalog.name_of(50) == "Warranty"


class TestParseCustomFields:
    """Tests for parse_custom_fields."""

    def test_keyed_by_id_in_order(self):
        fields = parse_custom_fields([{"id": 4, "value": "M"}, {"id": 1, "value": "S"}])
        assert list(fields.items()) == [(4, "M"), (1, "S")]

    def test_none_is_empty(self):
        assert parse_custom_fields(None) == {}

    @pytest.mark.parametrize("entries", ["x", [1], [{"id": "1"}], [{"value": "v"}]])
    def test_rejects_bad_shapes(self, entries):
        with pytest.raises(ValueError):
            parse_custom_fields(entries)
