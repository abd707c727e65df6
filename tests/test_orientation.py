"""Tests for fixture_tables.orientation — vertical vs. horizontal detection."""

from __future__ import annotations

import pytest

from fixture_tables.orientation import Orientation, detect_orientation, is_vertical
from fixture_tables.table import Table


class TestDetectOrientation:
    @pytest.mark.parametrize("header", ["Property", "property", "PROPERTY", "pRoPeRtY"])
    def test_property_header_any_case_is_vertical(self, header):
        table = Table([header, "Value"], [["Name", "John"]])
        assert detect_orientation(table) is Orientation.VERTICAL

    def test_second_header_name_is_irrelevant(self):
        table = Table(["Property", "Whatever"], [["Name", "John"]])
        assert detect_orientation(table) is Orientation.VERTICAL

    def test_property_header_in_any_position(self):
        table = Table(["Field", "Value", "Property"], [["a", "b", "c"]])
        assert detect_orientation(table) is Orientation.VERTICAL

    def test_property_among_other_columns(self):
        table = Table(["Name", "Property", "Age"], [])
        assert detect_orientation(table) is Orientation.VERTICAL

    def test_no_property_header_is_horizontal(self):
        table = Table(["Name", "Age"], [["John", "30"]])
        assert detect_orientation(table) is Orientation.HORIZONTAL

    def test_partial_match_is_horizontal(self):
        table = Table(["Properties", "PropertyName"], [["a", "b"]])
        assert detect_orientation(table) is Orientation.HORIZONTAL

    def test_empty_table_without_property_is_horizontal(self):
        assert detect_orientation(Table([])) is Orientation.HORIZONTAL

    def test_custom_keyword(self):
        table = Table(["Field", "Value"], [["Name", "John"]])
        assert detect_orientation(table, keyword="field") is Orientation.VERTICAL
        assert detect_orientation(table) is Orientation.HORIZONTAL


class TestIsVertical:
    def test_plain_sequences(self):
        assert is_vertical(["Property", "Value"])
        assert is_vertical(("value", "PROPERTY"))
        assert not is_vertical(["Name", "Age"])
        assert not is_vertical([])
