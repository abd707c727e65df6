"""Tests for fixture_tables.table — the Table / TableRow value objects."""

from __future__ import annotations

import pytest

from fixture_tables.errors import TableMappingError, TableShapeError
from fixture_tables.table import Table, TableRow


# ─── Construction ────────────────────────────────────────────────────────────


class TestTableConstruction:
    def test_headers_and_rows_keep_order(self):
        table = Table(["Name", "Age"], [["John", "30"], ["Jane", "25"]])
        assert table.headers == ("Name", "Age")
        assert [list(r) for r in table.rows] == [["John", "30"], ["Jane", "25"]]
        assert len(table) == 2

    def test_ragged_row_rejected(self):
        with pytest.raises(TableShapeError, match="Row 1 has 1 cells"):
            Table(["Name", "Age"], [["John", "30"], ["Jane"]])

    def test_shape_error_is_value_error(self):
        with pytest.raises(ValueError):
            Table(["A"], [["1", "2"]])
        assert issubclass(TableShapeError, TableMappingError)

    def test_cells_are_stringified(self):
        table = Table(["Age", "Nick"], [[30, None]])
        assert table.rows[0][0] == "30"
        assert table.rows[0][1] == ""

    def test_no_rows(self):
        table = Table(["Name"])
        assert table.rows == ()
        with pytest.raises(IndexError):
            table.rows[0]

    def test_repr(self):
        assert repr(Table(["A", "B"], [["1", "2"]])) == "Table(headers=['A', 'B'], rows=1)"


# ─── Header lookup ───────────────────────────────────────────────────────────


class TestHeaderLookup:
    def test_row_by_header_ignores_case(self):
        row = Table(["Name", "Age"], [["John", "30"]]).rows[0]
        assert row["name"] == "John"
        assert row["AGE"] == "30"

    def test_row_by_index(self):
        row = Table(["Name", "Age"], [["John", "30"]]).rows[0]
        assert row[0] == "John"
        assert row[-1] == "30"

    def test_unknown_header_raises_key_error(self):
        row = Table(["Name"], [["John"]]).rows[0]
        with pytest.raises(KeyError, match="No column named 'Email'"):
            row["Email"]

    def test_row_get_default(self):
        row = Table(["Name"], [["John"]]).rows[0]
        assert row.get("NAME") == "John"
        assert row.get("Email") is None
        assert row.get("Email", "-") == "-"

    def test_duplicate_headers_first_wins(self):
        row = Table(["Name", "name"], [["first", "second"]]).rows[0]
        assert row["NAME"] == "first"
        assert row[1] == "second"

    def test_has_header_and_index(self):
        table = Table(["Name", "Age"])
        assert table.has_header("age")
        assert not table.has_header("email")
        assert table.header_index("AGE") == 1
        with pytest.raises(KeyError):
            table.header_index("email")

    def test_as_dict(self):
        row = Table(["Name", "Age"], [["John", "30"]]).rows[0]
        assert row.as_dict() == {"Name": "John", "Age": "30"}

    def test_row_equality(self):
        row = Table(["A", "B"], [["1", "2"]]).rows[0]
        assert row == ["1", "2"]
        assert row == ("1", "2")
        assert row == TableRow(["1", "2"], ("X", "Y"), {})
        assert row != ["1"]


# ─── Alternate constructors ──────────────────────────────────────────────────


class TestFromRecords:
    def test_union_of_keys_in_first_seen_order(self):
        table = Table.from_records([
            {"Name": "John", "Age": 30},
            {"Name": "Jane", "Email": "jane@example.com"},
        ])
        assert table.headers == ("Name", "Age", "Email")
        assert list(table.rows[0]) == ["John", "30", ""]
        assert list(table.rows[1]) == ["Jane", "", "jane@example.com"]

    def test_empty(self):
        table = Table.from_records([])
        assert table.headers == ()
        assert table.rows == ()


class TestFromDataFrame:
    def test_columns_become_headers(self):
        pd = pytest.importorskip("pandas")
        df = pd.DataFrame({"Name": ["John", "Jane"], "Age": ["30", "25"]})
        table = Table.from_dataframe(df)
        assert table.headers == ("Name", "Age")
        assert list(table.rows[1]) == ["Jane", "25"]

    def test_missing_values_become_empty(self):
        pd = pytest.importorskip("pandas")
        df = pd.DataFrame({"Name": ["John", None], "Nick": [float("nan"), "JJ"]})
        table = Table.from_dataframe(df)
        assert list(table.rows[0]) == ["John", ""]
        assert list(table.rows[1]) == ["", "JJ"]
