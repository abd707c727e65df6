"""Table value object: ordered headers plus rows of string cells.

Tables are produced by an external parser (Gherkin data tables, pipe tables,
spreadsheets).  This module only holds the parsed grid and offers the access
patterns the mapping engine needs: cells by position and cells by
case-insensitive header name.

Usage::

    from fixture_tables import Table

    table = Table(["Name", "Age"], [["John", "30"], ["Jane", "25"]])
    table.rows[0]["name"]   # "John"
    table.rows[1][1]        # "25"
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Mapping, Sequence, TYPE_CHECKING

from fixture_tables.errors import TableShapeError

if TYPE_CHECKING:
    import pandas as pd


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


class TableRow:
    """One row of a :class:`Table`.

    Cells are addressable by integer position and by header name; header
    lookup ignores case, and the first of several equal headers wins.
    """

    __slots__ = ("_cells", "_headers", "_index")

    def __init__(self, cells: Sequence[str], headers: tuple[str, ...], index: Mapping[str, int]):
        self._cells = tuple(cells)
        self._headers = headers
        self._index = index

    def __getitem__(self, key: int | str) -> str:
        if isinstance(key, int):
            return self._cells[key]
        try:
            return self._cells[self._index[key.casefold()]]
        except KeyError:
            raise KeyError(f"No column named '{key}' (headers: {list(self._headers)})") from None

    def get(self, header: str, default: str | None = None) -> str | None:
        pos = self._index.get(header.casefold())
        return default if pos is None else self._cells[pos]

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self) -> Iterator[str]:
        return iter(self._cells)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TableRow):
            return self._cells == other._cells
        if isinstance(other, (list, tuple)):
            return self._cells == tuple(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"TableRow({list(self._cells)!r})"

    def as_dict(self) -> dict[str, str]:
        """Return ``{header: cell}`` in column order."""
        return dict(zip(self._headers, self._cells))


class Table:
    """Ordered headers and rows of string cells.

    Every row must have exactly as many cells as there are headers;
    a ragged grid raises :class:`TableShapeError`.  Non-string cells are
    stringified and ``None`` becomes an empty string.
    """

    def __init__(self, headers: Iterable[str], rows: Iterable[Sequence[Any]] = ()):
        self._headers: tuple[str, ...] = tuple(_cell_text(h) for h in headers)

        index: dict[str, int] = {}
        for pos, header in enumerate(self._headers):
            index.setdefault(header.casefold(), pos)
        self._index = index

        built: list[TableRow] = []
        for ri, row in enumerate(rows):
            cells = [_cell_text(c) for c in row]
            if len(cells) != len(self._headers):
                raise TableShapeError(
                    f"Row {ri} has {len(cells)} cells but the table has "
                    f"{len(self._headers)} headers"
                )
            built.append(TableRow(cells, self._headers, index))
        self._rows: tuple[TableRow, ...] = tuple(built)

    @property
    def headers(self) -> tuple[str, ...]:
        return self._headers

    @property
    def rows(self) -> tuple[TableRow, ...]:
        return self._rows

    def __len__(self) -> int:
        return len(self._rows)

    def __repr__(self) -> str:
        return f"Table(headers={list(self._headers)!r}, rows={len(self._rows)})"

    def has_header(self, name: str) -> bool:
        """Case-insensitive header membership test."""
        return name.casefold() in self._index

    def header_index(self, name: str) -> int:
        """Position of the first header equal to *name*, ignoring case."""
        try:
            return self._index[name.casefold()]
        except KeyError:
            raise KeyError(f"No column named '{name}'") from None

    # ─── Alternate constructors ──────────────────────────────────────────

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> Table:
        """Build a table from dicts.

        Headers are the union of keys in first-seen order; a key missing
        from a record yields an empty cell.
        """
        records = list(records)
        headers: list[str] = []
        seen: set[str] = set()
        for rec in records:
            for key in rec:
                if key not in seen:
                    seen.add(key)
                    headers.append(key)
        rows = [[rec.get(h) for h in headers] for rec in records]
        return cls(headers, rows)

    @classmethod
    def from_dataframe(cls, df: pd.DataFrame) -> Table:
        """Build a table from a pandas DataFrame.

        Column labels become headers; missing values (``NaN``, ``None``,
        ``NaT``) become empty cells.

        Requires ``pandas`` to be installed. Install with::

            pip install fixture-tables[dataframes]
        """
        try:
            import pandas as pd
        except ImportError as e:
            raise ImportError(
                "pandas is required for DataFrame input. "
                "Install it with: pip install pandas "
                "or: pip install fixture-tables[dataframes]"
            ) from e

        headers = [str(c) for c in df.columns]
        rows = [
            ["" if pd.isna(v) else v for v in rec]
            for rec in df.itertuples(index=False, name=None)
        ]
        return cls(headers, rows)
