"""Table orientation detection.

A fixture table describes a single object in one of two shapes::

    Vertical (key/value rows)       Horizontal (one data row)
    | Property | Value |            | Name | Age |
    | Name     | John  |            | John | 30  |
    | Age      | 44    |

A table is vertical when any of its headers equals the vertical keyword
(``"property"`` by default), compared without case.  The literal name of the
value column does not matter.
"""

from __future__ import annotations

from enum import Enum

from fixture_tables.table import Table


class Orientation(Enum):
    """Shape of a single-object table."""

    HORIZONTAL = "horizontal"  # headers are property names, first row holds values
    VERTICAL = "vertical"  # each row is a (property name, value) pair


def is_vertical(headers: tuple[str, ...] | list[str], keyword: str = "property") -> bool:
    """True if any header equals *keyword*, ignoring case."""
    target = keyword.casefold()
    return any(h.casefold() == target for h in headers)


def detect_orientation(table: Table, keyword: str = "property") -> Orientation:
    """Classify *table* as vertical or horizontal."""
    if is_vertical(table.headers, keyword):
        return Orientation.VERTICAL
    return Orientation.HORIZONTAL
