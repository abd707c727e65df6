"""Exception hierarchy for table-to-object mapping.

Every error raised by this package derives from :class:`TableMappingError`,
so callers can catch the whole family with one ``except`` clause.  Structural
errors additionally derive from the matching builtin (``IndexError``,
``ValueError``) so code written against plain sequence semantics keeps
working.
"""

from __future__ import annotations

from typing import Any


class TableMappingError(Exception):
    """Base class for all fixture-table mapping errors."""


class MappingError(TableMappingError):
    """Raised when a single property cannot be converted or assigned.

    The underlying failure is always chained as ``__cause__``.
    """

    def __init__(self, property_name: str, raw_value: str, message: str | None = None):
        if message is None:
            message = f"Failed to set property '{property_name}' with value '{raw_value}'."
        super().__init__(message)
        self.property_name = property_name
        self.raw_value = raw_value


class ConversionError(TableMappingError):
    """Raised when no converter matches and the fallback coercion fails."""

    def __init__(
        self,
        property_name: str,
        raw_value: str,
        target_type: Any,
        message: str | None = None,
    ):
        if message is None:
            message = (
                f"Cannot convert '{raw_value}' to {_type_name(target_type)} "
                f"for property '{property_name}'."
            )
        super().__init__(message)
        self.property_name = property_name
        self.raw_value = raw_value
        self.target_type = target_type


class BackingStorageError(TableMappingError):
    """Raised when a read-only property has no storage the value can be written to."""

    def __init__(self, property_name: str, backing_field: str | None):
        where = f"'{backing_field}'" if backing_field else "none declared"
        super().__init__(
            f"Property '{property_name}' is read-only and has no backing storage ({where})."
        )
        self.property_name = property_name
        self.backing_field = backing_field


class EmptyTableError(TableMappingError, IndexError):
    """Raised when a horizontal table has no data row to read from."""


class TableShapeError(TableMappingError, ValueError):
    """Raised when a table's rows do not line up with its headers."""


class InstantiationError(TableMappingError):
    """Raised when a target type cannot be constructed without arguments."""


class RegistryFrozenError(TableMappingError):
    """Raised when a registry is modified after it has been frozen."""


def _type_name(tp: Any) -> str:
    return getattr(tp, "__name__", None) or repr(tp)
