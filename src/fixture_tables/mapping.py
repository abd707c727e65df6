"""Table-to-object mapping engine.

Turns fixture tables into instances of a caller-supplied type::

    from fixture_tables import Table, create_instance, create_set

    people = create_set(Person, Table(["Name", "Age"], [["John", "30"], ["Jane", "25"]]))

    john = create_instance(Person, Table(["Property", "Value"], [["Name", "John"], ["Age", "44"]]))

Each cell is routed through :meth:`TableMapper.set_property`, which resolves
the property on the type's descriptor, converts the text with the converter
registry and assigns it.  Read-only properties are written into their
backing storage, so value objects stay immutable to production code while
remaining constructible from tables.

Headers that match no property are ignored; tables often carry columns that
only matter to other steps.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, TypeVar

from fixture_tables.config import MappingConfig
from fixture_tables.convert import ConverterRegistry
from fixture_tables.descriptors import (
    DescriptorRegistry,
    PropertyAccessor,
    has_backing_storage,
    instance_accessor,
    write_backing_storage,
)
from fixture_tables.errors import (
    BackingStorageError,
    EmptyTableError,
    InstantiationError,
    MappingError,
    TableShapeError,
)
from fixture_tables.naming import candidate_names
from fixture_tables.orientation import Orientation, detect_orientation
from fixture_tables.table import Table

log = logging.getLogger(__name__)

T = TypeVar("T")

# Opt-in hook for types that populate their own read-only state.
FIXTURE_SET_HOOK = "__fixture_set__"


class TableMapper:
    """Converter registry, descriptor registry and config bundled together.

    Args:
        converters: Registry consulted for every cell.  Defaults to the
            built-in converters (or an empty registry when
            ``config.use_default_converters`` is False).
        config: Mapping behavior; see :class:`MappingConfig`.
        descriptors: Per-type descriptors.  Defaults to a registry that
            derives descriptors using ``config.backing_field_pattern``.
    """

    def __init__(
        self,
        converters: ConverterRegistry | None = None,
        *,
        config: MappingConfig | None = None,
        descriptors: DescriptorRegistry | None = None,
    ):
        self.config = config or MappingConfig()
        if converters is None:
            converters = (
                ConverterRegistry.with_defaults()
                if self.config.use_default_converters
                else ConverterRegistry()
            )
        self.converters = converters
        self.descriptors = descriptors or DescriptorRegistry(self.config.backing_field_pattern)

    # ─── Builders ────────────────────────────────────────────────────────

    def create_set(self, cls: type[T], table: Table) -> list[T]:
        """One instance of *cls* per row, in row order.

        A failing row aborts the call; no partial list is returned.
        """
        log.debug("Creating %d %s instance(s) from %r", len(table.rows), cls.__qualname__, table)
        items: list[T] = []
        for row in table.rows:
            instance = self._new_instance(cls)
            for header in table.headers:
                self.set_property(instance, header, row[header])
            items.append(instance)
        return items

    def create_instance(self, cls: type[T], table: Table) -> T:
        """A single instance of *cls* from a vertical or horizontal table.

        Raises:
            EmptyTableError: Horizontal table without a data row.
            TableShapeError: Vertical table with rows but fewer than two columns.
            MappingError: A property could not be converted or assigned.
        """
        orientation = detect_orientation(table, self.config.vertical_header)
        log.debug("Creating %s from %s table %r", cls.__qualname__, orientation.value, table)

        if orientation is Orientation.VERTICAL:
            if table.rows and len(table.headers) < 2:
                raise TableShapeError(
                    f"Vertical table needs a name and a value column, got {list(table.headers)}"
                )
            instance = self._new_instance(cls)
            for row in table.rows:
                self.set_property(instance, row[0], row[1])
            return instance

        try:
            row = table.rows[0]
        except IndexError as e:
            raise EmptyTableError(
                f"Horizontal table {list(table.headers)} has no data row"
            ) from e
        instance = self._new_instance(cls)
        for header in table.headers:
            self.set_property(instance, header, row[header])
        return instance

    # ─── Property assignment ─────────────────────────────────────────────

    def set_property(self, instance: Any, property_name: str, raw_value: str) -> None:
        """Convert *raw_value* and assign it to *property_name* on *instance*.

        Unknown property names are skipped.  Any conversion or assignment
        failure is raised as :class:`MappingError` chained to its cause.
        """
        accessor = self._resolve(instance, property_name)
        if accessor is None:
            log.debug("No property '%s' on %s; skipping", property_name, type(instance).__qualname__)
            return

        try:
            value = self.convert_value(property_name, raw_value, accessor.declared_type)
            if accessor.writable:
                accessor.assign(instance, value)
            else:
                self._assign_read_only(instance, accessor, value)
        except Exception as e:
            raise MappingError(property_name, raw_value) from e

    def _resolve(self, instance: Any, property_name: str) -> PropertyAccessor | None:
        cls = type(instance)
        descriptor = self.descriptors.describe(cls)
        names = candidate_names(property_name, self.config.header_style)
        for name in names:
            accessor = descriptor.get(name)
            if accessor is not None:
                return accessor
        # Attributes set in __init__ without a class annotation; explicit
        # descriptors get no fallback.
        if self.descriptors.is_registered(cls):
            return None
        for name in names:
            accessor = instance_accessor(instance, name)
            if accessor is not None:
                return accessor
        return None

    def _assign_read_only(self, instance: Any, accessor: PropertyAccessor, value: Any) -> None:
        hook = getattr(instance, FIXTURE_SET_HOOK, None)
        if hook is not None:
            hook(accessor.name, value)
            return

        field_name = accessor.backing_field
        if field_name and has_backing_storage(instance, field_name):
            write_backing_storage(instance, field_name, value)
            return

        if self.config.strict_backing_storage:
            raise BackingStorageError(accessor.name, field_name)
        log.warning(
            "Dropping value for read-only property '%s' on %s: no backing storage '%s'",
            accessor.name,
            type(instance).__qualname__,
            field_name,
        )

    def convert_value(self, property_name: str, raw_value: str, target_type: Any) -> Any:
        """Convert a cell through this mapper's converter registry."""
        return self.converters.convert(property_name, raw_value, target_type)

    def _new_instance(self, cls: type[T]) -> T:
        factory = self.descriptors.describe(cls).factory
        try:
            return factory()
        except TypeError as e:
            raise InstantiationError(
                f"{cls.__qualname__} cannot be constructed without arguments"
            ) from e


# ─── Default mapper ──────────────────────────────────────────────────────────

_default_mapper: TableMapper | None = None
_default_lock = threading.Lock()


def get_default_mapper() -> TableMapper:
    """Process-wide mapper with the built-in converters, created on first use."""
    global _default_mapper
    if _default_mapper is None:
        with _default_lock:
            if _default_mapper is None:
                _default_mapper = TableMapper()
    return _default_mapper


def set_default_mapper(mapper: TableMapper | None) -> None:
    """Replace the process-wide mapper; ``None`` resets it to a fresh default.

    Call during start-up, before any mapping runs.
    """
    global _default_mapper
    with _default_lock:
        _default_mapper = mapper


def create_set(cls: type[T], table: Table, *, mapper: TableMapper | None = None) -> list[T]:
    """One instance of *cls* per table row.  See :meth:`TableMapper.create_set`."""
    return (mapper or get_default_mapper()).create_set(cls, table)


def create_instance(cls: type[T], table: Table, *, mapper: TableMapper | None = None) -> T:
    """Single instance of *cls*.  See :meth:`TableMapper.create_instance`."""
    return (mapper or get_default_mapper()).create_instance(cls, table)


def set_property(
    instance: Any,
    property_name: str,
    raw_value: str,
    *,
    mapper: TableMapper | None = None,
) -> None:
    """Set one property from raw text.  See :meth:`TableMapper.set_property`."""
    (mapper or get_default_mapper()).set_property(instance, property_name, raw_value)
