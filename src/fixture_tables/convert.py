"""String-to-typed-value conversion with a pluggable converter chain.

A :class:`ConverterRegistry` holds an ordered list of converters.  To convert
a cell, the registry asks each converter in registration order whether it
can handle the ``(cell, target type)`` pair; the first one that says yes
produces the value and no later converter is consulted.  When nothing
matches, the value goes through a generic coercion backed by pydantic's
lax-mode validation, which parses numbers and dates the same way on every
host (decimal point, ISO-8601), regardless of locale.

Usage::

    from fixture_tables.convert import ConverterRegistry, FunctionConverter

    registry = ConverterRegistry.with_defaults()
    registry.register(
        FunctionConverter(
            lambda cell, src, tgt: tgt is Money,
            lambda cell, src, tgt: Money.parse(cell.value),
        ),
        index=0,
    )
    registry.freeze()

    registry.convert("Price", "12.50 EUR", Money)

Optional targets (``X | None``) are unwrapped before dispatch: a blank cell
becomes ``None`` and any other cell is converted to ``X``.
"""

from __future__ import annotations

import logging
import re
import types
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum
from functools import lru_cache
from typing import (
    Any,
    Callable,
    Iterable,
    Iterator,
    NamedTuple,
    Protocol,
    Union,
    get_args,
    get_origin,
    runtime_checkable,
)

from pydantic import PydanticSchemaGenerationError, TypeAdapter, ValidationError

from fixture_tables.errors import ConversionError, RegistryFrozenError

log = logging.getLogger(__name__)


class Cell(NamedTuple):
    """A property name paired with its raw cell text."""

    name: str
    value: str


@runtime_checkable
class ValueConverter(Protocol):
    """A converter entry: a predicate plus a conversion function.

    ``source_type`` and ``target_type`` are both the declared type of the
    property being populated; the pair is kept so converters can be shared
    with frameworks that distinguish the two.
    """

    def can_convert(self, cell: Cell, source_type: Any, target_type: Any) -> bool: ...

    def convert(self, cell: Cell, source_type: Any, target_type: Any) -> Any: ...


@dataclass(frozen=True)
class FunctionConverter:
    """Converter built from two plain callables."""

    predicate: Callable[[Cell, Any, Any], bool]
    function: Callable[[Cell, Any, Any], Any]
    name: str | None = None

    def can_convert(self, cell: Cell, source_type: Any, target_type: Any) -> bool:
        return bool(self.predicate(cell, source_type, target_type))

    def convert(self, cell: Cell, source_type: Any, target_type: Any) -> Any:
        return self.function(cell, source_type, target_type)


# ─── Built-in converters ─────────────────────────────────────────────────────

_TRUE_WORDS = frozenset({"true", "yes", "1", "y", "t"})
_FALSE_WORDS = frozenset({"false", "no", "0", "n", "f"})

# Invariant-culture number: optional sign, digits with optional comma
# thousands grouping, optional decimal point and fraction.
_INVARIANT_NUMBER_RE = re.compile(
    r"^\s*[+-]?(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?\s*$"
)


class StringConverter:
    """``str`` targets take the cell text unchanged."""

    def can_convert(self, cell: Cell, source_type: Any, target_type: Any) -> bool:
        return target_type is str

    def convert(self, cell: Cell, source_type: Any, target_type: Any) -> str:
        return cell.value


class BoolConverter:
    """Booleans from ``true/false``, ``yes/no``, ``y/n``, ``t/f`` and ``1/0``."""

    def can_convert(self, cell: Cell, source_type: Any, target_type: Any) -> bool:
        if target_type is not bool:
            return False
        word = cell.value.strip().lower()
        return word in _TRUE_WORDS or word in _FALSE_WORDS

    def convert(self, cell: Cell, source_type: Any, target_type: Any) -> bool:
        return cell.value.strip().lower() in _TRUE_WORDS


class NumberConverter:
    """``int``, ``float`` and ``Decimal`` from invariant-culture text.

    Accepts comma thousands separators (``1,234.5``) and surrounding
    whitespace.  Anything else is left to later converters.
    """

    _TARGETS = (int, float, Decimal)

    def can_convert(self, cell: Cell, source_type: Any, target_type: Any) -> bool:
        return target_type in self._TARGETS and bool(_INVARIANT_NUMBER_RE.match(cell.value))

    def convert(self, cell: Cell, source_type: Any, target_type: Any) -> int | float | Decimal:
        cleaned = cell.value.strip().replace(",", "")
        if target_type is float:
            return float(cleaned)
        number = Decimal(cleaned)
        if target_type is Decimal:
            return number
        if number != number.to_integral_value():
            raise ValueError(f"'{cell.value}' is not a whole number")
        return int(number)


class EnumConverter:
    """Enum members by name (case-insensitive) or by value."""

    def can_convert(self, cell: Cell, source_type: Any, target_type: Any) -> bool:
        return isinstance(target_type, type) and issubclass(target_type, Enum)

    def convert(self, cell: Cell, source_type: Any, target_type: Any) -> Enum:
        text = cell.value.strip()
        folded = text.casefold()
        for member in target_type:
            if member.name.casefold() == folded:
                return member
        for member in target_type:
            if str(member.value) == text:
                return member
        choices = ", ".join(m.name for m in target_type)
        raise ValueError(f"'{cell.value}' is not a member of {target_type.__name__} ({choices})")


def default_converters() -> list[ValueConverter]:
    """Fresh instances of the built-in converters, in dispatch order."""
    return [StringConverter(), BoolConverter(), NumberConverter(), EnumConverter()]


# ─── Registry ────────────────────────────────────────────────────────────────


class ConverterRegistry:
    """Ordered, first-match-wins collection of converters.

    Populate the registry during start-up, then call :meth:`freeze`.  A
    frozen registry rejects further registration, which makes it safe to
    share between threads: lookups iterate an immutable tuple.
    """

    def __init__(self, converters: Iterable[ValueConverter] = ()):
        self._converters: tuple[ValueConverter, ...] = ()
        self._frozen = False
        for converter in converters:
            self.register(converter)

    @classmethod
    def with_defaults(cls) -> ConverterRegistry:
        """Registry pre-populated with :func:`default_converters`."""
        return cls(default_converters())

    def register(self, converter: ValueConverter, *, index: int | None = None) -> ValueConverter:
        """Add *converter* at the end, or at position *index*.

        Returns the converter so the call can be used inline.
        """
        if self._frozen:
            raise RegistryFrozenError("Converter registry is frozen; register converters during start-up")
        if not isinstance(converter, ValueConverter):
            raise TypeError(
                f"{type(converter).__name__} does not implement can_convert()/convert()"
            )
        entries = list(self._converters)
        if index is None:
            entries.append(converter)
        else:
            entries.insert(index, converter)
        self._converters = tuple(entries)
        log.debug("Registered converter %s at position %d", _converter_name(converter),
                  len(entries) - 1 if index is None else index)
        return converter

    def register_function(
        self,
        predicate: Callable[[Cell, Any, Any], bool],
        function: Callable[[Cell, Any, Any], Any],
        *,
        index: int | None = None,
    ) -> FunctionConverter:
        """Register a :class:`FunctionConverter` built from two callables."""
        converter = FunctionConverter(predicate, function, getattr(function, "__name__", None))
        self.register(converter, index=index)
        return converter

    def freeze(self) -> ConverterRegistry:
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __iter__(self) -> Iterator[ValueConverter]:
        return iter(self._converters)

    def __len__(self) -> int:
        return len(self._converters)

    def find(self, cell: Cell, target_type: Any) -> ValueConverter | None:
        """First converter that accepts *cell* for *target_type*, if any."""
        for converter in self._converters:
            if converter.can_convert(cell, target_type, target_type):
                return converter
        return None

    def convert(self, property_name: str, raw_value: str, target_type: Any) -> Any:
        """Convert *raw_value* to *target_type* for *property_name*.

        Raises:
            ConversionError: If no converter matches and the generic
                coercion rejects the value.
        """
        target_type, optional = _unwrap_optional(target_type)
        if optional and not raw_value.strip():
            return None

        cell = Cell(property_name, raw_value)
        converter = self.find(cell, target_type)
        if converter is not None:
            return converter.convert(cell, target_type, target_type)
        return coerce(property_name, raw_value, target_type)


# ─── Generic fallback ────────────────────────────────────────────────────────


@lru_cache(maxsize=256)
def _adapter_for(target_type: Any) -> TypeAdapter:
    return TypeAdapter(target_type)


def coerce(property_name: str, raw_value: str, target_type: Any) -> Any:
    """Generic invariant-culture coercion of *raw_value* to *target_type*.

    Raises:
        ConversionError: If the value cannot be coerced or pydantic cannot
            build a validator for the type.
    """
    try:
        return _adapter_for(target_type).validate_python(raw_value)
    except (ValidationError, PydanticSchemaGenerationError) as e:
        raise ConversionError(property_name, raw_value, target_type) from e


def _unwrap_optional(target_type: Any) -> tuple[Any, bool]:
    """Strip ``None`` from a union; report whether it was there."""
    if get_origin(target_type) not in (Union, types.UnionType):
        return target_type, False
    args = get_args(target_type)
    if type(None) not in args:
        return target_type, False
    rest = tuple(a for a in args if a is not type(None))
    if len(rest) == 1:
        return rest[0], True
    return Union[rest], True


def _converter_name(converter: ValueConverter) -> str:
    return getattr(converter, "name", None) or type(converter).__name__


def convert_value(
    property_name: str,
    raw_value: str,
    target_type: Any,
    registry: ConverterRegistry | None = None,
) -> Any:
    """Convert through *registry*, or through the default mapper's registry."""
    if registry is None:
        from fixture_tables.mapping import get_default_mapper

        registry = get_default_mapper().converters
    return registry.convert(property_name, raw_value, target_type)
