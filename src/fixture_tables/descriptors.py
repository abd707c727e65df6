"""Per-type property descriptors.

A :class:`TypeDescriptor` states, once per target type, how to build an
instance with no arguments and which properties can be populated from a
table: their names, declared types, and whether they are writable through
normal attribute assignment or only through backing storage.

Descriptors come from two places:

- explicit registration with :meth:`DescriptorRegistry.register`, usually
  built with :meth:`TypeDescriptor.builder`;
- derivation from the type itself, done once per type and cached.
  Derivation understands annotated attributes, ``property`` objects,
  dataclasses (frozen or not) and pydantic models (frozen or not).

Usage::

    descriptor = (
        TypeDescriptor.builder(Account)
        .factory(lambda: Account.__new__(Account))
        .property("owner", str)
        .read_only("balance", Decimal, backing_field="_balance")
        .build()
    )
    registry = DescriptorRegistry()
    registry.register(Account, descriptor)
"""

from __future__ import annotations

import dataclasses
import inspect
import logging
import sys
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, ClassVar, Iterator, Mapping, get_origin, get_type_hints

from pydantic import BaseModel

from fixture_tables.errors import RegistryFrozenError

log = logging.getLogger(__name__)

DEFAULT_BACKING_FIELD_PATTERN = "_{name}"


@dataclass(frozen=True)
class PropertyAccessor:
    """How to populate one property.

    Attributes:
        name: Property name as it appears in table headers.
        declared_type: Type the raw cell text is converted to.
        writable: True if plain attribute assignment works.
        setter: Custom ``setter(instance, value)`` used instead of
            ``setattr`` for writable properties.
        backing_field: Storage attribute for read-only properties.  For
            frozen dataclass and pydantic fields this is the field itself.
    """

    name: str
    declared_type: Any = Any
    writable: bool = True
    setter: Callable[[Any, Any], None] | None = None
    backing_field: str | None = None

    def assign(self, instance: Any, value: Any) -> None:
        """Assign through the public setter; only valid when writable."""
        if self.setter is not None:
            self.setter(instance, value)
        else:
            setattr(instance, self.name, value)


@dataclass(frozen=True)
class TypeDescriptor:
    """Factory plus property accessors for one target type."""

    target: type
    factory: Callable[[], Any]
    properties: Mapping[str, PropertyAccessor] = field(default_factory=dict)

    def get(self, name: str) -> PropertyAccessor | None:
        """Accessor for *name*, matched exactly."""
        return self.properties.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.properties

    def __iter__(self) -> Iterator[PropertyAccessor]:
        return iter(self.properties.values())

    @staticmethod
    def builder(
        target: type, *, backing_field_pattern: str = DEFAULT_BACKING_FIELD_PATTERN
    ) -> TypeDescriptorBuilder:
        return TypeDescriptorBuilder(target, backing_field_pattern)


class TypeDescriptorBuilder:
    """Fluent construction of a :class:`TypeDescriptor`."""

    def __init__(self, target: type, backing_field_pattern: str = DEFAULT_BACKING_FIELD_PATTERN):
        self._target = target
        self._pattern = backing_field_pattern
        self._factory: Callable[[], Any] = target
        self._properties: dict[str, PropertyAccessor] = {}

    def factory(self, factory: Callable[[], Any]) -> TypeDescriptorBuilder:
        self._factory = factory
        return self

    def property(
        self,
        name: str,
        declared_type: Any = Any,
        *,
        setter: Callable[[Any, Any], None] | None = None,
    ) -> TypeDescriptorBuilder:
        self._properties[name] = PropertyAccessor(name, declared_type, True, setter, None)
        return self

    def read_only(
        self,
        name: str,
        declared_type: Any = Any,
        *,
        backing_field: str | None = None,
    ) -> TypeDescriptorBuilder:
        self._properties[name] = PropertyAccessor(
            name, declared_type, False, None, backing_field or self._pattern.format(name=name)
        )
        return self

    def build(self) -> TypeDescriptor:
        return TypeDescriptor(self._target, self._factory, dict(self._properties))


# ─── Derivation ──────────────────────────────────────────────────────────────


def _resolve_annotation(annotation: Any, globalns: dict, localns: dict, owner: Any, name: str) -> Any:
    if not isinstance(annotation, str):
        return annotation
    try:
        return eval(annotation, globalns, localns)
    except (NameError, AttributeError, SyntaxError, TypeError) as e:
        log.warning(
            "Could not resolve annotation %r of %s.%s (%s); values for it are not converted",
            annotation,
            getattr(owner, "__qualname__", owner),
            name,
            e,
        )
        return Any


def _type_hints(obj: Any) -> dict[str, Any]:
    """Resolved annotations of a class or function.

    When the annotations cannot all be resolved together (a forward
    reference to a type local to some function, say), each one is resolved
    on its own and only the failing ones become ``Any``.
    """
    try:
        return get_type_hints(obj)
    except (NameError, TypeError) as e:
        log.debug("Resolving annotations of %r one at a time (%s)", obj, e)

    hints: dict[str, Any] = {}
    if isinstance(obj, type):
        for klass in reversed(obj.__mro__):
            if klass is object:
                continue
            module = sys.modules.get(klass.__module__)
            globalns = dict(vars(module)) if module is not None else {}
            localns = dict(vars(klass))
            for name, annotation in inspect.get_annotations(klass).items():
                hints[name] = _resolve_annotation(annotation, globalns, localns, klass, name)
        return hints

    globalns = getattr(obj, "__globals__", {})
    for name, annotation in inspect.get_annotations(obj).items():
        hints[name] = _resolve_annotation(annotation, globalns, {}, obj, name)
    return hints


def _is_frozen_model(cls: type[BaseModel], name: str) -> bool:
    if cls.model_config.get("frozen"):
        return True
    return bool(cls.model_fields[name].frozen)


def _field_accessors(cls: type) -> dict[str, PropertyAccessor]:
    """Accessors for declared data fields (annotations, dataclass, pydantic)."""
    accessors: dict[str, PropertyAccessor] = {}

    if isinstance(cls, type) and issubclass(cls, BaseModel):
        for name, info in cls.model_fields.items():
            frozen = _is_frozen_model(cls, name)
            accessors[name] = PropertyAccessor(
                name, info.annotation, not frozen, None, name if frozen else None
            )
        return accessors

    hints = _type_hints(cls)

    if dataclasses.is_dataclass(cls):
        frozen = cls.__dataclass_params__.frozen
        for f in dataclasses.fields(cls):
            declared = hints.get(f.name, Any)
            accessors[f.name] = PropertyAccessor(
                f.name, declared, not frozen, None, f.name if frozen else None
            )
        return accessors

    for name, declared in hints.items():
        if name.startswith("__") or get_origin(declared) is ClassVar or declared is ClassVar:
            continue
        accessors[name] = PropertyAccessor(name, declared, True)
    return accessors


def _property_accessors(cls: type, pattern: str) -> dict[str, PropertyAccessor]:
    """Accessors for ``property`` objects anywhere in the MRO."""
    props: dict[str, property] = {}
    for klass in reversed(cls.__mro__):
        if klass is BaseModel or klass is object:
            continue
        for name, value in vars(klass).items():
            if isinstance(value, property) and not name.startswith("__"):
                props[name] = value

    accessors: dict[str, PropertyAccessor] = {}
    for name, prop in props.items():
        declared = _type_hints(prop.fget).get("return", Any) if prop.fget else Any
        if prop.fset is not None:
            accessors[name] = PropertyAccessor(name, declared, True)
        else:
            accessors[name] = PropertyAccessor(
                name, declared, False, None, pattern.format(name=name)
            )
    return accessors


def _default_factory(cls: type) -> Callable[[], Any]:
    # model_construct skips validation so models with required fields
    # can still be built empty.
    if isinstance(cls, type) and issubclass(cls, BaseModel):
        return cls.model_construct
    return cls


def derive_descriptor(cls: type, backing_field_pattern: str = DEFAULT_BACKING_FIELD_PATTERN) -> TypeDescriptor:
    """Build a descriptor for *cls* from its annotations and properties.

    Properties take precedence over a data field of the same name.
    """
    accessors = _field_accessors(cls)
    accessors.update(_property_accessors(cls, backing_field_pattern))
    log.debug(
        "Derived descriptor for %s: %d properties (%d read-only)",
        cls.__qualname__,
        len(accessors),
        sum(1 for a in accessors.values() if not a.writable),
    )
    return TypeDescriptor(cls, _default_factory(cls), accessors)


# ─── Backing storage ─────────────────────────────────────────────────────────


def _declared_slots(cls: type) -> set[str]:
    slots: set[str] = set()
    for klass in cls.__mro__:
        declared = vars(klass).get("__slots__", ())
        if isinstance(declared, str):
            declared = (declared,)
        slots.update(declared)
    return slots


def has_backing_storage(instance: Any, backing_field: str) -> bool:
    """True if *backing_field* exists on *instance* as state, a slot or a declared field."""
    cls = type(instance)
    instance_dict = getattr(instance, "__dict__", None)
    if instance_dict is not None and backing_field in instance_dict:
        return True
    if backing_field in _declared_slots(cls):
        return True
    if isinstance(instance, BaseModel) and backing_field in cls.model_fields:
        return True
    if dataclasses.is_dataclass(cls) and any(f.name == backing_field for f in dataclasses.fields(cls)):
        return True
    return instance_dict is not None and any(
        backing_field in inspect.get_annotations(klass) for klass in cls.__mro__
    )


def write_backing_storage(instance: Any, backing_field: str, value: Any) -> None:
    """Write *value* straight into storage, bypassing ``__setattr__`` and properties."""
    object.__setattr__(instance, backing_field, value)


def instance_accessor(instance: Any, name: str) -> PropertyAccessor | None:
    """Accessor for an attribute the instance holds but its type never declares.

    Covers the common ``self.name = ""`` in ``__init__``.  The declared type
    is the type of the current value, or ``Any`` while it is ``None``.
    """
    state = getattr(instance, "__dict__", None)
    if not state or name not in state:
        return None
    current = state[name]
    declared = Any if current is None else type(current)
    return PropertyAccessor(name, declared, True)


# ─── Registry ────────────────────────────────────────────────────────────────


class DescriptorRegistry:
    """Explicit descriptors plus a cache of derived ones.

    Explicit registrations happen during start-up; :meth:`freeze` then
    rejects further registration.  Derived descriptors are computed on first
    use under a lock, so each type is introspected once.
    """

    def __init__(self, backing_field_pattern: str = DEFAULT_BACKING_FIELD_PATTERN):
        self._pattern = backing_field_pattern
        self._explicit: dict[type, TypeDescriptor] = {}
        self._derived: dict[type, TypeDescriptor] = {}
        self._lock = threading.Lock()
        self._frozen = False

    @property
    def backing_field_pattern(self) -> str:
        return self._pattern

    def register(self, cls: type, descriptor: TypeDescriptor) -> TypeDescriptor:
        if self._frozen:
            raise RegistryFrozenError("Descriptor registry is frozen; register types during start-up")
        if descriptor.target is not cls:
            raise ValueError(
                f"Descriptor targets {descriptor.target.__qualname__}, not {cls.__qualname__}"
            )
        self._explicit[cls] = descriptor
        log.debug("Registered explicit descriptor for %s", cls.__qualname__)
        return descriptor

    def builder(self, cls: type) -> TypeDescriptorBuilder:
        """Builder whose read-only properties default to this registry's pattern."""
        return TypeDescriptor.builder(cls, backing_field_pattern=self._pattern)

    def is_registered(self, cls: type) -> bool:
        return cls in self._explicit

    def freeze(self) -> DescriptorRegistry:
        self._frozen = True
        return self

    def describe(self, cls: type) -> TypeDescriptor:
        """Descriptor for *cls*: explicit if registered, otherwise derived."""
        explicit = self._explicit.get(cls)
        if explicit is not None:
            return explicit
        derived = self._derived.get(cls)
        if derived is not None:
            return derived
        with self._lock:
            derived = self._derived.get(cls)
            if derived is None:
                derived = derive_descriptor(cls, self._pattern)
                self._derived[cls] = derived
        return derived
