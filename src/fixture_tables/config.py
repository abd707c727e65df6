"""Mapping configuration, loadable from a plain dict or a JSON file."""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path

from fixture_tables.naming import HEADER_STYLES


@dataclass(frozen=True)
class MappingConfig:
    """Tunable behavior of :class:`~fixture_tables.mapping.TableMapper`.

    Attributes:
        vertical_header: Header text (case-insensitive) that marks a table
            as vertical ``| Property | Value |`` form.
        backing_field_pattern: Format string naming the storage attribute
            of a getter-only property; ``{name}`` is the property name.
        strict_backing_storage: Raise when a read-only property has no
            backing storage.  When False the value is dropped with a warning.
        use_default_converters: Pre-populate a mapper's converter registry
            with the built-in converters when none is injected.
        header_style: How headers map to attribute names.  ``"exact"``
            requires an exact match; ``"snake_case"`` also tries the
            snake_case form of the header (``"Zip Code"`` -> ``zip_code``).
    """

    vertical_header: str = "property"
    backing_field_pattern: str = "_{name}"
    strict_backing_storage: bool = True
    use_default_converters: bool = True
    header_style: str = "exact"

    def __post_init__(self) -> None:
        for name in ("vertical_header", "backing_field_pattern", "header_style"):
            if not isinstance(getattr(self, name), str):
                raise ValueError(f"{name} must be a string: {getattr(self, name)!r}")
        for name in ("strict_backing_storage", "use_default_converters"):
            if not isinstance(getattr(self, name), bool):
                raise ValueError(f"{name} must be true or false: {getattr(self, name)!r}")
        if "{name}" not in self.backing_field_pattern:
            raise ValueError(
                f"backing_field_pattern must contain '{{name}}': {self.backing_field_pattern!r}"
            )
        if not self.vertical_header.strip():
            raise ValueError("vertical_header must not be blank")
        if self.header_style not in HEADER_STYLES:
            raise ValueError(
                f"header_style must be one of {HEADER_STYLES}: {self.header_style!r}"
            )

    @classmethod
    def from_dict(cls, data: dict) -> MappingConfig:
        unknown = sorted(set(data) - {f.name for f in fields(cls)})
        if unknown:
            raise ValueError(f"Unknown mapping config key(s): {', '.join(unknown)}")
        return cls(**data)


def load_config(path: str | Path) -> MappingConfig:
    """Load a JSON config file and return a :class:`MappingConfig`.

    Expected format::

        {
            "vertical_header": "property",
            "backing_field_pattern": "_{name}",
            "strict_backing_storage": true
        }

    Keys may be omitted; missing keys keep their defaults.
    """
    with open(path) as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Mapping config must be a JSON object: {path}")
    return MappingConfig.from_dict(data)
