"""Header-to-attribute name normalization."""

from __future__ import annotations

import re

HEADER_STYLES = ("exact", "snake_case")


def _to_words(s: str) -> list[str]:
    """Split a string into words.

    Handles camelCase, PascalCase, snake_case, kebab-case, and space-separated.
    """
    s = re.sub(r"[-_]", " ", s)
    # Acronym boundary: "HTTPStatus" -> "HTTP Status"
    s = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1 \2", s)
    s = re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", s)
    return [w for w in s.split() if w]


def to_snake_case(header: str) -> str:
    """``"Zip Code"`` / ``"ZipCode"`` / ``"zip-code"`` -> ``"zip_code"``."""
    return "_".join(w.lower() for w in _to_words(header))


def candidate_names(header: str, style: str) -> tuple[str, ...]:
    """Attribute names to try for *header*, most specific first.

    The header itself always comes first; other styles only add fallbacks.
    """
    if style == "exact":
        return (header,)
    if style == "snake_case":
        snake = to_snake_case(header)
        return (header,) if snake == header else (header, snake)
    raise ValueError(f"Unknown header style: {style!r} (expected one of {HEADER_STYLES})")
