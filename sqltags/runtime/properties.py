"""Property-path access on invocation arguments.

Invocation arguments come in three shapes:

* **scalars** – ``str``, numbers, dates, ``bytes``, ``UUID``, enums, ``None``;
* **mappings** – any :class:`collections.abc.Mapping`; a missing key reads as
  ``None``;
* **beans** – any other object; named properties are attributes (plain, slot,
  ``@property``, Pydantic fields, dataclass fields).  A missing attribute is an
  error.

Paths use dots and optional index suffixes: ``author.name``,
``orders[0].id``.
"""
from __future__ import annotations

import re
import uuid
from collections.abc import Mapping, Sequence
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any

from sqltags.errors import ExpressionError

SIMPLE_TYPES: tuple[type, ...] = (
    str,
    bytes,
    bool,
    int,
    float,
    Decimal,
    date,
    datetime,
    time,
    uuid.UUID,
    Enum,
)

_SEGMENT_RE = re.compile(r"^([^\[\]]+)((?:\[\d+\])*)$")
_INDEX_RE = re.compile(r"\[(\d+)\]")


def is_simple(value: Any) -> bool:
    """True for ``None`` and values of a scalar type."""
    return value is None or isinstance(value, SIMPLE_TYPES)


def split_path(path: str) -> list[str | int]:
    """Split ``"a.b[0].c"`` into ``["a", "b", 0, "c"]``.

    Raises:
        ExpressionError: If a segment is empty or malformed.
    """
    parts: list[str | int] = []
    for raw in path.strip().split("."):
        match = _SEGMENT_RE.match(raw.strip())
        if match is None:
            raise ExpressionError(f"Malformed property path '{path}'.", expression=path)
        parts.append(match.group(1))
        parts.extend(int(i) for i in _INDEX_RE.findall(match.group(2)))
    return parts


def get_segment(obj: Any, segment: str | int) -> Any:
    """Read one path segment from ``obj``.

    Raises:
        ExpressionError: If ``obj`` is a bean without such a property, or an
            index is out of range.
    """
    if obj is None:
        return None
    if isinstance(segment, int):
        if isinstance(obj, Mapping):
            return obj.get(segment)
        try:
            return obj[segment]
        except (IndexError, TypeError) as exc:
            raise ExpressionError(
                f"Cannot read index [{segment}] of {type(obj).__name__}: {exc}"
            ) from exc
    if isinstance(obj, Mapping):
        return obj.get(segment)
    if segment.startswith("_"):
        raise ExpressionError(
            f"Property '{segment}' of '{type(obj).__name__}' is not accessible.",
            details={"property": segment},
        )
    try:
        return getattr(obj, segment)
    except AttributeError as exc:
        raise ExpressionError(
            f"There is no property named '{segment}' in '{type(obj).__name__}'.",
            details={"property": segment, "type": type(obj).__name__},
        ) from exc


def has_segment(obj: Any, segment: str) -> bool:
    """True if ``obj`` can answer ``segment`` without raising."""
    if isinstance(obj, Mapping):
        return segment in obj
    if obj is None or is_simple(obj) or segment.startswith("_"):
        return False
    return hasattr(obj, segment)


def resolve_path(obj: Any, path: str) -> Any:
    """Resolve a dotted property path against ``obj``.

    A ``None`` met half-way through the path short-circuits to ``None``.
    """
    value = obj
    for segment in split_path(path):
        if value is None:
            return None
        value = get_segment(value, segment)
    return value


def is_indexed(value: Any) -> bool:
    """True for ordered, fixed-position containers other than text."""
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))
