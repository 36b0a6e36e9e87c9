"""Utility helpers for coercing loosely typed upstream JSON values."""

from __future__ import annotations

import math
import re
from typing import Any


WHITESPACE_RE = re.compile(r"\s+")


def coerce_to_string(value: Any) -> str:
    """Return a string for any JSON scalar without ever raising.

    Upstream encodes every number as a float, so integral values are rendered
    without a fractional part (``3.0`` becomes ``"3"``).
    """

    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return str(value)
    return str(value)


def coerce_to_float(value: Any) -> float:
    """Return a finite float for numeric or numeric-string values, else ``0.0``."""

    if isinstance(value, bool) or value is None:
        return 0.0
    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str):
        try:
            result = float(value.strip())
        except ValueError:
            return 0.0
    else:
        return 0.0
    if math.isnan(result) or math.isinf(result):
        return 0.0
    return result


def coerce_to_int(value: Any) -> int:
    """Return an integer for numeric or numeric-string values, else ``0``."""

    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return int(coerce_to_float(value))


def coerce_to_str_list(value: Any) -> tuple[str, ...]:
    """Coerce a JSON array into a tuple of non-blank strings."""

    if not isinstance(value, list):
        return ()
    cleaned: list[str] = []
    for entry in value:
        text = coerce_to_string(entry).strip()
        if text:
            cleaned.append(text)
    return tuple(cleaned)


def normalize_title(value: str) -> str:
    """Return the comparison form of a title (trimmed and case-folded)."""

    return WHITESPACE_RE.sub(" ", (value or "").strip()).casefold()
