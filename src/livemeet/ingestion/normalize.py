"""Normalization helpers.

Centralizes defensive parsing of loosely-typed document values.
"""

from __future__ import annotations

import math
from typing import Any

#: Lift names seen in documents, mapped to the canonical discipline name.
_DISCIPLINE_ALIASES: dict[str, str] = {
    "squat": "squat",
    "bench": "bench",
    "deadlift": "deadlift",
    "dead": "deadlift",
}


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def safe_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text else None


def normalize_discipline(value: Any) -> str | None:
    """Return the canonical discipline name for a lift name, or ``None``."""
    if not isinstance(value, str):
        return None
    return _DISCIPLINE_ALIASES.get(value.strip().lower())
