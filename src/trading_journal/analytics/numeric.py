"""Numeric coercion guards.

Persisted and user-entered values reach the engine as ``None``,
strings, ``Decimal`` or floats that may be ``NaN``.  Every arithmetic
boundary goes through :func:`to_number_safe` so no computation ever
sees a non-finite value.
"""

from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from typing import Any


def to_number_safe(value: Any, fallback: float = 0.0) -> float:
    """Return *value* as a finite float, or *fallback* if it is not one."""
    if value is None or isinstance(value, bool):
        return fallback
    try:
        if isinstance(value, Decimal):
            number = float(value)
        elif isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                return fallback
            number = float(Decimal(stripped))
        else:
            number = float(value)
    except (TypeError, ValueError, OverflowError, InvalidOperation):
        return fallback
    return number if math.isfinite(number) else fallback


def to_optional_number(value: Any) -> float | None:
    """Like :func:`to_number_safe` but ``None`` when there is no finite value."""
    number = to_number_safe(value, fallback=math.nan)
    return None if math.isnan(number) else number


def is_finite_number(value: Any) -> bool:
    return to_optional_number(value) is not None
