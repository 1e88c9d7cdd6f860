"""Normalization helpers.

Lenient parsing of device values and untrusted query input.
"""

from __future__ import annotations

import math
from typing import Any


def finite_or_none(value: Any) -> Any:
    """Map NaN and infinities to ``None``; leave everything else untouched.

    Python's JSON parser accepts ``NaN``/``Infinity`` literals, but they are
    not valid JSON on the way out, so they never reach the retained state.
    """
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def safe_float(value: Any) -> float | None:
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        result = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def positive_int_or_default(value: Any, default: int) -> int:
    """Parse an untrusted limit-like value.

    ``None``, booleans, non-numeric text, zero and negative numbers all
    yield *default*.  Numeric text is truncated toward zero (``"7.9"`` -> 7).
    """
    if isinstance(value, str):
        value = value.strip()
    parsed = safe_int(value)
    if parsed is None or parsed <= 0:
        return default
    return parsed


def sanitize_json(data: Any) -> Any:
    """Recursively replace non-finite floats with ``None``.

    - Dicts and lists are copied; their items are sanitized.
    - Scalars are returned as-is, except NaN/inf floats.

    The result is always serializable with ``allow_nan=False``.
    """

    if isinstance(data, dict):
        return {str(key): sanitize_json(value) for key, value in data.items()}

    if isinstance(data, (list, tuple)):
        return [sanitize_json(item) for item in data]

    return finite_or_none(data)
