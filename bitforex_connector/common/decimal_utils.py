from __future__ import annotations

"""
Numeric parsing and wire-safe formatting for venue payloads.

Design:
- Permissive parsing: absent, empty or non-numeric values become None, never raise
- Booleans are not numbers here (JSON true/false must not parse as 1/0)
- Decimal formatting for query strings avoids scientific notation
"""

import math
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional, Union

NumberLike = Union[str, int, float, Decimal]


def q_dec(x: NumberLike) -> Decimal:
    """Convert input to Decimal via str() to avoid binary float issues."""
    if isinstance(x, Decimal):
        return x
    return Decimal(str(x))


def str_decimal(x: Decimal) -> str:
    """Return a string without scientific notation for Decimal values."""
    s = format(x, "f")
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return s if s else "0"


def to_float(value: Any) -> Optional[float]:
    """Parse a single value into a finite float, or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        out = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            out = float(text)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(out) or math.isinf(out):
        return None
    return out


def to_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, (str, Decimal)):
        try:
            d = Decimal(str(value).strip())
        except InvalidOperation:
            return None
        if not d.is_finite():
            return None
        return int(d)
    return None


def safe_float(payload: Mapping[str, Any], key: str) -> Optional[float]:
    """Read `key` from a payload as float; missing or malformed yields None."""
    return to_float(payload.get(key)) if isinstance(payload, Mapping) else None


def safe_integer(payload: Mapping[str, Any], key: str) -> Optional[int]:
    """Read `key` from a payload as int; missing or malformed yields None."""
    return to_int(payload.get(key)) if isinstance(payload, Mapping) else None


def iso8601(timestamp_ms: Optional[int]) -> Optional[str]:
    """Epoch milliseconds -> 'YYYY-MM-DDTHH:MM:SS.mmmZ' (UTC), None passes through."""
    if timestamp_ms is None:
        return None
    seconds, millis = divmod(int(timestamp_ms), 1000)
    try:
        dt = datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{millis:03d}Z"


def wire_value(value: Any) -> str:
    """Render a request parameter value the way the venue expects it on the wire."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (float, Decimal)):
        return str_decimal(q_dec(value))
    return str(value)


__all__ = [
    "NumberLike",
    "q_dec",
    "str_decimal",
    "to_float",
    "to_int",
    "safe_float",
    "safe_integer",
    "iso8601",
    "wire_value",
]
