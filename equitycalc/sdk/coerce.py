"""Lenient numeric coercion for values coming from forms and stored records.

Form fields arrive as strings, empty strings or None while a user is still
typing. These helpers turn anything unusable into a default instead of
raising so calculators stay usable on partial input.
"""

import math
from typing import Any, Optional


def to_shares(value: Any, default: int = 0) -> int:
    """Coerce a share count.

    Numbers pass through (floats are truncated), strings are parsed as
    integers ("200" -> 200, "200.9" -> 200). Anything else returns default.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return default
        return int(value)
    if isinstance(value, str):
        text = value.strip().replace(",", "")
        try:
            return int(text)
        except ValueError:
            pass
        try:
            parsed = float(text)
        except ValueError:
            return default
        if math.isnan(parsed) or math.isinf(parsed):
            return default
        return int(parsed)
    return default


def to_price(value: Any, default: float = 0.0) -> float:
    """Coerce a per-share price or other currency amount.

    Numbers pass through, strings are parsed as floats ("1.5" -> 1.5,
    "$1,250" -> 1250.0). NaN, infinity and unparsable input return default.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        parsed = float(value)
    elif isinstance(value, str):
        text = value.strip().replace(",", "").lstrip("$")
        try:
            parsed = float(text)
        except ValueError:
            return default
    else:
        return default
    if math.isnan(parsed) or math.isinf(parsed):
        return default
    return parsed


def to_optional_price(value: Any) -> Optional[float]:
    """Like to_price, but returns None when no usable number is present."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    sentinel = float("nan")
    parsed = to_price(value, default=sentinel)
    if math.isnan(parsed):
        return None
    return parsed
