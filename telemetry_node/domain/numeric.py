"""Numeric formatting for published fields.

Instrument readings (UPS gauge, textual floats) are rounded half away from
zero. Derived values (system load, power sum, smoothed temperature) are
truncated toward zero after integer scaling.
"""
from __future__ import annotations

import math
from typing import Optional


def _scaled(value: float, scale: int) -> float:
    # snap binary noise so 0.29 * 100 is 29, not 28.999...
    return round(value * scale, 6)


def round_half_away(value: float, digits: int = 2) -> float:
    scale = 10 ** digits
    return math.copysign(math.floor(_scaled(abs(value), scale) + 0.5), value) / scale


def truncate(value: float, digits: int) -> float:
    scale = 10 ** digits
    return int(_scaled(value, scale)) / scale


def parse_float(text: Optional[str]) -> Optional[float]:
    """Parse a textual number; empty, '--' or malformed text is absent."""
    if text is None:
        return None
    s = str(text).strip().replace(",", ".")
    if not s:
        return None
    try:
        v = float(s)
    except ValueError:
        return None
    if math.isnan(v) or math.isinf(v):
        return None
    return v


def parse_int(text: Optional[str]) -> Optional[int]:
    if text is None:
        return None
    s = str(text).strip()
    if not s:
        return None
    try:
        return int(s)
    except ValueError:
        return None
