"""Small numeric helpers shared by the rule evaluators and the KPI engine."""

from __future__ import annotations

import math


def clamp(value: float, lo: float, hi: float) -> float:
    """Clamp ``value`` to [lo, hi]."""
    return max(lo, min(hi, value))


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round half away from zero for non-negative scores.

    Python's ``round()`` uses banker's rounding (``round(2.5) == 2``); score
    bands are specified with conventional rounding, so 2.5 must become 3.
    """
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def round_int(value: float) -> int:
    """Round half up and return an ``int``."""
    return int(round_half_up(value))


def safe_ratio(numerator: float, denominator: float) -> float:
    """Return ``numerator / denominator`` or 0.0 when the denominator is 0."""
    if denominator == 0:
        return 0.0
    return numerator / denominator
