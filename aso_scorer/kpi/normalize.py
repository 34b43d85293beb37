"""Raw KPI value → 0–100 according to the definition's direction."""

from __future__ import annotations

from aso_scorer.kpi.registry import KpiDefinition
from aso_scorer.taxonomy.metadata_taxonomy import KpiDirection
from aso_scorer.utils.numeric import clamp


def normalize(value: float, kpi: KpiDefinition) -> float:
    """Map ``value`` onto [0, 100].

    higher_is_better  linear from min (0) to max (100).
    lower_is_better   linear from min (100) to max (0).
    target_range      100 within ``target ± tolerance``; outside it, the
                      distance from the target decays linearly to 0 at
                      whichever range bound lies farther from the target.

    A degenerate range (``max == min``) scores 100.
    """
    lo, hi = kpi.min_value, kpi.max_value
    if hi == lo:
        return 100.0
    v = clamp(value, lo, hi)

    if kpi.direction == KpiDirection.LOWER_IS_BETTER:
        return (hi - v) / (hi - lo) * 100.0

    if kpi.direction == KpiDirection.TARGET_RANGE and kpi.target_value is not None:
        target = kpi.target_value
        tolerance = kpi.target_tolerance or 0.0
        distance = abs(v - target)
        if distance <= tolerance:
            return 100.0
        max_distance = max(hi - target, target - lo)
        return max(0.0, (max_distance - distance) / max_distance * 100.0)

    return (v - lo) / (hi - lo) * 100.0
