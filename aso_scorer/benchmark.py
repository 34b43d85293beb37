"""
Category benchmark collaborator (advisory, read-only).

``TableBenchmarkService`` answers from a static table of score breakpoints
per category and element::

    [categories.education]
    title    = { p25 = 55, p50 = 68, p75 = 80, p90 = 88 }
    subtitle = { p25 = 45, p50 = 60, p75 = 74, p90 = 85 }

The percentile for a score is interpolated linearly between breakpoints,
with 0 → p0 and 100 → p100 as the implicit ends.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Mapping, Optional, Protocol

from aso_scorer.models.app import BenchmarkComparison
from aso_scorer.taxonomy.metadata_taxonomy import MetadataElement

_PERCENTILE_KEYS: tuple[tuple[str, float], ...] = (
    ("p25", 25.0), ("p50", 50.0), ("p75", 75.0), ("p90", 90.0),
)


class BenchmarkService(Protocol):
    async def compare_to_category(
        self,
        category: str,
        element: MetadataElement,
        score: float,
    ) -> Optional[BenchmarkComparison]:
        ...


def _interpolate(score: float, points: list[tuple[float, float]]) -> float:
    """Piecewise-linear map from score to percentile over (score, pct) points."""
    for (s0, p0), (s1, p1) in zip(points, points[1:]):
        if score <= s1:
            if s1 == s0:
                return p1
            return p0 + (score - s0) / (s1 - s0) * (p1 - p0)
    return points[-1][1]


def _label(percentile: float) -> str:
    if percentile >= 75:
        return "above category"
    if percentile >= 25:
        return "in line with category"
    return "below category"


class TableBenchmarkService:
    """Benchmark lookups from a nested mapping ``category → element → breakpoints``."""

    def __init__(self, table: Mapping[str, Mapping[str, Mapping[str, float]]]) -> None:
        self._table = {cat.lower(): dict(elements) for cat, elements in table.items()}

    @classmethod
    def from_toml(cls, path: Path | str) -> "TableBenchmarkService":
        with open(Path(path), "rb") as f:
            raw = tomllib.load(f)
        return cls(raw.get("categories", {}))

    async def compare_to_category(
        self,
        category: str,
        element: MetadataElement,
        score: float,
    ) -> Optional[BenchmarkComparison]:
        breakpoints = self._table.get(category.lower(), {}).get(element.value)
        if not breakpoints:
            return None

        points = [(0.0, 0.0)]
        for key, pct in _PERCENTILE_KEYS:
            if key in breakpoints:
                points.append((float(breakpoints[key]), pct))
        points.append((100.0, 100.0))
        points.sort()

        percentile = round(_interpolate(score, points), 1)
        return BenchmarkComparison(
            element=element,
            category=category,
            score=score,
            percentile=percentile,
            category_median=breakpoints.get("p50"),
            label=_label(percentile),
        )
