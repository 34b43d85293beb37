"""
Tests for aso_scorer/benchmark.py.

What we test
------------
TableBenchmarkService.compare_to_category():
  - Percentile interpolated linearly between breakpoints, 0 and 100 as ends.
  - Labels: below / in line with / above category.
  - Category lookup is case-insensitive; unknown category or element -> None.

TableBenchmarkService.from_toml():
  - Reads the ``[categories.<name>]`` table layout.
"""

from __future__ import annotations

import asyncio

import pytest

from aso_scorer.benchmark import TableBenchmarkService
from aso_scorer.taxonomy.metadata_taxonomy import MetadataElement

_TABLE = {"Education": {"title": {"p25": 55, "p50": 68, "p75": 80, "p90": 88}}}


def _compare(score: float, category: str = "education", element=MetadataElement.TITLE):
    service = TableBenchmarkService(_TABLE)
    return asyncio.run(service.compare_to_category(category, element, score))


class TestInterpolation:
    @pytest.mark.parametrize(
        "score, percentile",
        [(0, 0.0), (27.5, 12.5), (68, 50.0), (74, 62.5), (94, 95.0), (100, 100.0)],
    )
    def test_percentiles(self, score, percentile):
        assert _compare(score).percentile == pytest.approx(percentile)

    def test_median_reported(self):
        assert _compare(70).category_median == 68


class TestLabels:
    def test_labels(self):
        assert _compare(20).label == "below category"
        assert _compare(68).label == "in line with category"
        assert _compare(80).label == "above category"


class TestLookup:
    def test_case_insensitive_category(self):
        assert _compare(60, category="EDUCATION") is not None

    def test_unknown_category(self):
        assert _compare(60, category="games") is None

    def test_unknown_element(self):
        assert _compare(60, element=MetadataElement.DESCRIPTION) is None


class TestFromToml:
    def test_reads_categories(self, tmp_path):
        path = tmp_path / "benchmarks.toml"
        path.write_text(
            "[categories.finance]\n"
            "subtitle = { p25 = 40, p50 = 60, p75 = 70, p90 = 80 }\n",
            encoding="utf-8",
        )
        service = TableBenchmarkService.from_toml(path)
        result = asyncio.run(
            service.compare_to_category("finance", MetadataElement.SUBTITLE, 60)
        )
        assert result.percentile == pytest.approx(50.0)
        assert result.element == MetadataElement.SUBTITLE
