"""
Tests for aso_scorer/recommendations/ranker.py.

What we test
------------
deduplicate():
  - One recommendation per id; the highest impact wins, first seen on ties.

sort_by_impact():
  - Impact descending, ties broken by id ascending (deterministic).

rank_recommendations():
  - Conversion recommendations go to ``conversion``, all others to ``ranking``.
  - At most 5 ranking and 3 conversion recommendations.
  - Empty input -> empty set.
"""

from __future__ import annotations

from aso_scorer.models.recommendation import Recommendation
from aso_scorer.recommendations.ranker import (
    MAX_CONVERSION,
    MAX_RANKING,
    deduplicate,
    rank_recommendations,
    sort_by_impact,
)
from aso_scorer.taxonomy.metadata_taxonomy import (
    RecommendationCategory,
    RecommendationSeverity,
)


def _rec(
    rec_id: str,
    impact: int = 40,
    category: RecommendationCategory = RecommendationCategory.RANKING_KEYWORD,
    message: str = "msg",
) -> Recommendation:
    return Recommendation(
        id=rec_id,
        category=category,
        severity=RecommendationSeverity.MODERATE,
        impact_score=impact,
        message=message,
    )


class TestDeduplicate:
    def test_highest_impact_wins(self):
        result = deduplicate([_rec("a", 40), _rec("a", 70), _rec("b", 20)])
        assert {r.id: r.impact_score for r in result} == {"a": 70, "b": 20}

    def test_first_seen_on_tie(self):
        result = deduplicate([_rec("a", 40, message="first"), _rec("a", 40, message="second")])
        assert [r.message for r in result] == ["first"]

    def test_empty(self):
        assert deduplicate([]) == []


class TestSortByImpact:
    def test_order(self):
        ordered = sort_by_impact([_rec("b", 40), _rec("c", 90), _rec("a", 40)])
        assert [r.id for r in ordered] == ["c", "a", "b"]


class TestRankRecommendations:
    def test_split_by_category(self):
        recs = rank_recommendations([
            _rec("keyword", 90),
            _rec("hook", 70, RecommendationCategory.CONVERSION),
            _rec("brand", 70, RecommendationCategory.BRAND_ALIGNMENT),
        ])
        assert [r.id for r in recs.ranking] == ["keyword", "brand"]
        assert [r.id for r in recs.conversion] == ["hook"]
        assert recs.conversion_messages == ["msg"]

    def test_limits(self):
        candidates = [_rec(f"r{i}", 10 + i) for i in range(8)] + [
            _rec(f"c{i}", 10 + i, RecommendationCategory.CONVERSION) for i in range(5)
        ]
        recs = rank_recommendations(candidates)
        assert len(recs.ranking) == MAX_RANKING == 5
        assert len(recs.conversion) == MAX_CONVERSION == 3
        assert recs.ranking[0].id == "r7"

    def test_custom_limits(self):
        recs = rank_recommendations([_rec("a"), _rec("b")], max_ranking=1)
        assert len(recs.ranking) == 1

    def test_empty(self):
        recs = rank_recommendations([])
        assert recs.ranking == []
        assert recs.conversion == []
