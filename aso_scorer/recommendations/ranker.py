"""
Recommendation ranker: deduplicate, sort and split candidates.

Usage flow
----------
1. deduplicate(candidates)     -> one recommendation per id (highest impact)
2. sort_by_impact(recs)        -> impact descending, then id
3. rank_recommendations(recs)  -> RecommendationSet
   ranking    : top ``MAX_RANKING`` non-conversion recommendations
   conversion : top ``MAX_CONVERSION`` conversion recommendations
"""

from __future__ import annotations

from aso_scorer.models.recommendation import Recommendation, RecommendationSet
from aso_scorer.taxonomy.metadata_taxonomy import RecommendationCategory

MAX_RANKING = 5
MAX_CONVERSION = 3


def deduplicate(candidates: list[Recommendation]) -> list[Recommendation]:
    """Keep the highest-impact recommendation per id (first seen on ties)."""
    best: dict[str, Recommendation] = {}
    for rec in candidates:
        existing = best.get(rec.id)
        if existing is None or rec.impact_score > existing.impact_score:
            best[rec.id] = rec
    return list(best.values())


def sort_by_impact(recs: list[Recommendation]) -> list[Recommendation]:
    return sorted(recs, key=lambda r: (-r.impact_score, r.id))


def rank_recommendations(
    candidates: list[Recommendation],
    max_ranking: int = MAX_RANKING,
    max_conversion: int = MAX_CONVERSION,
) -> RecommendationSet:
    """Deduplicate, sort and split candidates into ranking and conversion lists."""
    ordered = sort_by_impact(deduplicate(candidates))
    ranking = [r for r in ordered if r.category != RecommendationCategory.CONVERSION]
    conversion = [r for r in ordered if r.category == RecommendationCategory.CONVERSION]
    return RecommendationSet(
        ranking=ranking[:max_ranking],
        conversion=conversion[:max_conversion],
    )
