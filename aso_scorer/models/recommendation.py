"""Pydantic v2 models for recommendations."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

from aso_scorer.taxonomy.metadata_taxonomy import (
    MetadataElement,
    RecommendationCategory,
    RecommendationSeverity,
)


class Recommendation(BaseModel):
    """One actionable recommendation.

    ``id`` is stable across runs and is the deduplication key.
    """

    model_config = ConfigDict(frozen=True)

    id:           str
    category:     RecommendationCategory
    severity:     RecommendationSeverity
    impact_score: int
    message:      str
    element:      Optional[MetadataElement] = None


class RecommendationSet(BaseModel):
    """Ranked output: top ranking recommendations and top conversion ones."""

    model_config = ConfigDict(frozen=True)

    ranking:    list[Recommendation] = []
    conversion: list[Recommendation] = []

    @property
    def ranking_messages(self) -> list[str]:
        return [r.message for r in self.ranking]

    @property
    def conversion_messages(self) -> list[str]:
        return [r.message for r in self.conversion]
