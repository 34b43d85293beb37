"""
Pydantic v2 models for the evaluation result.

``EvaluationResult`` is the unit the engine hands back to callers and the
unit a persistence layer would store. It is complete even when parts of
the configuration or a collaborator failed; ``provenance`` says what
degraded.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from aso_scorer.models.app import BenchmarkComparison
from aso_scorer.models.combo import ComboCoverage
from aso_scorer.models.intent import CombinedIntentCoverage
from aso_scorer.models.kpi import KpiEngineResult
from aso_scorer.models.recommendation import RecommendationSet
from aso_scorer.models.ruleset import InheritanceChain, LeakWarning
from aso_scorer.models.scoring import ElementScoringResult, KeywordCoverage
from aso_scorer.taxonomy.metadata_taxonomy import MetadataElement, Platform, Scope


class ProvenanceBlock(BaseModel):
    """Where the effective configuration came from and what fell back.

    Attributes:
        vertical_id / market_id: Detected (or given) scope identifiers.
        inheritance_chain:    Ids of the layers that took part in the merge.
        ancestry:             Overridden field (or ``field.key``) → scope.
        leak_warnings:        Overrides that do not fit the app's category.
        fallback_notes:       One note per configuration layer that failed to load.
        ruleset_source:       "code" (base only) or "hybrid".
        intent_fallback_mode: Intent coverage ran on the fallback pattern set.
        brand_available:      The brand collaborator returned brand info.
    """

    model_config = ConfigDict(frozen=True)

    vertical_id:          str = "base"
    market_id:            Optional[str] = None
    inheritance_chain:    InheritanceChain = InheritanceChain()
    ancestry:             dict[str, Scope] = {}
    leak_warnings:        list[LeakWarning] = []
    fallback_notes:       list[str] = []
    ruleset_source:       Literal["code", "hybrid"] = "code"
    intent_fallback_mode: bool = False
    brand_available:      bool = False


class EvaluationResult(BaseModel):
    """Full verdict for one app listing.

    Attributes:
        overall_score:    Ranking score (title 0.65 + subtitle 0.35), 0–100.
        conversion_score: Description element score, 0–100.
        elements:         Per-field rule breakdown.
        keyword_coverage: Unique keywords each field contributes.
        combo_coverage:   Classified and enriched combos.
        kpi:              KPI vector, family and overall KPI scores.
        intent:           Combined title + subtitle intent coverage.
        recommendations:  Ranked ranking / conversion recommendations.
        benchmarks:       Advisory category comparisons (may be empty).
        provenance:       Configuration provenance and fallbacks.
    """

    model_config = ConfigDict(frozen=True)

    platform:         Platform
    overall_score:    int
    conversion_score: int
    elements:         dict[MetadataElement, ElementScoringResult]
    keyword_coverage: KeywordCoverage
    combo_coverage:   ComboCoverage
    kpi:              KpiEngineResult
    intent:           CombinedIntentCoverage
    recommendations:  RecommendationSet
    benchmarks:       list[BenchmarkComparison] = []
    provenance:       ProvenanceBlock = ProvenanceBlock()

    @field_validator("overall_score", "conversion_score")
    @classmethod
    def score_in_range(cls, v: int) -> int:
        if not 0 <= v <= 100:
            raise ValueError(f"Score must be in [0, 100], got {v}.")
        return v

    def element(self, element: MetadataElement) -> ElementScoringResult:
        return self.elements[element]
