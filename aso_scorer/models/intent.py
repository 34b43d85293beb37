"""Pydantic v2 models for search intent patterns and coverage."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from aso_scorer.taxonomy.metadata_taxonomy import IntentType


class IntentPattern(BaseModel):
    """One keyword pattern mapping to a search intent.

    Attributes:
        pattern:       Lowercase word or phrase.
        intent_type:   Intent the pattern signals.
        weight:        Pattern strength multiplier (> 0).
        priority:      Tie-breaking priority; also boosts the score.
        word_boundary: True → exact token match; False → substring match.
        active:        Inactive patterns are ignored.
    """

    model_config = ConfigDict(frozen=True)

    pattern:       str
    intent_type:   IntentType
    weight:        float = 1.0
    priority:      int = 100
    word_boundary: bool = True
    active:        bool = True

    @field_validator("pattern")
    @classmethod
    def normalize_pattern(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("Intent pattern must not be empty.")
        return v

    @field_validator("weight")
    @classmethod
    def positive_weight(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"Intent pattern weight must be > 0, got {v}.")
        return v

    @property
    def score(self) -> float:
        return self.weight * (1 + self.priority / 200)


class IntentDistribution(BaseModel):
    """Token counts (or percentages) per intent type."""

    model_config = ConfigDict(frozen=True)

    informational: int = 0
    commercial:    int = 0
    transactional: int = 0
    navigational:  int = 0
    unclassified:  int = 0

    @property
    def classified(self) -> int:
        return self.informational + self.commercial + self.transactional + self.navigational

    @property
    def total(self) -> int:
        return self.classified + self.unclassified

    def count(self, intent: IntentType) -> int:
        return getattr(self, intent.value)


class TokenIntentResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    token:           str
    intent_type:     IntentType
    matched_pattern: str
    score:           float


class IntentCoverage(BaseModel):
    """Intent coverage of one text field."""

    model_config = ConfigDict(frozen=True)

    score:                   int = 0
    total_tokens:            int = 0
    classified_tokens:       int = 0
    unclassified_tokens:     int = 0
    distribution:            IntentDistribution = IntentDistribution()
    distribution_percentage: IntentDistribution = IntentDistribution()
    classified_tokens_list:  list[TokenIntentResult] = []
    unclassified_tokens_list: list[str] = []
    patterns_used:           int = 0
    fallback_mode:           bool = False


class CombinedIntentCoverage(BaseModel):
    """Title + subtitle intent coverage, weighted into one score."""

    model_config = ConfigDict(frozen=True)

    title:    IntentCoverage = IntentCoverage()
    subtitle: IntentCoverage = IntentCoverage()
    overall_score: int = 0
    combined_distribution:            IntentDistribution = IntentDistribution()
    combined_distribution_percentage: IntentDistribution = IntentDistribution()
    dominant_intent: Optional[IntentType] = None
    assessment:      str = "VERY LOW"
    fallback_mode:   bool = False
