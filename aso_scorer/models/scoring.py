"""
Pydantic v2 models for rule evaluation output.

``RuleEvaluationResult`` is one rule's verdict; ``ElementScoringResult``
folds a field's rule verdicts into a weighted 0–100 score. Both are created
once per evaluation and never mutated.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from aso_scorer.taxonomy.metadata_taxonomy import MetadataElement, Scope


class RuleEvaluationResult(BaseModel):
    """One rule's verdict.

    Attributes:
        rule_id:  Registry id of the rule.
        passed:   Whether the rule's pass condition held.
        score:    0–100.
        weight:   Effective (normalized) weight within the element.
        message:  Human-readable verdict.
        evidence: Tokens, combos or figures that support the verdict.
        count:    Items the rule counted (mentions, verbs), for counting rules.
        ancestry: Scope that supplied the effective rule configuration.
    """

    model_config = ConfigDict(frozen=True)

    rule_id:  str
    passed:   bool
    score:    float
    weight:   float
    message:  str
    evidence: list[str] = []
    count:    Optional[int] = None
    ancestry: Scope = Scope.BASE

    @field_validator("score")
    @classmethod
    def score_in_range(cls, v: float) -> float:
        if not 0.0 <= v <= 100.0:
            raise ValueError(f"Rule score must be in [0, 100], got {v}.")
        return v


class ElementMetadata(BaseModel):
    """Field-level facts shown alongside the element score."""

    model_config = ConfigDict(frozen=True)

    characters_used: int = 0
    max_characters:  int = 0
    keywords:        list[str] = []
    combos:          list[str] = []
    noise_ratio:     float = 0.0


class ElementScoringResult(BaseModel):
    """One field's verdict: weighted score plus the rule breakdown."""

    model_config = ConfigDict(frozen=True)

    element:         MetadataElement
    score:           int
    rule_results:    list[RuleEvaluationResult] = []
    recommendations: list[str] = []
    insights:        list[str] = []
    metadata:        ElementMetadata = ElementMetadata()

    @field_validator("score")
    @classmethod
    def score_in_range(cls, v: int) -> int:
        if not 0 <= v <= 100:
            raise ValueError(f"Element score must be in [0, 100], got {v}.")
        return v

    def rule(self, rule_id: str) -> RuleEvaluationResult:
        """Look up one rule result by id.

        Raises:
            KeyError: If the rule did not run for this element.
        """
        for result in self.rule_results:
            if result.rule_id == rule_id:
                return result
        available = [r.rule_id for r in self.rule_results]
        raise KeyError(f"Rule '{rule_id}' not evaluated. Available: {available}")


class KeywordCoverage(BaseModel):
    """Unique keywords contributed by each field.

    Each list is sorted by relevance (descending), then first-seen position.
    """

    model_config = ConfigDict(frozen=True)

    title_keywords:             list[str] = []
    subtitle_new_keywords:      list[str] = []
    description_new_keywords:   list[str] = []
    title_ignored_count:        int = 0
    subtitle_ignored_count:     int = 0
    description_ignored_count:  int = 0

    @property
    def total_unique(self) -> int:
        return (
            len(self.title_keywords)
            + len(self.subtitle_new_keywords)
            + len(self.description_new_keywords)
        )
