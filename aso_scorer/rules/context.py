"""
Evaluation context handed to every rule evaluator.

The context is built once per evaluation, after tokenization and combo
generation, and is read-only. Evaluators receive it together with their
effective thresholds and return a ``RuleOutcome``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

from aso_scorer.models.combo import ComboCoverage
from aso_scorer.models.ruleset import MergedRuleSet
from aso_scorer.models.tokens import TokenizationResult
from aso_scorer.relevance.oracle import RelevanceOracle
from aso_scorer.rules.limits import max_characters
from aso_scorer.taxonomy.metadata_taxonomy import MetadataElement, Platform

HIGH_VALUE_RELEVANCE = 2


@dataclass(frozen=True)
class RuleOutcome:
    """What an evaluator returns; the evaluator adds id, weight and ancestry."""

    passed: bool
    score: float
    message: str
    evidence: tuple[str, ...] = ()
    count: Optional[int] = None


@dataclass(frozen=True)
class EvaluationContext:
    """Everything the rules may look at for one app.

    Attributes:
        platform: Decides character limits.
        texts:    Raw field text per element ("" when absent).
        analyses: Tokenization per element (with ruleset stopwords applied).
        oracle:   Relevance oracle bound to the resolved ruleset.
        combos:   Classified and enriched combo coverage.
        ruleset:  Resolved configuration (hook multipliers, thresholds, ...).
    """

    platform: Platform
    texts: Mapping[MetadataElement, str]
    analyses: Mapping[MetadataElement, TokenizationResult]
    oracle: RelevanceOracle
    combos: ComboCoverage
    ruleset: MergedRuleSet = field(default_factory=MergedRuleSet)

    def text(self, element: MetadataElement) -> str:
        return self.texts.get(element, "")

    def analysis(self, element: MetadataElement) -> TokenizationResult:
        return self.analyses[element]

    def max_characters(self, element: MetadataElement) -> int:
        return max_characters(self.platform, element)

    def unique_keywords(self, element: MetadataElement, min_relevance: int = 0) -> list[str]:
        """Unique keywords of a field in first-seen order, filtered by tier."""
        seen: dict[str, None] = {}
        for token in self.analysis(element).keywords:
            if token not in seen and self.oracle.relevance(token) >= min_relevance:
                seen[token] = None
        return list(seen)

    def high_value_keywords(self, element: MetadataElement) -> list[str]:
        return self.unique_keywords(element, HIGH_VALUE_RELEVANCE)
