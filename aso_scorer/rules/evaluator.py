"""
Rule evaluator: runs an element's rules and folds them into a score.

Effective rule configuration
----------------------------
For each registered rule, ``rule_overrides[rule_id]`` in the resolved
ruleset may replace the weight and/or merge thresholds over the defaults.
Weights are then re-normalized within the element so they sum to 1.

Error boundary
--------------
An exception raised by an evaluator is turned into a zero-score, failed
result ("Error evaluating rule: <exc>") and logged; the other rules of the
element still run.

Scores
------
element score  = round_half_up(Σ rule.score × rule.weight), in [0, 100]
ranking score  = Σ element score × ELEMENT_WEIGHTS (title 0.65, subtitle 0.35)
conversion     = description element score
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping

from aso_scorer.combos.generator import keyword_windows
from aso_scorer.models.ruleset import MergedRuleSet
from aso_scorer.models.scoring import (
    ElementMetadata,
    ElementScoringResult,
    KeywordCoverage,
    RuleEvaluationResult,
)
from aso_scorer.rules.context import EvaluationContext
from aso_scorer.rules.limits import ELEMENT_WEIGHTS
from aso_scorer.rules.registry import RuleConfig, rules_for
from aso_scorer.taxonomy.metadata_taxonomy import ComboType, MetadataElement, Scope
from aso_scorer.utils.numeric import clamp, round_int

logger = logging.getLogger(__name__)

DEFAULT_MAX_DESCRIPTION_KEYWORDS = 20
DESCRIPTION_COMBO_LIMIT = 20


@dataclass(frozen=True)
class EffectiveRule:
    """A registered rule with ruleset overrides applied."""

    config: RuleConfig
    weight: float
    thresholds: Mapping[str, float]
    ancestry: Scope


def effective_rules(element: MetadataElement, ruleset: MergedRuleSet) -> list[EffectiveRule]:
    """Registered rules of ``element`` with weights re-normalized to sum 1."""
    staged: list[tuple[RuleConfig, float, dict[str, float], Scope]] = []
    for rule in rules_for(element):
        override = ruleset.rule_overrides.get(rule.id)
        weight = rule.weight
        thresholds = dict(rule.thresholds)
        ancestry = Scope.BASE
        if override is not None:
            if override.weight is not None:
                weight = override.weight
            thresholds.update(override.thresholds)
            ancestry = ruleset.origin("rule_overrides", rule.id)
        staged.append((rule, weight, thresholds, ancestry))

    total = sum(w for _, w, _, _ in staged)
    return [
        EffectiveRule(rule, w / total if total > 0 else 0.0, th, anc)
        for rule, w, th, anc in staged
    ]


def evaluate_rule(rule: EffectiveRule, ctx: EvaluationContext) -> RuleEvaluationResult:
    """Run one rule inside the error boundary."""
    try:
        outcome = rule.config.evaluator(ctx, rule.thresholds)
    except Exception as exc:
        logger.warning("Rule '%s' failed: %s", rule.config.id, exc)
        return RuleEvaluationResult(
            rule_id=rule.config.id,
            passed=False,
            score=0.0,
            weight=rule.weight,
            message=f"Error evaluating rule: {exc}",
            evidence=[str(exc)],
            ancestry=rule.ancestry,
        )
    return RuleEvaluationResult(
        rule_id=rule.config.id,
        passed=outcome.passed,
        score=clamp(float(outcome.score), 0.0, 100.0),
        weight=rule.weight,
        message=outcome.message,
        evidence=list(outcome.evidence),
        count=outcome.count,
        ancestry=rule.ancestry,
    )


def _element_combos(element: MetadataElement, ctx: EvaluationContext) -> list[str]:
    if element == MetadataElement.TITLE:
        combos = [c for c in ctx.combos.title if c.type != ComboType.LOW_VALUE]
    elif element == MetadataElement.SUBTITLE:
        combos = ctx.combos.subtitle_incremental
    else:
        windows = keyword_windows(ctx.analysis(element).keywords, ctx.oracle)
        return [" ".join(w) for w in windows[:DESCRIPTION_COMBO_LIMIT]]
    return [c.text for c in combos]


def evaluate_element(element: MetadataElement, ctx: EvaluationContext) -> ElementScoringResult:
    """Score one field.

    Returns:
        ``ElementScoringResult`` whose ``recommendations`` are the messages of
        failed rules and whose ``insights`` are those of passed rules.
    """
    results = [evaluate_rule(rule, ctx) for rule in effective_rules(element, ctx.ruleset)]
    weighted = sum(r.score * r.weight for r in results)
    score = int(clamp(round_int(weighted), 0, 100))

    analysis = ctx.analysis(element)
    metadata = ElementMetadata(
        characters_used=len(ctx.text(element)),
        max_characters=ctx.max_characters(element),
        keywords=ctx.unique_keywords(element),
        combos=_element_combos(element, ctx),
        noise_ratio=analysis.noise_ratio,
    )
    return ElementScoringResult(
        element=element,
        score=score,
        rule_results=results,
        recommendations=[r.message for r in results if not r.passed],
        insights=[r.message for r in results if r.passed],
        metadata=metadata,
    )


def ranking_score(elements: Mapping[MetadataElement, ElementScoringResult]) -> int:
    """Weighted title + subtitle score (description carries weight 0)."""
    total = sum(
        result.score * ELEMENT_WEIGHTS[element]
        for element, result in elements.items()
    )
    return int(clamp(round_int(total), 0, 100))


def conversion_score(elements: Mapping[MetadataElement, ElementScoringResult]) -> int:
    description = elements.get(MetadataElement.DESCRIPTION)
    return description.score if description is not None else 0


def _ranked(tokens: list[str], ctx: EvaluationContext) -> list[str]:
    order = {t: i for i, t in enumerate(tokens)}
    return sorted(tokens, key=lambda t: (-ctx.oracle.relevance(t), order[t]))


def keyword_coverage(
    ctx: EvaluationContext,
    max_description_keywords: int = DEFAULT_MAX_DESCRIPTION_KEYWORDS,
) -> KeywordCoverage:
    """Unique keywords each field adds, most relevant first."""
    title_kw = ctx.unique_keywords(MetadataElement.TITLE)
    seen = set(title_kw)
    subtitle_new = [t for t in ctx.unique_keywords(MetadataElement.SUBTITLE) if t not in seen]
    seen.update(subtitle_new)
    description_new = [
        t for t in ctx.unique_keywords(MetadataElement.DESCRIPTION) if t not in seen
    ]
    return KeywordCoverage(
        title_keywords=_ranked(title_kw, ctx),
        subtitle_new_keywords=_ranked(subtitle_new, ctx),
        description_new_keywords=_ranked(description_new, ctx)[:max_description_keywords],
        title_ignored_count=len(ctx.analysis(MetadataElement.TITLE).ignored),
        subtitle_ignored_count=len(ctx.analysis(MetadataElement.SUBTITLE).ignored),
        description_ignored_count=len(ctx.analysis(MetadataElement.DESCRIPTION).ignored),
    )
