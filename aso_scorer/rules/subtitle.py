"""
Subtitle rules (secondary ranking factor).

The subtitle is judged by what it adds to the title. An empty subtitle
short-circuits every rule to score 0, failed.
"""

from __future__ import annotations

from typing import Mapping

from aso_scorer.rules.context import EvaluationContext, RuleOutcome
from aso_scorer.rules.title import character_usage_outcome
from aso_scorer.taxonomy.metadata_taxonomy import MetadataElement

_SUBTITLE = MetadataElement.SUBTITLE
_TITLE = MetadataElement.TITLE

NO_SUBTITLE = "No subtitle provided"


def _empty(ctx: EvaluationContext) -> bool:
    return not ctx.text(_SUBTITLE)


def _no_subtitle() -> RuleOutcome:
    return RuleOutcome(passed=False, score=0, message=NO_SUBTITLE)


def incremental_keywords(ctx: EvaluationContext) -> list[str]:
    """Subtitle keywords with relevance >= 2 that the title does not carry."""
    title_set = set(ctx.high_value_keywords(_TITLE))
    return [t for t in ctx.high_value_keywords(_SUBTITLE) if t not in title_set]


def subtitle_character_usage(ctx: EvaluationContext, th: Mapping[str, float]) -> RuleOutcome:
    return character_usage_outcome(
        ctx.text(_SUBTITLE), ctx.max_characters(_SUBTITLE), th, empty_message="No subtitle set",
    )


def subtitle_incremental_value(ctx: EvaluationContext, th: Mapping[str, float]) -> RuleOutcome:
    if _empty(ctx):
        return _no_subtitle()
    new = incremental_keywords(ctx)
    n = len(new)
    if n == 0:
        score = 20
    elif n == 1:
        score = 50
    elif n == 2:
        score = 75
    else:
        score = 95
    return RuleOutcome(
        passed=n >= th["min_keywords"],
        score=score,
        message=f"{n} new high-value keywords",
        evidence=tuple(new),
    )


def subtitle_combo_coverage(ctx: EvaluationContext, th: Mapping[str, float]) -> RuleOutcome:
    if _empty(ctx):
        return _no_subtitle()
    combos = ctx.combos.subtitle_incremental
    n = len(combos)
    if n == 0:
        score = 20
    elif n <= 2:
        score = 50
    elif n <= 5:
        score = 80
    else:
        score = 95
    return RuleOutcome(
        passed=n >= th["min_combos"],
        score=score,
        message=f"{n} new keyword combinations",
        evidence=tuple(c.text for c in combos[:5]),
    )


def subtitle_complementarity(ctx: EvaluationContext, th: Mapping[str, float]) -> RuleOutcome:
    """Overlap of high-value tokens with the title; less overlap is better."""
    if _empty(ctx):
        return _no_subtitle()
    title_set = set(ctx.high_value_keywords(_TITLE))
    subtitle_hv = ctx.high_value_keywords(_SUBTITLE)
    overlap = [t for t in subtitle_hv if t in title_set]
    ratio = len(overlap) / len(subtitle_hv) if subtitle_hv else 0.0

    if ratio < 0.3:
        message = "Excellent complementarity with title"
    elif ratio < 0.5:
        message = "Good complementarity"
    else:
        message = "Too much overlap with title"
    return RuleOutcome(
        passed=ratio < th["max_overlap"],
        score=max(0.0, (1 - ratio) * 100),
        message=message,
        evidence=tuple(overlap),
    )
