"""
Title rules (primary ranking factor).

Every evaluator takes ``(ctx, thresholds)`` and returns a ``RuleOutcome``.
``thresholds`` is the rule's defaults with any ruleset override merged in.
"""

from __future__ import annotations

from typing import Mapping, Optional

from aso_scorer.rules.context import EvaluationContext, RuleOutcome
from aso_scorer.taxonomy.metadata_taxonomy import ComboType, MetadataElement
from aso_scorer.utils.numeric import round_int

_TITLE = MetadataElement.TITLE


def character_usage_outcome(
    text: str,
    limit: int,
    th: Mapping[str, float],
    empty_message: Optional[str] = None,
) -> RuleOutcome:
    """Usage-percentage bands shared by the title and subtitle rules."""
    count = len(text)
    if count == 0 and empty_message is not None:
        return RuleOutcome(passed=False, score=0, message=empty_message)

    usage = count / limit * 100 if limit else 0.0
    if usage < th["low"]:
        score = 40
    elif usage < th["target_min"]:
        score = 60
    elif usage < th["good"]:
        score = 85
    elif usage <= th["target_max"]:
        score = 100
    else:
        score = 0
    return RuleOutcome(
        passed=th["target_min"] <= usage <= th["target_max"],
        score=score,
        message=f"Using {count}/{limit} characters ({round_int(usage)}%)",
    )


def title_character_usage(ctx: EvaluationContext, th: Mapping[str, float]) -> RuleOutcome:
    return character_usage_outcome(ctx.text(_TITLE), ctx.max_characters(_TITLE), th)


def title_unique_keywords(ctx: EvaluationContext, th: Mapping[str, float]) -> RuleOutcome:
    """Unique keywords with relevance >= 1, boosted by their average tier."""
    relevant = [t for t in ctx.analysis(_TITLE).keywords if ctx.oracle.relevance(t) >= 1]
    unique = list(dict.fromkeys(relevant))
    avg = ctx.oracle.average(relevant)

    score = min(100.0, min(80, len(unique) * 20) + avg * 10)
    return RuleOutcome(
        passed=len(unique) >= th["min_keywords"],
        score=score,
        message=f"{len(unique)} unique keywords (avg relevance: {avg:.1f})",
        evidence=tuple(unique),
    )


def _discovery_label(count: int, thresholds: Mapping[str, int]) -> str:
    for label in ("excellent", "good", "moderate"):
        if label in thresholds and count >= thresholds[label]:
            return label
    return "limited"


def title_combo_coverage(ctx: EvaluationContext, th: Mapping[str, float]) -> RuleOutcome:
    combos = [c for c in ctx.combos.title if c.type != ComboType.LOW_VALUE]
    n = len(combos)
    if n == 0:
        score = 20
    elif n <= 2:
        score = 50
    elif n <= 5:
        score = 75
    else:
        score = 90
    label = _discovery_label(n, ctx.ruleset.discovery_thresholds)
    return RuleOutcome(
        passed=n >= th["min_combos"],
        score=score,
        message=f"{n} meaningful keyword combinations ({label} discovery)",
        evidence=tuple(c.text for c in combos[:5]),
    )


def title_filler_penalty(ctx: EvaluationContext, th: Mapping[str, float]) -> RuleOutcome:
    analysis = ctx.analysis(_TITLE)
    noise = analysis.noise_ratio
    if noise > th["high_noise"]:
        penalty = 30
    elif noise > th["moderate_noise"]:
        penalty = 15
    else:
        penalty = 0
    return RuleOutcome(
        passed=noise <= th["moderate_noise"],
        score=max(0, 100 - penalty),
        message=f"{len(analysis.ignored)} filler tokens ({round_int(noise * 100)}% noise ratio)",
        evidence=tuple(analysis.ignored),
    )
