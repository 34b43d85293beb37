"""
Search intent coverage.

Token classification
--------------------
Each token is matched against every active pattern: word-boundary patterns
require an exact token match, the others a substring match. The pattern with
the highest ``weight * (1 + priority / 200)`` wins; ties go to the pattern
listed first (patterns arrive sorted by priority, descending).

Coverage
--------
Per field:   score = round(classified / total * 100), plus the distribution
             of tokens across the four intent types and "unclassified".
Combined:    round(title.score * 0.6 + subtitle.score * 0.4) by default;
             distributions are summed.

Combo intent
------------
Every matching pattern adds its score to its intent type. One type → that
type; several → the top type if it holds > 50% of the total, else "mixed";
none → "unknown".
"""

from __future__ import annotations

import re
from typing import Optional, Sequence

from aso_scorer.models.intent import (
    CombinedIntentCoverage,
    IntentCoverage,
    IntentDistribution,
    IntentPattern,
    TokenIntentResult,
)
from aso_scorer.taxonomy.metadata_taxonomy import ComboIntent, IntentType
from aso_scorer.utils.numeric import round_int, safe_ratio

_ASSESSMENT_BANDS: tuple[tuple[int, str], ...] = (
    (80, "EXCELLENT"),
    (60, "GOOD"),
    (40, "MODERATE"),
    (20, "LOW"),
)


def classify_token(token: str, patterns: Sequence[IntentPattern]) -> Optional[TokenIntentResult]:
    """Best-scoring pattern match for ``token``, or None."""
    t = token.lower()
    best: Optional[TokenIntentResult] = None
    for pattern in patterns:
        if not pattern.active:
            continue
        matched = t == pattern.pattern if pattern.word_boundary else pattern.pattern in t
        if not matched:
            continue
        if best is None or pattern.score > best.score:
            best = TokenIntentResult(
                token=token,
                intent_type=pattern.intent_type,
                matched_pattern=pattern.pattern,
                score=pattern.score,
            )
    return best


def _percentages(dist: IntentDistribution, total: int) -> IntentDistribution:
    return IntentDistribution(
        **{
            name: round_int(safe_ratio(getattr(dist, name), total) * 100)
            for name in IntentDistribution.model_fields
        }
    )


def compute_intent_coverage(
    tokens: Sequence[str],
    patterns: Sequence[IntentPattern],
    fallback_mode: bool = False,
) -> IntentCoverage:
    """Intent coverage of one field's tokens."""
    counts = {name: 0 for name in IntentDistribution.model_fields}
    classified: list[TokenIntentResult] = []
    unclassified: list[str] = []

    for token in tokens:
        match = classify_token(token, patterns)
        if match is None:
            counts["unclassified"] += 1
            unclassified.append(token)
        else:
            counts[match.intent_type.value] += 1
            classified.append(match)

    dist = IntentDistribution(**counts)
    total = len(tokens)
    return IntentCoverage(
        score=round_int(safe_ratio(dist.classified, total) * 100),
        total_tokens=total,
        classified_tokens=dist.classified,
        unclassified_tokens=dist.unclassified,
        distribution=dist,
        distribution_percentage=_percentages(dist, total),
        classified_tokens_list=classified,
        unclassified_tokens_list=unclassified,
        patterns_used=len(patterns),
        fallback_mode=fallback_mode,
    )


def dominant_intent(dist: IntentDistribution) -> Optional[IntentType]:
    """Intent type with the highest count (declaration order on ties), or None."""
    best: Optional[IntentType] = None
    best_count = 0
    for intent in IntentType:
        count = dist.count(intent)
        if count > best_count:
            best, best_count = intent, count
    return best


def coverage_assessment(score: int) -> str:
    for threshold, label in _ASSESSMENT_BANDS:
        if score >= threshold:
            return label
    return "VERY LOW"


def compute_combined_intent_coverage(
    title_tokens: Sequence[str],
    subtitle_tokens: Sequence[str],
    patterns: Sequence[IntentPattern],
    fallback_mode: bool = False,
    title_weight: float = 0.6,
    subtitle_weight: float = 0.4,
) -> CombinedIntentCoverage:
    """Title + subtitle coverage with a weighted overall score."""
    title = compute_intent_coverage(title_tokens, patterns, fallback_mode)
    subtitle = compute_intent_coverage(subtitle_tokens, patterns, fallback_mode)

    combined = IntentDistribution(
        **{
            name: getattr(title.distribution, name) + getattr(subtitle.distribution, name)
            for name in IntentDistribution.model_fields
        }
    )
    overall = round_int(title.score * title_weight + subtitle.score * subtitle_weight)
    return CombinedIntentCoverage(
        title=title,
        subtitle=subtitle,
        overall_score=overall,
        combined_distribution=combined,
        combined_distribution_percentage=_percentages(
            combined, len(title_tokens) + len(subtitle_tokens)
        ),
        dominant_intent=dominant_intent(combined),
        assessment=coverage_assessment(overall),
        fallback_mode=fallback_mode,
    )


def _matches_text(pattern: IntentPattern, text: str) -> bool:
    if pattern.word_boundary:
        return re.search(rf"\b{re.escape(pattern.pattern)}\b", text) is not None
    return pattern.pattern in text


def classify_combo_intent(text: str, patterns: Sequence[IntentPattern]) -> ComboIntent:
    """Intent annotation for a combo's text."""
    scores: dict[IntentType, float] = {}
    lowered = text.lower()
    for pattern in patterns:
        if pattern.active and _matches_text(pattern, lowered):
            scores[pattern.intent_type] = scores.get(pattern.intent_type, 0.0) + pattern.score

    if not scores:
        return ComboIntent.UNKNOWN
    if len(scores) == 1:
        return ComboIntent(next(iter(scores)).value)

    total = sum(scores.values())
    top_intent, top_score = max(scores.items(), key=lambda kv: kv[1])
    if top_score / total > 0.5:
        return ComboIntent(top_intent.value)
    return ComboIntent.MIXED
