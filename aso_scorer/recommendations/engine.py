"""
Recommendation candidates from the evaluation signals.

Generators
----------
ranking_keyword    High-value keyword counts in title and subtitle.
ranking_structure  Noise ratios, character usage, empty subtitle.
brand_alignment    Branded/generic balance, low-value dominance, overbranding.
conversion         Description hook, feature mentions, readability, CTA.

Each generator returns candidates; ``aso_scorer.recommendations.ranker``
deduplicates, sorts and splits them.

Message templates
-----------------
``recommendation_templates[id]`` in the resolved ruleset replaces the
default message of that recommendation. Templates are ``str.format``
strings over the recommendation's named values (for example
``{noise_pct}`` or ``{chars_used}``); a template naming a value the
recommendation does not carry falls back to the default message.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from aso_scorer.models.combo import ComboCoverage
from aso_scorer.models.kpi import KpiEngineResult
from aso_scorer.models.recommendation import Recommendation
from aso_scorer.models.scoring import ElementScoringResult
from aso_scorer.rules.context import EvaluationContext
from aso_scorer.rules.subtitle import incremental_keywords
from aso_scorer.taxonomy.metadata_taxonomy import (
    SEVERITY_IMPACT,
    BrandClassification,
    ComboType,
    MetadataElement,
    RecommendationCategory,
    RecommendationSeverity,
)
from aso_scorer.utils.numeric import round_int, safe_ratio

logger = logging.getLogger(__name__)

_CRITICAL = RecommendationSeverity.CRITICAL
_STRONG = RecommendationSeverity.STRONG
_MODERATE = RecommendationSeverity.MODERATE
_OPTIONAL = RecommendationSeverity.OPTIONAL

NOISE_THRESHOLD = 0.4
CHAR_USAGE_THRESHOLD = 70
HOOK_THRESHOLD = 70
WEAK_HOOK_THRESHOLD = 50
FEATURE_THRESHOLD = 60
READABILITY_THRESHOLD = 60
CTA_THRESHOLD = 50


@dataclass(frozen=True)
class RecommendationSignals:
    """Everything the generators read, collected once per evaluation."""

    title: ElementScoringResult
    subtitle: ElementScoringResult
    description: ElementScoringResult
    title_high_value_count: int = 0
    subtitle_incremental_count: int = 0
    title_noise_ratio: float = 0.0
    subtitle_noise_ratio: float = 0.0
    branded_combos: int = 0
    generic_combos: int = 0
    low_value_combos: int = 0
    brand_classified: int = 0
    generic_classified: int = 0
    brand_intelligence: bool = False
    overbranded: bool = False
    templates: Mapping[str, str] = field(default_factory=dict)


def collect_signals(
    ctx: EvaluationContext,
    elements: Mapping[MetadataElement, ElementScoringResult],
    kpi: Optional[KpiEngineResult] = None,
) -> RecommendationSignals:
    """Build ``RecommendationSignals`` from the evaluation context and results."""
    combos: ComboCoverage = ctx.combos
    valuable = [c for c in combos.all_combos if c.type != ComboType.LOW_VALUE]
    overbranded = False
    if kpi is not None and "overbranding_indicator" in kpi.kpis:
        overbranded = kpi.kpis["overbranding_indicator"].value >= 1

    return RecommendationSignals(
        title=elements[MetadataElement.TITLE],
        subtitle=elements[MetadataElement.SUBTITLE],
        description=elements[MetadataElement.DESCRIPTION],
        title_high_value_count=len(ctx.high_value_keywords(MetadataElement.TITLE)),
        subtitle_incremental_count=len(incremental_keywords(ctx)),
        title_noise_ratio=ctx.analysis(MetadataElement.TITLE).noise_ratio,
        subtitle_noise_ratio=ctx.analysis(MetadataElement.SUBTITLE).noise_ratio,
        branded_combos=combos.count_by_type(combos.all_combos, ComboType.BRANDED),
        generic_combos=combos.count_by_type(combos.all_combos, ComboType.GENERIC),
        low_value_combos=len(combos.low_value),
        brand_classified=sum(
            1 for c in valuable if c.brand_classification == BrandClassification.BRAND
        ),
        generic_classified=sum(
            1 for c in valuable if c.brand_classification == BrandClassification.GENERIC
        ),
        brand_intelligence=any(c.brand_classification is not None for c in combos.all_combos),
        overbranded=overbranded,
        templates=dict(ctx.ruleset.recommendation_templates),
    )


def render_message(
    rec_id: str,
    default: str,
    templates: Mapping[str, str],
    values: Mapping[str, Any],
) -> str:
    """Template for ``rec_id`` formatted with ``values``, else ``default``."""
    template = templates.get(rec_id)
    if template is None:
        return default
    try:
        return template.format(**values)
    except (KeyError, IndexError, ValueError, TypeError, AttributeError) as exc:
        logger.warning("Recommendation template '%s' unusable (%s); using default", rec_id, exc)
        return default


def _rec(
    signals: RecommendationSignals,
    rec_id: str,
    category: RecommendationCategory,
    severity: RecommendationSeverity,
    message: str,
    element: Optional[MetadataElement] = None,
    impact_offset: int = 0,
    **values: Any,
) -> Recommendation:
    """One candidate; ``message`` is a format string over ``values``."""
    return Recommendation(
        id=rec_id,
        category=category,
        severity=severity,
        impact_score=SEVERITY_IMPACT[severity] + impact_offset,
        message=render_message(rec_id, message.format(**values), signals.templates, values),
        element=element,
    )


def _rule_score(result: ElementScoringResult, rule_id: str) -> float:
    try:
        return result.rule(rule_id).score
    except KeyError:
        return 0.0


# ── Generators ────────────────────────────────────────────────────────────────


def ranking_keyword_recommendations(s: RecommendationSignals) -> list[Recommendation]:
    cat = RecommendationCategory.RANKING_KEYWORD
    recs: list[Recommendation] = []

    if s.title_high_value_count <= 1:
        recs.append(_rec(
            s, "title_low_high_value_keywords", cat, _CRITICAL,
            "[RANKING][critical] Title includes very few high-value discovery keywords "
            "({count}). Adding 1-2 intent terms typically increases ranking breadth.",
            MetadataElement.TITLE, count=s.title_high_value_count,
        ))
    elif s.title_high_value_count == 2:
        recs.append(_rec(
            s, "title_moderate_high_value_keywords", cat, _MODERATE,
            "[RANKING][moderate] Title has decent high-value keywords, but adding 1 more "
            "can help capture additional search queries.",
            MetadataElement.TITLE, count=s.title_high_value_count,
        ))

    if s.subtitle_incremental_count == 0:
        recs.append(_rec(
            s, "subtitle_no_incremental_keywords", cat, _CRITICAL,
            "[RANKING][critical] Subtitle adds no new high-value keywords. Consider adding "
            "intent phrases the title does not already cover.",
            MetadataElement.SUBTITLE, count=0,
        ))
    elif s.subtitle_incremental_count == 1:
        recs.append(_rec(
            s, "subtitle_low_incremental_keywords", cat, _STRONG,
            "[RANKING][strong] Subtitle adds only {count} new high-value keyword. Adding "
            "1-2 more can significantly expand search coverage.",
            MetadataElement.SUBTITLE, count=1,
        ))
    return recs


def _underutilized(
    result: ElementScoringResult,
    rule_id: str,
) -> Optional[tuple[int, int, int]]:
    """``(chars_used, max_chars, usage_pct)`` when the usage rule failed low."""
    try:
        rule = result.rule(rule_id)
    except KeyError:
        return None
    if rule.passed or rule.score >= CHAR_USAGE_THRESHOLD:
        return None
    used = result.metadata.characters_used
    limit = result.metadata.max_characters
    return used, limit, round_int(safe_ratio(used, limit) * 100)


def ranking_structure_recommendations(s: RecommendationSignals) -> list[Recommendation]:
    cat = RecommendationCategory.RANKING_STRUCTURE
    recs: list[Recommendation] = []

    if s.title_noise_ratio > NOISE_THRESHOLD:
        recs.append(_rec(
            s, "title_high_noise_ratio", cat, _STRONG,
            "[RANKING][strong] Title contains {noise_pct}% stopwords/filler. Reducing "
            "noise words can improve ranking clarity.",
            MetadataElement.TITLE, noise_pct=round_int(s.title_noise_ratio * 100),
        ))
    if s.subtitle_noise_ratio > NOISE_THRESHOLD:
        recs.append(_rec(
            s, "subtitle_high_noise_ratio", cat, _MODERATE,
            "[RANKING][moderate] Subtitle contains {noise_pct}% stopwords/filler. "
            "Prioritizing meaningful keywords can help ranking.",
            MetadataElement.SUBTITLE, noise_pct=round_int(s.subtitle_noise_ratio * 100),
        ))

    title_usage = _underutilized(s.title, "title_character_usage")
    if title_usage is not None and title_usage[2] < CHAR_USAGE_THRESHOLD:
        used, limit, pct = title_usage
        recs.append(_rec(
            s, "title_underutilized_characters", cat, _STRONG,
            "[RANKING][strong] Title uses only {chars_used}/{max_chars} characters "
            "({usage_pct}%). Adding more keywords can unlock additional search opportunities.",
            MetadataElement.TITLE, chars_used=used, max_chars=limit, usage_pct=pct,
        ))

    subtitle_usage = _underutilized(s.subtitle, "subtitle_character_usage")
    if subtitle_usage is not None:
        used, limit, pct = subtitle_usage
        if used == 0:
            recs.append(_rec(
                s, "subtitle_empty", cat, _CRITICAL,
                "[RANKING][critical] No subtitle set. The subtitle is a major ranking "
                "factor; adding one can double your keyword coverage.",
                MetadataElement.SUBTITLE,
            ))
        elif pct < CHAR_USAGE_THRESHOLD:
            recs.append(_rec(
                s, "subtitle_underutilized_characters", cat, _MODERATE,
                "[RANKING][moderate] Subtitle uses only {chars_used}/{max_chars} characters "
                "({usage_pct}%). Consider adding more discovery keywords.",
                MetadataElement.SUBTITLE, chars_used=used, max_chars=limit, usage_pct=pct,
            ))
    return recs


def brand_alignment_recommendations(s: RecommendationSignals) -> list[Recommendation]:
    """Brand-intelligence branch when any combo carries a brand verdict,
    combo-type branch otherwise."""
    cat = RecommendationCategory.BRAND_ALIGNMENT
    recs: list[Recommendation] = []

    if s.brand_intelligence:
        brand, generic = s.brand_classified, s.generic_classified
        if brand >= 4 and generic <= 2:
            recs.append(_rec(
                s, "brand_intelligence_too_brand_focused", cat, _STRONG,
                "[BRAND][strong] {brand} brand combos detected vs. {generic} generic discovery "
                "combos. Consider balancing with more non-branded phrases to reach "
                "non-brand-aware users.",
                brand=brand, generic=generic,
            ))
        if brand == 0 and generic > 3:
            recs.append(_rec(
                s, "brand_intelligence_missing_brand", cat, _MODERATE,
                "[BRAND][moderate] No brand-related combos detected. Consider including your "
                "app or brand name in strategic positions to improve branded search visibility.",
                brand=brand, generic=generic,
            ))
        if 2 <= brand <= 3 and generic >= 3:
            recs.append(_rec(
                s, "brand_intelligence_good_balance", cat, _OPTIONAL,
                "[BRAND][success] Good brand-generic balance: {brand} brand combos, {generic} "
                "generic combos. This supports both brand-aware and discovery searches.",
                impact_offset=-5, brand=brand, generic=generic,
            ))
    else:
        if s.branded_combos >= 4 and s.generic_combos <= 2:
            recs.append(_rec(
                s, "combo_too_brand_focused", cat, _STRONG,
                "[RANKING][strong] Strong branded coverage but limited generic discovery "
                "combos. Consider adding more generic phrases to reach non-brand-aware users.",
                branded=s.branded_combos, generic=s.generic_combos,
            ))
        if 0 < s.generic_combos <= 3:
            recs.append(_rec(
                s, "combo_low_generic_coverage", cat, _MODERATE,
                "[RANKING][moderate] Only {generic} generic discovery combos detected. Adding "
                "more non-branded phrases in title/subtitle can unlock additional search volume.",
                generic=s.generic_combos,
            ))

    if s.low_value_combos > 0 and s.low_value_combos >= s.generic_combos:
        recs.append(_rec(
            s, "combo_low_value_dominance", cat, _MODERATE,
            "[RANKING][moderate] {low_value} of your combinations are numeric or time-based "
            "(e.g. 'in 30 days'). These have limited impact on search; consider refocusing "
            "on intent-driven phrases.",
            low_value=s.low_value_combos,
        ))

    if s.overbranded:
        recs.append(_rec(
            s, "title_overbranded", cat, _STRONG,
            "[BRAND][strong] Most title combinations contain the brand. Freeing title space "
            "for generic discovery terms widens the search surface.",
            MetadataElement.TITLE,
        ))
    return recs


def conversion_recommendations(s: RecommendationSignals) -> list[Recommendation]:
    cat = RecommendationCategory.CONVERSION
    desc = MetadataElement.DESCRIPTION
    recs: list[Recommendation] = []

    hook = _rule_score(s.description, "description_hook_strength")
    if hook < HOOK_THRESHOLD:
        severity = _STRONG if hook < WEAK_HOOK_THRESHOLD else _MODERATE
        recs.append(_rec(
            s, "description_weak_hook", cat, severity,
            "[CONVERSION][{level}] Description opening lacks compelling hook words. "
            "Adding attention-grabbing terms (e.g. 'discover', 'transform', 'unlock') in "
            "the first sentence can boost engagement.",
            desc, level=severity.value, hook_score=round_int(hook),
        ))

    if _rule_score(s.description, "description_feature_mentions") < FEATURE_THRESHOLD:
        try:
            features = s.description.rule("description_feature_mentions").count or 0
        except KeyError:
            features = 0
        if features == 0:
            recs.append(_rec(
                s, "description_no_features", cat, _STRONG,
                "[CONVERSION][strong] Description contains no visible feature cues. Adding "
                "2-3 specific benefits can significantly improve conversion.",
                desc, features=0,
            ))
        else:
            recs.append(_rec(
                s, "description_few_features", cat, _MODERATE,
                "[CONVERSION][moderate] Description mentions only {features} feature{plural}. "
                "Adding 1-2 more can help users understand your value proposition.",
                desc, features=features, plural="" if features == 1 else "s",
            ))

    readability = _rule_score(s.description, "description_readability")
    if readability < READABILITY_THRESHOLD:
        recs.append(_rec(
            s, "description_low_readability", cat, _MODERATE,
            "[CONVERSION][moderate] Description readability score is {readability}/100. "
            "Shorter sentences and simpler language can improve comprehension.",
            desc, readability=round_int(readability),
        ))

    if _rule_score(s.description, "description_cta_strength") < CTA_THRESHOLD:
        recs.append(_rec(
            s, "description_weak_cta", cat, _OPTIONAL,
            "[CONVERSION][optional] Description lacks clear call-to-action phrases. Adding "
            "conversion-focused CTAs (e.g. 'download', 'start today', 'try free') can help "
            "drive installs.",
            desc,
        ))
    return recs


GENERATORS = (
    ranking_keyword_recommendations,
    ranking_structure_recommendations,
    brand_alignment_recommendations,
    conversion_recommendations,
)


def generate_candidates(signals: RecommendationSignals) -> list[Recommendation]:
    """All candidates from every generator, in generator order."""
    candidates: list[Recommendation] = []
    for generator in GENERATORS:
        candidates.extend(generator(signals))
    return candidates
