"""
KPI formulas: one registered function per KPI id.

Each formula maps ``KpiPrimitives`` to the KPI's raw value. Raw values are
not clamped here; ``aso_scorer.kpi.normalize`` clamps them to the
registered range.

``KPI_FORMULAS`` is filled by the ``@formula`` decorator at import and then
checked against ``KPI_REGISTRY``: a KPI without a formula, or a formula for
an unknown id, raises ``RegistryIntegrityError``.
"""

from __future__ import annotations

import math
from typing import Callable

from aso_scorer.errors import RegistryIntegrityError
from aso_scorer.kpi.primitives import KpiPrimitives
from aso_scorer.kpi.registry import KPI_REGISTRY
from aso_scorer.utils.numeric import safe_ratio

KpiFormula = Callable[[KpiPrimitives], float]

KPI_FORMULAS: dict[str, KpiFormula] = {}

OVERBRANDING_THRESHOLD = 0.7

HIGH_NOISE = 0.5
MODERATE_NOISE = 0.3
HIGH_NOISE_PENALTY = 20.0
MODERATE_NOISE_PENALTY = 10.0


def formula(kpi_id: str) -> Callable[[KpiFormula], KpiFormula]:
    """Register the decorated function as the formula for ``kpi_id``."""

    def _register(fn: KpiFormula) -> KpiFormula:
        if kpi_id in KPI_FORMULAS:
            raise RegistryIntegrityError(f"Formula for KPI '{kpi_id}' registered twice.")
        KPI_FORMULAS[kpi_id] = fn
        return fn

    return _register


# ── Shared helpers ────────────────────────────────────────────────────────────


def noise_penalty(noise_ratio: float) -> float:
    """Severity penalty added on top of the linear noise deduction."""
    if noise_ratio > HIGH_NOISE:
        return HIGH_NOISE_PENALTY
    if noise_ratio > MODERATE_NOISE:
        return MODERATE_NOISE_PENALTY
    return 0.0


def signal_quality(noise_ratio: float) -> float:
    """100 − noise% − severity penalty, floored at 0."""
    base = max(0.0, min(100.0, 100.0 - noise_ratio * 100.0))
    return max(0.0, base - noise_penalty(noise_ratio))


def hook_strength(action_verbs: int, benefit_words: int, meaningful_tokens: int) -> float:
    """Action (≤ 50) + benefit (≤ 30) + density (≤ 20) points, capped at 100."""
    if meaningful_tokens == 0:
        return 0.0
    action = min(action_verbs * 30.0, 50.0)
    benefit = min(benefit_words * 20.0, 30.0)
    density = min((action_verbs + benefit_words) / meaningful_tokens * 100.0, 20.0)
    return min(action + benefit + density, 100.0)


def log_signal(count: int) -> float:
    """Diminishing-returns scale: ln(n + 1) × 40, rounded, capped at 100."""
    return float(min(100, round(math.log(count + 1) * 40)))


# ── Clarity & structure ───────────────────────────────────────────────────────


@formula("title_char_usage")
def _title_char_usage(p: KpiPrimitives) -> float:
    return safe_ratio(p.title_char_count, p.title_char_limit) * 100


@formula("subtitle_char_usage")
def _subtitle_char_usage(p: KpiPrimitives) -> float:
    return safe_ratio(p.subtitle_char_count, p.subtitle_char_limit) * 100


@formula("title_word_count")
def _title_word_count(p: KpiPrimitives) -> float:
    return float(p.title_word_count)


@formula("subtitle_word_count")
def _subtitle_word_count(p: KpiPrimitives) -> float:
    return float(p.subtitle_word_count)


@formula("title_token_density")
def _title_token_density(p: KpiPrimitives) -> float:
    return safe_ratio(p.title_meaningful_count, p.title_token_count)


@formula("subtitle_token_density")
def _subtitle_token_density(p: KpiPrimitives) -> float:
    return safe_ratio(p.subtitle_meaningful_count, p.subtitle_token_count)


# ── Keyword architecture ──────────────────────────────────────────────────────


@formula("title_high_value_keyword_count")
def _title_high_value(p: KpiPrimitives) -> float:
    return float(p.title_high_value_count)


@formula("subtitle_high_value_incremental_keywords")
def _subtitle_incremental(p: KpiPrimitives) -> float:
    return float(p.subtitle_high_value_incremental_count)


@formula("title_noise_ratio")
def _title_noise(p: KpiPrimitives) -> float:
    return signal_quality(p.title_noise_ratio)


@formula("subtitle_noise_ratio")
def _subtitle_noise(p: KpiPrimitives) -> float:
    return signal_quality(p.subtitle_noise_ratio)


@formula("title_combo_count_generic")
def _title_generic_combos(p: KpiPrimitives) -> float:
    return float(p.title_generic_combo_count)


@formula("title_combo_count_branded")
def _title_branded_combos(p: KpiPrimitives) -> float:
    return float(p.title_branded_combo_count)


@formula("subtitle_combo_incremental_generic")
def _subtitle_generic_combos(p: KpiPrimitives) -> float:
    return float(p.subtitle_incremental_generic_combo_count)


@formula("subtitle_low_value_combo_ratio")
def _low_value_ratio(p: KpiPrimitives) -> float:
    return safe_ratio(p.low_value_combo_count, p.total_combo_count)


@formula("title_language_verb_pairs")
def _language_verb_pairs(p: KpiPrimitives) -> float:
    return float(p.title_language_verb_pairs)


@formula("total_unique_keyword_coverage")
def _unique_coverage(p: KpiPrimitives) -> float:
    return float(p.unique_meaningful_count)


# ── Hook strength ─────────────────────────────────────────────────────────────


@formula("hook_strength_title")
def _hook_title(p: KpiPrimitives) -> float:
    return hook_strength(p.title_action_verbs, p.title_benefit_words, p.title_meaningful_count)


@formula("hook_strength_subtitle")
def _hook_subtitle(p: KpiPrimitives) -> float:
    return hook_strength(
        p.subtitle_action_verbs, p.subtitle_benefit_words, p.subtitle_meaningful_count
    )


@formula("specificity_score")
def _specificity(p: KpiPrimitives) -> float:
    keywords = min((p.title_high_value_count + p.subtitle_high_value_incremental_count) * 15.0, 60.0)
    pairs = min(p.title_language_verb_pairs * 20.0, 40.0)
    return min(keywords + pairs, 100.0)


@formula("benefit_density")
def _benefit_density(p: KpiPrimitives) -> float:
    return safe_ratio(p.benefit_word_count, p.total_meaningful_count)


@formula("redundancy_penalty")
def _redundancy(p: KpiPrimitives) -> float:
    return p.repeated_token_count * 10.0


# ── Brand vs generic ──────────────────────────────────────────────────────────


@formula("brand_presence_title")
def _brand_title(p: KpiPrimitives) -> float:
    return float(p.brand_presence_title)


@formula("brand_presence_subtitle")
def _brand_subtitle(p: KpiPrimitives) -> float:
    return float(p.brand_presence_subtitle)


@formula("brand_combo_ratio")
def _brand_ratio(p: KpiPrimitives) -> float:
    return p.brand_ratio


@formula("generic_discovery_combo_ratio")
def _generic_ratio(p: KpiPrimitives) -> float:
    return p.generic_ratio


@formula("overbranding_indicator")
def _overbranding(p: KpiPrimitives) -> float:
    return 1.0 if p.brand_ratio > OVERBRANDING_THRESHOLD else 0.0


# ── Psychology alignment ──────────────────────────────────────────────────────


@formula("urgency_signal")
def _urgency(p: KpiPrimitives) -> float:
    return log_signal(p.urgency_count)


@formula("social_proof_signal")
def _social_proof(p: KpiPrimitives) -> float:
    return log_signal(p.social_proof_count)


@formula("benefit_keyword_count")
def _benefit_count(p: KpiPrimitives) -> float:
    return float(p.benefit_word_count)


@formula("action_verb_density")
def _action_density(p: KpiPrimitives) -> float:
    return safe_ratio(p.action_verb_count, p.total_meaningful_count)


# ── Intent alignment ──────────────────────────────────────────────────────────
# Denominator is every title + subtitle token, classified or not.


@formula("informational_intent_coverage_score")
def _informational(p: KpiPrimitives) -> float:
    d = p.intent_distribution
    return safe_ratio(d.informational, d.total) * 100


@formula("commercial_intent_coverage_score")
def _commercial(p: KpiPrimitives) -> float:
    d = p.intent_distribution
    return safe_ratio(d.commercial, d.total) * 100


@formula("transactional_intent_coverage_score")
def _transactional(p: KpiPrimitives) -> float:
    d = p.intent_distribution
    return safe_ratio(d.transactional, d.total) * 100


@formula("navigational_noise_ratio")
def _navigational_noise(p: KpiPrimitives) -> float:
    d = p.intent_distribution
    return safe_ratio(d.navigational + d.unclassified, d.total) * 100


def validate_formulas(formulas: dict[str, KpiFormula] = KPI_FORMULAS) -> None:
    """Every registered KPI has exactly one formula and vice versa.

    Raises:
        RegistryIntegrityError: Listing the missing or unknown ids.
    """
    registered = {k.id for k in KPI_REGISTRY}
    missing = sorted(registered - formulas.keys())
    unknown = sorted(formulas.keys() - registered)
    if missing:
        raise RegistryIntegrityError(f"KPIs without a formula: {missing}")
    if unknown:
        raise RegistryIntegrityError(f"Formulas for unregistered KPIs: {unknown}")


def compute_raw(kpi_id: str, primitives: KpiPrimitives) -> float:
    """Raw value of one KPI.

    Raises:
        KeyError: If ``kpi_id`` has no formula.
    """
    try:
        fn = KPI_FORMULAS[kpi_id]
    except KeyError:
        raise KeyError(
            f"No formula for KPI '{kpi_id}'. Available: {sorted(KPI_FORMULAS)}"
        ) from None
    return fn(primitives)


validate_formulas()
